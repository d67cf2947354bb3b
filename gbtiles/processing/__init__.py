"""
Export pipeline.
"""

from gbtiles.processing.exporter import export_sprite, make_label, validate_export

__all__ = ["export_sprite", "make_label", "validate_export"]
