"""
gbtiles - Game Boy tile exporter for the RGBDS assembler.

Converts 4-color indexed images into RGBDS tile data and tilemaps.
"""

__version__ = "1.1.0"
