"""
Export functionality for tile data.

This module provides tools for writing export results as RGBDS include
files: the tile bank and the per-frame tilemap.
"""
