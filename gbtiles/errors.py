"""
Exceptions raised while preparing or running a tile export.

Every error here is raised before anything is written to disk.
"""


class GBTilesError(Exception):
    """Base class for all gbtiles errors."""


class ConfigError(GBTilesError, ValueError):
    """Invalid export settings, output paths or input image."""


class AlignmentError(ConfigError):
    """Image size is not a multiple of the grid tile size."""

    def __init__(self, width, height, tile_width, tile_height):
        self.width = width
        self.height = height
        self.tile_width = tile_width
        self.tile_height = tile_height
        super().__init__(
            f"Sprite must be multiple of {tile_width}x{tile_height}. "
            f"Got {width}x{height}."
        )


class StateError(GBTilesError, RuntimeError):
    """The sprite cannot be exported in its current state (e.g. no frames)."""
