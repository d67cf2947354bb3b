"""
Region discovery for exports.

A region is the unit written as one tile bank entry. In grid mode the canvas
is cut into equal tiles (8x8 up to 32x32); in slice mode each named slice is
a region. Regions larger than 8x8 are encoded as a sequence of 8x8 sub-tiles,
column by column.
"""

import logging
from typing import List, Optional, Tuple

from gbtiles.encoding.tile_encoder import TILE_SIZE, encode_8x8
from gbtiles.errors import AlignmentError, ConfigError
from gbtiles.models import Direction, ExportConfig, ExportMode, Region, SortBy

logger = logging.getLogger("gbtiles.partitioning.region_partitioner")


def check_alignment(width, height, tile_width, tile_height):
    """Raise AlignmentError unless the image is a whole number of tiles."""
    if width % tile_width != 0 or height % tile_height != 0:
        raise AlignmentError(width, height, tile_width, tile_height)


def grid_regions(width, height, tile_width, tile_height, direction) -> List[Region]:
    """
    Cut a canvas into equal tiles.

    Args:
        width: Canvas width in pixels
        height: Canvas height in pixels
        tile_width: Tile width in pixels
        tile_height: Tile height in pixels
        direction: Direction.HORIZONTAL walks rows first, VERTICAL walks columns first

    Returns:
        Regions named "x,y" in traversal order
    """
    check_alignment(width, height, tile_width, tile_height)

    if Direction(direction) == Direction.HORIZONTAL:
        positions = [
            (x, y)
            for y in range(0, height, tile_height)
            for x in range(0, width, tile_width)
        ]
    else:
        positions = [
            (x, y)
            for x in range(0, width, tile_width)
            for y in range(0, height, tile_height)
        ]

    return [
        Region(x=x, y=y, width=tile_width, height=tile_height, name=f"{x},{y}")
        for x, y in positions
    ]


def sort_regions(regions, sort_by) -> List[Region]:
    """Sort slice regions by name (case-insensitive) or by position (rows, then columns)."""
    if SortBy(sort_by) == SortBy.NAME:
        return sorted(regions, key=lambda r: r.name.lower())
    return sorted(regions, key=lambda r: (r.y, r.x))


def discover_regions(sprite, frame, config: ExportConfig) -> List[Region]:
    """
    Collect the regions to export for one frame.

    Args:
        sprite: Sprite providing width, height and regions(frame)
        frame: Zero-based frame index
        config: Export settings

    Returns:
        Regions in export order

    Raises:
        AlignmentError: Grid mode and the sprite is not a multiple of the tile size
        ConfigError: Slice mode and no slices exist on the frame
    """
    if config.mode == ExportMode.SLICES:
        regions = sprite.regions(frame)
        if not regions:
            raise ConfigError("No slices found!")
        return sort_regions(regions, config.sort_by)

    tile_width, tile_height = config.tile_size.dimensions
    return grid_regions(
        sprite.width, sprite.height, tile_width, tile_height, config.direction
    )


def row_width(sprite, config: ExportConfig) -> Optional[int]:
    """
    Number of tilemap entries per row.

    Grid mode wraps at the number of tiles along the traversal direction.
    Slice mode returns None: each frame's map is written as a single row.
    """
    if config.mode == ExportMode.SLICES:
        return None

    tile_width, tile_height = config.tile_size.dimensions
    if config.direction == Direction.HORIZONTAL:
        return sprite.width // tile_width
    return sprite.height // tile_height


def sub_tile_origins(region: Region) -> List[Tuple[int, int]]:
    """Return the absolute origins of a region's 8x8 sub-tiles, column by column."""
    return [
        (region.x + tx, region.y + ty)
        for tx in range(0, region.width, TILE_SIZE)
        for ty in range(0, region.height, TILE_SIZE)
    ]


def encode_region(sampler, region: Region, tile_format) -> str:
    """Encode every 8x8 sub-tile of a region and join them with newlines."""
    sub_tiles = [
        encode_8x8(sampler, x, y, tile_format) for x, y in sub_tile_origins(region)
    ]
    return "\n".join(sub_tiles)
