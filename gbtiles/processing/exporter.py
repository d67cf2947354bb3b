"""
Tile export pipeline.

This module runs the whole conversion for a sprite:
1. Validating the settings against the sprite (alignment, slices, frames).
2. Discovering the regions of every selected frame.
3. Encoding each region and registering it in the deduplication index.
4. Collecting the tile bank and one tilemap per frame.

Nothing is written to disk here; see gbtiles.export.writer.
"""

import logging
import time
from typing import Callable, List, Optional

from gbtiles.dedupe import DeduplicationIndex
from gbtiles.encoding.tile_encoder import TILE_SIZE
from gbtiles.errors import ConfigError
from gbtiles.models import ExportConfig, ExportMode, ExportResult, Region, SortBy
from gbtiles.partitioning.region_partitioner import (
    check_alignment,
    discover_regions,
    encode_region,
    row_width,
    sub_tile_origins,
)

# Set up logging
logger = logging.getLogger("gbtiles.processing.exporter")

# Tile IDs are written to the tilemap as single bytes
MAX_TILEMAP_TILES = 256


def make_label(index: int, region: Region, config: ExportConfig) -> str:
    """
    Build the label line written before a tile bank entry.

    Args:
        index: 1-based position of the region within its frame
        region: The region being exported
        config: Export settings

    Returns:
        The label line, including its trailing newline
    """
    if config.asm_labels:
        if config.mode == ExportMode.SLICES and config.sort_by == SortBy.NAME:
            return f"{region.name}:: ; Tile 0x{index:02X}\n"
        return f"Sprite{index:02X}:: ; Tile 0x{index:02X}\n"
    return f"; Tile 0x{index:02X} | Pos: {region.name}\n"


def validate_export(sprite, config: ExportConfig) -> List[int]:
    """
    Check that the sprite can be exported with the given settings.

    Returns:
        The zero-based frame indices to export

    Raises:
        AlignmentError: Grid mode and the sprite is not a multiple of the tile size
        ConfigError: Slice mode and the sprite has no slices, or a slice's
            tiles run past the edge of the sprite
        StateError: The frame selection is invalid
    """
    if config.mode == ExportMode.GRID:
        tile_width, tile_height = config.tile_size.dimensions
        check_alignment(sprite.width, sprite.height, tile_width, tile_height)
        return sprite.frame_list(config.only_current)

    if not sprite.slices:
        raise ConfigError("No slices found!")

    frames = sprite.frame_list(config.only_current)
    for frame in frames:
        for region in sprite.regions(frame):
            for x, y in sub_tile_origins(region):
                if x + TILE_SIZE > sprite.width or y + TILE_SIZE > sprite.height:
                    raise ConfigError(
                        f"Slice '{region.name}' ({region.width}x{region.height} at "
                        f"{region.x},{region.y}) on frame {frame + 1} runs past the "
                        f"{sprite.width}x{sprite.height} sprite."
                    )
    return frames


def export_sprite(
    sprite,
    config: Optional[ExportConfig] = None,
    progress_callback: Optional[Callable[[int, str], None]] = None,
) -> ExportResult:
    """
    Convert a sprite into a tile bank and per-frame tilemaps.

    Args:
        sprite: Sprite (see gbtiles.sprite) to export
        config: Export settings (defaults to ExportConfig())
        progress_callback: Optional function to report progress (percentage, step_name)

    Returns:
        ExportResult with the tile bank, one frame map per exported frame and
        the tilemap row width

    Raises:
        AlignmentError, ConfigError, StateError: Before any frame is processed
    """
    config = config or ExportConfig()
    start_time = time.time()

    def _report_progress(percent: int, step: str):
        if progress_callback:
            progress_callback(percent, step)

    frames = validate_export(sprite, config)
    # All frames are discovered before any tile is encoded
    frame_regions = [discover_regions(sprite, frame, config) for frame in frames]

    _report_progress(0, "Starting export")
    logger.info(
        f"Exporting {len(frames)} frame(s) of {sprite.width}x{sprite.height} sprite "
        f"({config.mode.value} mode, {config.tile_format.label})"
    )

    index = DeduplicationIndex(enabled=config.dedupe)
    frame_maps = []

    for done, (frame, regions) in enumerate(zip(frames, frame_regions)):
        img = sprite.render_frame(frame)
        frame_map = []

        for i, region in enumerate(regions, start=1):
            data = encode_region(img, region, config.tile_format)
            label = make_label(i, region, config)
            frame_map.append(index.register(data, label))

        frame_maps.append(frame_map)
        logger.debug(
            f"Frame {frame + 1}: {len(regions)} regions, {len(index)} tiles so far"
        )
        _report_progress(int((done + 1) * 100 / len(frames)), f"Frame {frame + 1}")

    if len(index) > MAX_TILEMAP_TILES:
        logger.warning(
            f"Tile bank has {len(index)} tiles; tilemap entries above "
            f"${MAX_TILEMAP_TILES - 1:02x} do not fit in a byte"
        )

    logger.info(
        f"Export produced {len(index)} tiles in {time.time() - start_time:.2f} seconds"
    )

    return ExportResult(
        tile_bank=index.records,
        frame_maps=frame_maps,
        frames=frames,
        row_width=row_width(sprite, config),
        settings=config,
    )
