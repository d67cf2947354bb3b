"""
RGBDS output files for an export result.

This module renders the tile bank (``*-tiles.inc``) and the tilemap
(``*-map.inc``) and writes them to disk.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from gbtiles import __version__
from gbtiles.errors import ConfigError
from gbtiles.models import ExportMode, ExportResult

logger = logging.getLogger("gbtiles.export.writer")

TILES_SUFFIX = "-tiles.inc"
MAP_SUFFIX = "-map.inc"


def default_output_paths(image_path) -> Tuple[str, str]:
    """
    Default tile bank and tilemap paths, next to the source image.

    Args:
        image_path: Path to the source image

    Returns:
        Tuple of (tile_file, map_file)
    """
    path = Path(image_path)
    return (
        str(path.with_name(path.stem + TILES_SUFFIX)),
        str(path.with_name(path.stem + MAP_SUFFIX)),
    )


def validate_output_path(path):
    """Raise ConfigError unless a file can be created at path."""
    if not path:
        raise ConfigError("No output file selected.")
    if os.path.isdir(path):
        raise ConfigError(f"Output path '{path}' is a directory.")
    parent = os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(parent):
        raise ConfigError(f"Output directory '{parent}' does not exist.")


def format_header(result: ExportResult, input_name="") -> str:
    """Comment block describing the export settings."""
    config = result.settings
    lines = [f"; gbtiles v{__version__}: RGBDS tile export", ";"]
    if input_name:
        lines.append(f"; Input file: {input_name}")

    if config.mode == ExportMode.SLICES:
        summary = f"; Export By Slices | Sort By {config.sort_by.label}"
    else:
        summary = f"; Export {config.tile_size.value} Tiles | {config.direction.label}"
    summary += f" | {config.tile_format.label}"
    if config.dedupe:
        summary += " | de-duped"
    lines.append(summary)

    return "\n".join(lines) + "\n\n"


def format_tile_bank(result: ExportResult, input_name="") -> str:
    """
    Render the tile bank file.

    Entries are separated by blank lines and, with ASM labels enabled,
    wrapped in ``<bank_label>::`` / ``<bank_label>End::``.
    """
    config = result.settings
    parts = [format_header(result, input_name)]

    if config.asm_labels:
        parts.append(f"{config.bank_label}::\n\n")
    parts.append("\n\n".join(record.entry for record in result.tile_bank))
    if config.asm_labels:
        parts.append(f"\n\n{config.bank_label}End::")

    return "".join(parts)


def wrap_frame_map(frame_map, step) -> List[List[int]]:
    """Split a frame map into rows of at most step tile IDs."""
    if step is None or step <= 0:
        return [list(frame_map)] if frame_map else []
    return [list(frame_map[i : i + step]) for i in range(0, len(frame_map), step)]


def format_tilemap(result: ExportResult) -> str:
    """
    Render the tilemap file: a comment per frame followed by ``DB`` rows.

    Maps are numbered by their position in the export, starting at 1.
    Rows are ``row_width`` entries wide in grid mode; in slice mode each
    frame is a single row.
    """
    parts = []
    for number, frame_map in enumerate(result.frame_maps, start=1):
        parts.append(f"; Frame {number} Map\n")
        step = result.row_width or len(frame_map)
        for row in wrap_frame_map(frame_map, step):
            parts.append("DB " + ", ".join(f"${tile_id:02x}" for tile_id in row) + "\n")
        parts.append("\n")

    return "".join(parts)


def write_export(
    result: ExportResult, tile_file, map_file: Optional[str] = None, input_name=""
) -> List[str]:
    """
    Write the tile bank and, optionally, the tilemap.

    All paths are checked before anything is written.

    Args:
        result: Output of export_sprite
        tile_file: Path of the tile bank file
        map_file: Path of the tilemap file, or None to skip it
        input_name: Source file name shown in the header

    Returns:
        List of written file paths
    """
    validate_output_path(tile_file)
    if map_file:
        validate_output_path(map_file)

    outputs = [(tile_file, format_tile_bank(result, input_name))]
    if map_file:
        outputs.append((map_file, format_tilemap(result)))

    written = []
    for path, content in outputs:
        with open(path, "w") as f:
            f.write(content)
        logger.info(f"Wrote {os.path.basename(path)}")
        written.append(str(path))

    return written
