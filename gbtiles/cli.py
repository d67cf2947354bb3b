"""
Command-line interface for gbtiles.

Exports an indexed image as RGBDS tile data and a tilemap:

    gbtiles sprite.png --tile-size 16x16 --format hex
    gbtiles sprite.png --mode slices --slices sprite.json --sort-by position
"""

import argparse
import logging
import os
import sys

from gbtiles import __version__
from gbtiles.config import DEFAULT_CONFIG, build_config, load_config
from gbtiles.errors import GBTilesError
from gbtiles.export.writer import default_output_paths, validate_output_path, write_export
from gbtiles.models import Direction, ExportMode, SortBy, TileFormat, TileSize
from gbtiles.processing.exporter import export_sprite
from gbtiles.sprite import load_sprite

logger = logging.getLogger("gbtiles.cli")


def build_parser():
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="gbtiles",
        description="Export a 4-color indexed image as Game Boy tiles for RGBDS",
    )

    parser.add_argument("image", help="Indexed image to export (PNG, GIF, ...)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Output files
    parser.add_argument(
        "--tiles", help="Tile bank output file (default: <image>-tiles.inc)"
    )
    parser.add_argument("--map", help="Tilemap output file (default: <image>-map.inc)")
    parser.add_argument(
        "--no-map", action="store_true", help="Do not write a tilemap file"
    )

    # Export settings; unset options fall back to --config, then to the defaults
    parser.add_argument("--config", help="JSON file with export settings")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ExportMode],
        help="Export the full canvas as a grid, or by slices",
    )
    parser.add_argument(
        "--tile-size",
        choices=[s.value for s in TileSize],
        help="Grid tile size (grid mode)",
    )
    parser.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        help="Grid parse direction (grid mode)",
    )
    parser.add_argument(
        "--sort-by",
        choices=[s.value for s in SortBy],
        help="Slice ordering (slice mode)",
    )
    parser.add_argument(
        "--format",
        dest="tile_format",
        choices=[f.value for f in TileFormat],
        help="dw: RGBDS DW rows, hex: standard DB bytes",
    )
    parser.add_argument(
        "--asm-labels",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Add RGBDS labels to the tile bank",
    )
    parser.add_argument(
        "--dedupe",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove duplicate tiles",
    )
    parser.add_argument(
        "--all-frames",
        action="store_true",
        help="Export every frame instead of the current one",
    )
    parser.add_argument(
        "--frame",
        type=int,
        default=1,
        help="Current frame, 1-based (default: 1)",
    )
    parser.add_argument("--slices", help="Aseprite JSON data file with slices")
    parser.add_argument(
        "--label", dest="bank_label", help="Label wrapped around the tile bank"
    )

    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default="info",
        help="Logging level",
    )
    return parser


def run_export(args):
    """
    Run an export from parsed command-line arguments.

    Returns:
        List of written file paths
    """
    config = load_config(args.config) if args.config else DEFAULT_CONFIG
    config = build_config(
        {
            "mode": args.mode,
            "tile_size": args.tile_size,
            "direction": args.direction,
            "sort_by": args.sort_by,
            "tile_format": args.tile_format,
            "asm_labels": args.asm_labels,
            "dedupe": args.dedupe,
            "only_current": False if args.all_frames else None,
            "bank_label": args.bank_label,
        },
        base=config,
    )

    default_tiles, default_map = default_output_paths(args.image)
    tile_file = args.tiles or default_tiles
    map_file = None if args.no_map else (args.map or default_map)

    # Fail on bad paths before loading anything
    validate_output_path(tile_file)
    if map_file:
        validate_output_path(map_file)

    sprite = load_sprite(args.image, slices_path=args.slices, active_frame=args.frame - 1)

    def log_progress(percent, step):
        logger.debug(f"{percent:3d}% {step}")

    result = export_sprite(sprite, config, progress_callback=log_progress)
    return write_export(
        result, tile_file, map_file, input_name=os.path.basename(args.image)
    )


def main(argv=None):
    """
    Main entry point for gbtiles with command-line argument parsing.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    numeric_level = getattr(logging, args.log_level.upper(), None)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        written = run_export(args)
    except GBTilesError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("Export Complete!")
    for path in written:
        print(f"  {path}")


if __name__ == "__main__":
    main()
