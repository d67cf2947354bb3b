"""
Encoding of single 8x8 tiles into RGBDS source text.

Two formats are supported:
- RGBDS DW: one ``DW `01230123`` line per pixel row (one base-4 digit per pixel)
- Standard HEX (DB): 16 bytes on one line, low bitplane then high bitplane per row
"""

import numpy as np

from gbtiles.models import TileFormat

TILE_SIZE = 8
ROW_MARKER = "DW `"
BYTES_PREFIX = "DB "


def encode_row_digits(sampler, x, y):
    """
    Encode the tile at (x, y) as eight RGBDS ``DW`` rows.

    Args:
        sampler: Object providing ``tile_at(x, y)`` (e.g. FrameImage)
        x: Left edge of the tile in pixels
        y: Top edge of the tile in pixels

    Returns:
        Newline-joined rows, terminated by a newline
    """
    block = sampler.tile_at(x, y) & 3
    rows = []
    for row in block:
        rows.append(ROW_MARKER + "".join(str(int(px)) for px in row))
    return "\n".join(rows) + "\n"


def encode_packed_bitplane(sampler, x, y):
    """
    Encode the tile at (x, y) as 16 Game Boy bitplane bytes on one ``DB`` line.

    Each row yields a low byte (pixel bit 0) and a high byte (pixel bit 1),
    with the leftmost pixel in bit 7.
    """
    block = sampler.tile_at(x, y) & 3
    data = []
    for row in block:
        lo, hi = 0, 0
        for cx, px in enumerate(row):
            if px & 1:
                lo |= 1 << (7 - cx)
            if px & 2:
                hi |= 1 << (7 - cx)
        data.append(f"${lo:02x}")
        data.append(f"${hi:02x}")
    return BYTES_PREFIX + ",".join(data)


# Dictionary of tile formatters
FORMATTERS = {
    TileFormat.DW: encode_row_digits,
    TileFormat.HEX: encode_packed_bitplane,
}


def encode_8x8(sampler, x, y, tile_format):
    """Encode one 8x8 tile in the given TileFormat."""
    return FORMATTERS[TileFormat(tile_format)](sampler, x, y)


def decode_packed_bitplane(payload):
    """
    Decode one ``DB`` tile line back into an 8x8 array of palette indices.

    Raises:
        ValueError: If the line is not 16 ``$xx`` bytes
    """
    text = payload.strip()
    if not text.startswith(BYTES_PREFIX):
        raise ValueError(f"Expected a line starting with '{BYTES_PREFIX}'")

    values = []
    for item in text[len(BYTES_PREFIX) :].split(","):
        item = item.strip()
        if not item.startswith("$"):
            raise ValueError(f"Invalid byte literal: {item!r}")
        values.append(int(item[1:], 16))
    if len(values) != TILE_SIZE * 2:
        raise ValueError(f"Expected 16 bytes, got {len(values)}")

    pixels = np.zeros((TILE_SIZE, TILE_SIZE), dtype=np.uint8)
    for cy in range(TILE_SIZE):
        lo, hi = values[cy * 2], values[cy * 2 + 1]
        for cx in range(TILE_SIZE):
            bit = 7 - cx
            pixels[cy, cx] = ((lo >> bit) & 1) | (((hi >> bit) & 1) << 1)
    return pixels


def decode_row_digits(payload):
    """
    Decode eight ``DW`` rows back into an 8x8 array of palette indices.

    Raises:
        ValueError: If there are not exactly 8 rows of 8 digits in 0-3
    """
    rows = [line.strip() for line in payload.splitlines() if line.strip()]
    if len(rows) != TILE_SIZE:
        raise ValueError(f"Expected 8 rows, got {len(rows)}")

    pixels = np.zeros((TILE_SIZE, TILE_SIZE), dtype=np.uint8)
    for cy, row in enumerate(rows):
        if not row.startswith(ROW_MARKER):
            raise ValueError(f"Row {cy} does not start with '{ROW_MARKER}'")
        digits = row[len(ROW_MARKER) :]
        if len(digits) != TILE_SIZE or any(d not in "0123" for d in digits):
            raise ValueError(f"Invalid row digits: {digits!r}")
        pixels[cy] = [int(d) for d in digits]
    return pixels
