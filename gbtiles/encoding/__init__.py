"""
Tile encoders.
"""

from gbtiles.encoding.tile_encoder import (
    FORMATTERS,
    decode_packed_bitplane,
    decode_row_digits,
    encode_8x8,
    encode_packed_bitplane,
    encode_row_digits,
)

__all__ = [
    "FORMATTERS",
    "decode_packed_bitplane",
    "decode_row_digits",
    "encode_8x8",
    "encode_packed_bitplane",
    "encode_row_digits",
]
