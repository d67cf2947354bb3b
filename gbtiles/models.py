"""
Pydantic models for gbtiles.

These models define the export settings and the data structures passed
between the region partitioner, the deduplication index and the writers.
"""

from typing import List, Optional, Tuple
from enum import Enum
from pydantic import BaseModel, Field


class ExportMode(str, Enum):
    """How regions are discovered on each frame."""

    GRID = "grid"
    SLICES = "slices"


class TileSize(str, Enum):
    """Supported grid tile sizes."""

    SIZE_8X8 = "8x8"
    SIZE_8X16 = "8x16"
    SIZE_16X16 = "16x16"
    SIZE_32X32 = "32x32"

    @property
    def dimensions(self) -> Tuple[int, int]:
        """Return the tile size as (width, height) in pixels."""
        width, height = self.value.split("x")
        return int(width), int(height)


class Direction(str, Enum):
    """Grid traversal order."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class SortBy(str, Enum):
    """Ordering applied to slices in slice mode."""

    NAME = "name"
    POSITION = "position"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class TileFormat(str, Enum):
    """Text format for encoded tiles."""

    DW = "dw"
    HEX = "hex"

    @property
    def label(self) -> str:
        """Return the human readable name used in file headers."""
        return TILE_FORMAT_LABELS[self]


TILE_FORMAT_LABELS = {
    TileFormat.DW: "RGBDS DW",
    TileFormat.HEX: "Standard HEX (DB)",
}


class ExportConfig(BaseModel):
    """Settings for a single export run."""

    mode: ExportMode = Field(
        default=ExportMode.GRID, description="Full canvas grid or named slices"
    )
    tile_size: TileSize = Field(
        default=TileSize.SIZE_8X8, description="Grid tile size (grid mode only)"
    )
    direction: Direction = Field(
        default=Direction.HORIZONTAL,
        description="Grid parse direction (grid mode only)",
    )
    sort_by: SortBy = Field(
        default=SortBy.NAME, description="Slice ordering (slice mode only)"
    )
    tile_format: TileFormat = Field(
        default=TileFormat.DW, description="Output format for tile data"
    )
    asm_labels: bool = Field(default=True, description="Emit RGBDS labels")
    dedupe: bool = Field(default=True, description="Remove duplicate tiles")
    only_current: bool = Field(
        default=True, description="Export the active frame only"
    )
    bank_label: str = Field(
        default="Tiles",
        min_length=1,
        description="Label wrapped around the tile bank when ASM labels are on",
    )


class Region(BaseModel):
    """A rectangle exported as one logical graphic."""

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    name: str = ""


class TileRecord(BaseModel):
    """One tile bank entry."""

    id: int = Field(..., ge=0)
    payload: str
    label: str = ""

    @property
    def entry(self) -> str:
        """Text written to the tile bank: the label followed by the payload."""
        return self.label + self.payload


class ExportResult(BaseModel):
    """Complete output of an export, independent of any file format."""

    tile_bank: List[TileRecord] = Field(default_factory=list)
    frame_maps: List[List[int]] = Field(default_factory=list)
    # Zero-based sprite frame index of each frame map
    frames: List[int] = Field(default_factory=list)
    # None means one tilemap row per frame
    row_width: Optional[int] = None
    settings: ExportConfig = Field(default_factory=ExportConfig)

    @property
    def tile_count(self) -> int:
        return len(self.tile_bank)
