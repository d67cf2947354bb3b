"""
Tests for the export pipeline.
"""

import logging

import numpy as np
import pytest

from gbtiles.errors import AlignmentError, ConfigError, StateError
from gbtiles.models import ExportConfig, Region
from gbtiles.processing import export_sprite, make_label
from gbtiles.sprite import Slice, SliceKey, Sprite


def two_tile_sprite():
    """16x8 sprite: left tile all 0, right tile all 1."""
    pixels = np.zeros((8, 16), dtype=np.uint8)
    pixels[:, 8:] = 1
    return Sprite([pixels])


def test_two_tiles_without_dedupe():
    sprite = Sprite([np.zeros((8, 16), dtype=np.uint8)])

    result = export_sprite(sprite, ExportConfig(dedupe=False))

    assert result.frame_maps == [[0, 1]]
    assert result.tile_count == 2
    assert result.row_width == 2
    assert result.frames == [0]


def test_identical_tiles_are_merged():
    sprite = Sprite([np.zeros((8, 16), dtype=np.uint8)])

    result = export_sprite(sprite, ExportConfig(dedupe=True))

    assert result.frame_maps == [[0, 0]]
    assert result.tile_count == 1


def test_merged_tile_keeps_first_label():
    """Both regions get different labels, but only the first one is kept."""
    sprite = Sprite([np.zeros((8, 16), dtype=np.uint8)])

    result = export_sprite(sprite, ExportConfig(dedupe=True, asm_labels=True))

    assert len(result.tile_bank) == 1
    assert result.tile_bank[0].label == "Sprite01:: ; Tile 0x01\n"


def test_misaligned_sprite_fails_before_discovery():
    class CountingSprite(Sprite):
        calls = 0

        def regions(self, frame):
            CountingSprite.calls += 1
            return super().regions(frame)

        def render_frame(self, frame):
            raise AssertionError("frame should not be rendered")

    sprite = CountingSprite([np.zeros((8, 10), dtype=np.uint8)])

    with pytest.raises(AlignmentError):
        export_sprite(sprite, ExportConfig())
    assert CountingSprite.calls == 0


def test_slices_sorted_by_name_use_slice_labels():
    pixels = np.zeros((8, 16), dtype=np.uint8)
    pixels[:, 8:] = 1
    slices = [
        Slice(name="B", keys=[SliceKey(x=0, y=0, width=8, height=8)]),
        Slice(name="A", keys=[SliceKey(x=8, y=0, width=8, height=8)]),
    ]
    sprite = Sprite([pixels], slices=slices)

    result = export_sprite(
        sprite, ExportConfig(mode="slices", sort_by="name", asm_labels=True)
    )

    assert [r.label for r in result.tile_bank] == [
        "A:: ; Tile 0x01\n",
        "B:: ; Tile 0x02\n",
    ]
    assert result.tile_bank[0].payload.startswith("DW `11111111")
    assert result.frame_maps == [[0, 1]]
    assert result.row_width is None


def test_slices_sorted_by_position_use_index_labels():
    slices = [
        Slice(name="B", keys=[SliceKey(x=0, y=0, width=8, height=8)]),
        Slice(name="A", keys=[SliceKey(x=8, y=0, width=8, height=8)]),
    ]
    sprite = Sprite([np.zeros((8, 16), dtype=np.uint8)], slices=slices)

    result = export_sprite(
        sprite, ExportConfig(mode="slices", sort_by="position", dedupe=False)
    )

    assert [r.label for r in result.tile_bank] == [
        "Sprite01:: ; Tile 0x01\n",
        "Sprite02:: ; Tile 0x02\n",
    ]


def test_labels():
    region = Region(x=8, y=16, width=8, height=8, name="8,16")

    assert make_label(11, region, ExportConfig(asm_labels=False)) == "; Tile 0x0B | Pos: 8,16\n"
    assert make_label(11, region, ExportConfig()) == "Sprite0B:: ; Tile 0x0B\n"
    assert (
        make_label(1, Region(x=0, y=0, width=8, height=8, name="Hero"),
                   ExportConfig(mode="slices"))
        == "Hero:: ; Tile 0x01\n"
    )


def test_vertical_direction():
    pixels = np.zeros((16, 16), dtype=np.uint8)
    pixels[8:, :8] = 2  # bottom-left tile
    sprite = Sprite([pixels])

    horizontal = export_sprite(sprite, ExportConfig())
    vertical = export_sprite(sprite, ExportConfig(direction="vertical"))

    assert horizontal.frame_maps == [[0, 0, 1, 0]]
    assert vertical.frame_maps == [[0, 1, 0, 0]]
    assert vertical.row_width == 2


def test_large_tiles_are_one_bank_entry():
    pixels = np.zeros((16, 32), dtype=np.uint8)
    pixels[:, 16:] = 3
    sprite = Sprite([pixels])

    result = export_sprite(sprite, ExportConfig(tile_size="16x16", tile_format="hex"))

    assert result.frame_maps == [[0, 1]]
    assert result.tile_bank[0].payload.count("DB ") == 4
    assert result.tile_bank[1].payload.split("\n")[0] == "DB " + ",".join(["$ff"] * 16)


def test_all_frames_share_the_tile_bank():
    first = np.zeros((8, 16), dtype=np.uint8)
    second = np.zeros((8, 16), dtype=np.uint8)
    second[:, :8] = 2
    sprite = Sprite([first, second], active_frame=1)

    current = export_sprite(sprite, ExportConfig())
    assert current.frames == [1]
    assert current.frame_maps == [[0, 1]]

    everything = export_sprite(sprite, ExportConfig(only_current=False))
    assert everything.frames == [0, 1]
    assert everything.frame_maps == [[0, 0], [1, 0]]
    assert everything.tile_count == 2


def test_slices_can_move_between_frames():
    first = np.zeros((8, 16), dtype=np.uint8)
    second = np.zeros((8, 16), dtype=np.uint8)
    second[:, 8:] = 1
    slices = [
        Slice(
            name="Hero",
            keys=[
                SliceKey(frame=0, x=0, y=0, width=8, height=8),
                SliceKey(frame=1, x=8, y=0, width=8, height=8),
            ],
        )
    ]
    sprite = Sprite([first, second], slices=slices)

    result = export_sprite(sprite, ExportConfig(mode="slices", only_current=False))

    assert result.frame_maps == [[0], [1]]
    assert result.tile_bank[1].payload.startswith("DW `11111111")


def test_slice_mode_without_slices():
    with pytest.raises(ConfigError, match="No slices found"):
        export_sprite(two_tile_sprite(), ExportConfig(mode="slices"))


def test_slice_missing_on_a_later_frame():
    slices = [Slice(name="Late", keys=[SliceKey(frame=1, x=0, y=0, width=8, height=8)])]
    sprite = Sprite([np.zeros((8, 8), dtype=np.uint8)] * 2, slices=slices)

    with pytest.raises(ConfigError):
        export_sprite(sprite, ExportConfig(mode="slices", only_current=False))


def test_slice_past_the_sprite_edge():
    slices = [Slice(name="E", keys=[SliceKey(frame=0, x=12, y=0, width=8, height=8)])]
    sprite = Sprite([np.zeros((8, 16), dtype=np.uint8)], slices=slices)

    with pytest.raises(ConfigError, match="Slice 'E'.*16x8 sprite"):
        export_sprite(sprite, ExportConfig(mode="slices"))


def test_partial_sub_tile_past_the_sprite_edge():
    """A 12px slice inside a 16px sprite still needs pixels up to x=20."""
    slices = [Slice(name="Wide", keys=[SliceKey(frame=0, x=4, y=0, width=12, height=8)])]
    sprite = Sprite([np.zeros((8, 16), dtype=np.uint8)], slices=slices)

    with pytest.raises(ConfigError, match="Wide"):
        export_sprite(sprite, ExportConfig(mode="slices"))


def test_slice_leaves_the_sprite_on_a_later_frame():
    slices = [
        Slice(
            name="Runner",
            keys=[
                SliceKey(frame=0, x=0, y=0, width=8, height=8),
                SliceKey(frame=1, x=0, y=4, width=8, height=8),
            ],
        )
    ]
    sprite = Sprite([np.zeros((8, 8), dtype=np.uint8)] * 2, slices=slices)

    assert export_sprite(sprite, ExportConfig(mode="slices")).frame_maps == [[0]]
    with pytest.raises(ConfigError, match="Runner.*frame 2"):
        export_sprite(sprite, ExportConfig(mode="slices", only_current=False))


def test_invalid_active_frame():
    sprite = Sprite([np.zeros((8, 8), dtype=np.uint8)], active_frame=3)
    with pytest.raises(StateError):
        export_sprite(sprite, ExportConfig())


def test_sprite_without_frames():
    with pytest.raises(StateError):
        Sprite([])


def test_progress_is_reported():
    steps = []
    sprite = Sprite([np.zeros((8, 8), dtype=np.uint8)] * 4)

    export_sprite(
        sprite,
        ExportConfig(only_current=False),
        progress_callback=lambda percent, step: steps.append(percent),
    )

    assert steps == [0, 25, 50, 75, 100]


def test_large_tile_bank_warns(caplog):
    rng = np.random.default_rng(3)
    pixels = rng.integers(0, 4, size=(8, 8 * 260), dtype=np.uint8)
    sprite = Sprite([pixels])

    with caplog.at_level(logging.WARNING, logger="gbtiles.processing.exporter"):
        result = export_sprite(sprite, ExportConfig(dedupe=False))

    assert result.tile_count == 260
    assert "do not fit in a byte" in caplog.text
