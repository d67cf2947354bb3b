"""
Indexed sprite source.

Wraps the frames of an indexed image as numpy arrays of palette indices,
provides per-frame pixel sampling for the tile encoder, and resolves named
slices (Aseprite style) to export regions.
"""

import json
import logging
from typing import List, Optional

import numpy as np
from PIL import GifImagePlugin, Image, ImageSequence
from pydantic import BaseModel, Field, ValidationError

from gbtiles.errors import ConfigError, StateError
from gbtiles.models import Region

logger = logging.getLogger("gbtiles.sprite")

TILE_SIZE = 8


class FrameImage:
    """
    Snapshot of one frame: a 2D array of palette indices indexed [y, x].

    Sampling outside the image raises IndexError.
    """

    def __init__(self, pixels):
        pixels = np.asarray(pixels)
        if pixels.ndim != 2:
            raise ValueError(f"Expected a 2D array of indices, got shape {pixels.shape}")
        self.pixels = pixels

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def _check_bounds(self, x, y, width=1, height=1):
        if x < 0 or y < 0 or x + width > self.width or y + height > self.height:
            raise IndexError(
                f"Area {width}x{height} at ({x},{y}) is outside the "
                f"{self.width}x{self.height} image"
            )

    def pixel_at(self, x: int, y: int) -> int:
        """Return the raw palette index at (x, y)."""
        self._check_bounds(x, y)
        return int(self.pixels[y, x])

    def tile_at(self, x: int, y: int) -> np.ndarray:
        """Return the 8x8 block of raw palette indices whose top-left is (x, y)."""
        self._check_bounds(x, y, TILE_SIZE, TILE_SIZE)
        return self.pixels[y : y + TILE_SIZE, x : x + TILE_SIZE]


class SliceKey(BaseModel):
    """Bounds of a slice starting at a given frame."""

    frame: int = Field(default=0, ge=0)
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class Slice(BaseModel):
    """A named rectangle over the sprite, possibly moving between frames."""

    name: str
    keys: List[SliceKey] = Field(default_factory=list)

    def key_for_frame(self, frame: int) -> Optional[SliceKey]:
        """
        Return the key in effect on a frame.

        A key applies from its frame onwards, until a later key replaces it.
        Returns None if the slice does not exist yet on that frame.
        """
        current = None
        for key in sorted(self.keys, key=lambda k: k.frame):
            if key.frame > frame:
                break
            current = key
        return current


class Sprite:
    """
    An indexed sprite: equally sized frames of palette indices plus slices.
    """

    def __init__(self, frames, slices=None, active_frame=0, filename=""):
        """
        Args:
            frames: Sequence of 2D arrays of palette indices ([y, x])
            slices: Optional list of Slice objects
            active_frame: Zero-based index of the frame exported with "current frame only"
            filename: Source file name, used in output headers
        """
        self.frames = [np.asarray(frame) for frame in frames]
        if not self.frames:
            raise StateError("Sprite has no frames")

        shapes = {frame.shape for frame in self.frames}
        if len(shapes) != 1 or len(self.frames[0].shape) != 2:
            raise ConfigError(f"All frames must be 2D and the same size, got {shapes}")

        self.height, self.width = self.frames[0].shape
        self.slices = list(slices or [])
        self.active_frame = active_frame
        self.filename = filename

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def frame_list(self, only_current: bool) -> List[int]:
        """Return the zero-based frame indices to export."""
        if only_current:
            if not 0 <= self.active_frame < self.frame_count:
                raise StateError(
                    f"Active frame {self.active_frame + 1} does not exist "
                    f"(sprite has {self.frame_count} frames)"
                )
            return [self.active_frame]
        return list(range(self.frame_count))

    def pixel_at(self, frame: int, x: int, y: int) -> int:
        return FrameImage(self.frames[frame]).pixel_at(x, y)

    def render_frame(self, frame: int) -> FrameImage:
        """Return a private copy of a frame for sampling."""
        return FrameImage(self.frames[frame].copy())

    def regions(self, frame: int) -> List[Region]:
        """Return the slices visible on a frame as unsorted regions."""
        regions = []
        for s in self.slices:
            key = s.key_for_frame(frame)
            if key is None:
                continue
            regions.append(
                Region(x=key.x, y=key.y, width=key.width, height=key.height, name=s.name)
            )
        return regions


def load_slices(json_path) -> List[Slice]:
    """
    Load slices from an Aseprite JSON data file (``aseprite -b --data``).

    Args:
        json_path: Path to the JSON file

    Returns:
        List of Slice objects in file order
    """
    try:
        with open(json_path, "r") as file:
            data = json.load(file)
    except OSError as e:
        raise ConfigError(f"Could not read slices file '{json_path}': {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Slices file '{json_path}' is not valid JSON: {e}") from e

    raw_slices = data.get("meta", {}).get("slices", []) if isinstance(data, dict) else []

    slices = []
    try:
        for raw in raw_slices:
            keys = []
            for raw_key in raw.get("keys", []):
                bounds = raw_key["bounds"]
                keys.append(
                    SliceKey(
                        frame=raw_key.get("frame", 0),
                        x=bounds["x"],
                        y=bounds["y"],
                        width=bounds["w"],
                        height=bounds["h"],
                    )
                )
            slices.append(Slice(name=raw["name"], keys=keys))
    except (KeyError, TypeError, ValidationError) as e:
        raise ConfigError(f"Malformed slice data in '{json_path}': {e}") from e

    logger.info(f"Loaded {len(slices)} slices from {json_path}")
    return slices


def _read_indexed_frames(image_path) -> List[np.ndarray]:
    try:
        img = Image.open(image_path)
    except OSError as e:
        raise ConfigError(f"Could not open image '{image_path}': {e}") from e

    with img:
        if img.mode != "P":
            raise ConfigError(f"Requires an Indexed Sprite. '{image_path}' is {img.mode}.")

        frames = []
        for index, frame in enumerate(ImageSequence.Iterator(img)):
            if frame.mode != "P":
                raise ConfigError(
                    f"Requires an Indexed Sprite. Frame {index + 1} is {frame.mode}."
                )
            frames.append(np.array(frame, dtype=np.uint8))

    return frames


def load_sprite(image_path, slices_path=None, active_frame=0) -> Sprite:
    """
    Load an indexed image (PNG, GIF, ...) as a Sprite.

    Args:
        image_path: Path to the image file
        slices_path: Optional Aseprite JSON file providing slices
        active_frame: Zero-based frame used for "current frame only" exports

    Returns:
        Sprite with one array of palette indices per frame

    Raises:
        ConfigError: If the image cannot be opened or is not indexed
    """
    # Keep GIF frames after the first in "P" mode unless their palette changes.
    # The strategy is global to Pillow, so it is restored once the frames are read.
    previous_strategy = GifImagePlugin.LOADING_STRATEGY
    GifImagePlugin.LOADING_STRATEGY = (
        GifImagePlugin.LoadingStrategy.RGB_AFTER_DIFFERENT_PALETTE_ONLY
    )
    try:
        frames = _read_indexed_frames(image_path)
    finally:
        GifImagePlugin.LOADING_STRATEGY = previous_strategy

    logger.info(
        f"Loaded {image_path}: {frames[0].shape[1]}x{frames[0].shape[0]}, "
        f"{len(frames)} frame(s)"
    )

    slices = load_slices(slices_path) if slices_path else []
    return Sprite(frames, slices=slices, active_frame=active_frame, filename=str(image_path))
