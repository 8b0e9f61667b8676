from __future__ import annotations

import math
from typing import Any

import numpy as np
from PIL import Image

from trellis_ui.component_schema import BoundingBox


RGBA = tuple[int, int, int, int]

WHITE: RGBA = (255, 255, 255, 255)


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 255)) -> np.ndarray:
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def parse_color(value: Any) -> RGBA:
    """Accept `#rrggbb`, `#rrggbbaa` or a 3/4-tuple of channel ints."""

    if isinstance(value, str):
        raw = value.strip().lstrip("#")
        if len(raw) not in (6, 8):
            raise ValueError(f"unsupported color string: {value!r}")
        channels = [int(raw[i : i + 2], 16) for i in range(0, len(raw), 2)]
        if len(channels) == 3:
            channels.append(255)
        return (channels[0], channels[1], channels[2], channels[3])
    items = tuple(int(v) for v in value)
    if len(items) == 3:
        return (items[0], items[1], items[2], 255)
    if len(items) == 4:
        return (items[0], items[1], items[2], items[3])
    raise ValueError(f"unsupported color value: {value!r}")


def apply_opacity(color: RGBA, opacity: float) -> RGBA:
    r, g, b, a = color
    return (r, g, b, int(max(0.0, min(1.0, float(opacity))) * a))


def blend_mask(dst: np.ndarray, mask: np.ndarray, color: RGBA) -> None:
    """Alpha-blend `color` into the pixels of `dst` selected by `mask`."""

    if not np.any(mask):
        return
    a = color[3] / 255.0
    inv = 1.0 - a
    current = dst[mask][:, :3].astype(np.float32)
    dst[mask, :3] = (np.asarray(color[0:3], dtype=np.float32) * a + current * inv).astype(np.uint8)
    dst[mask, 3] = 255


class RasterSurface:
    """RGBA drawing surface backed by a numpy array.

    `region()` returns a surface over a view of the same buffer, so painting
    through a region writes to the parent and is clipped to the region.
    """

    def __init__(self, pixels: np.ndarray, background: RGBA = WHITE, offset: tuple[int, int] = (0, 0)) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint8:
            raise ValueError("pixels must be an (height, width, 4) uint8 array")
        self._pixels = pixels
        self._background = background
        self._offset = offset

    @classmethod
    def create(cls, width: int, height: int, background: RGBA = WHITE) -> "RasterSurface":
        if width <= 0 or height <= 0:
            raise ValueError("surface width/height must be > 0")
        return cls(new_canvas(width, height, color=background), background)

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def offset(self) -> tuple[int, int]:
        return self._offset

    @property
    def background(self) -> RGBA:
        return self._background

    def pixels(self) -> np.ndarray:
        return self._pixels

    def region(self, box: BoundingBox) -> "RasterSurface":
        x0 = min(self.width, max(0, int(math.floor(box.x))))
        y0 = min(self.height, max(0, int(math.floor(box.y))))
        x1 = min(self.width, max(x0, int(round(box.x + box.width))))
        y1 = min(self.height, max(y0, int(round(box.y + box.height))))
        view = self._pixels[y0:y1, x0:x1]
        return RasterSurface(view, self._background, offset=(self._offset[0] + x0, self._offset[1] + y0))

    def clear(self) -> None:
        self._pixels[:, :] = np.asarray(self._background, dtype=np.uint8)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self._pixels))
