from __future__ import annotations

import math

import numpy as np

from trellis_plot.raster.canvas import RGBA, blend_mask


SYMBOLS = ("circle", "square", "diamond", "cross")


def draw_symbol(dst: np.ndarray, x: float, y: float, radius: float, color: RGBA, symbol: str = "circle") -> None:
    if symbol not in SYMBOLS:
        raise ValueError(f"unsupported symbol: {symbol}")
    r = float(radius)
    if not math.isfinite(r) or r <= 0 or not math.isfinite(x) or not math.isfinite(y):
        return
    x0 = max(0, int(math.floor(x - r)))
    x1 = min(dst.shape[1] - 1, int(math.ceil(x + r)))
    y0 = max(0, int(math.floor(y - r)))
    y1 = min(dst.shape[0] - 1, int(math.ceil(y + r)))
    if x1 < x0 or y1 < y0:
        return

    yy, xx = np.mgrid[y0 : y1 + 1, x0 : x1 + 1]
    dx = xx.astype(np.float64) - x
    dy = yy.astype(np.float64) - y
    if symbol == "circle":
        inside = dx * dx + dy * dy <= r * r
    elif symbol == "square":
        inside = (np.abs(dx) <= r) & (np.abs(dy) <= r)
    elif symbol == "diamond":
        inside = np.abs(dx) + np.abs(dy) <= r
    else:
        arm = max(0.5, r / 3.0)
        inside = ((np.abs(dx) <= arm) & (np.abs(dy) <= r)) | ((np.abs(dy) <= arm) & (np.abs(dx) <= r))

    mask = np.zeros(dst.shape[:2], dtype=bool)
    mask[y0 : y1 + 1, x0 : x1 + 1] = inside
    blend_mask(dst, mask, color)
