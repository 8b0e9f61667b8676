"""Domains that result from panning or zooming a quantitative scale in pixel space.

Both helpers return the new domain and leave the scale untouched, so the
caller decides whether to apply it (and through which coordinator).
"""

from __future__ import annotations

from trellis_plot.scale import LinearScale


def translate(scale: LinearScale, pixels: float) -> tuple[float, float]:
    r0, r1 = scale.range()
    return (scale.invert(r0 + pixels), scale.invert(r1 + pixels))


def magnify(scale: LinearScale, factor: float, center_pixel: float) -> tuple[float, float]:
    if not factor > 0:
        raise ValueError("magnify factor must be > 0")
    r0, r1 = scale.range()
    return (
        scale.invert(center_pixel - (center_pixel - r0) * factor),
        scale.invert(center_pixel - (center_pixel - r1) * factor),
    )
