from __future__ import annotations

import math

import numpy as np


def tick_increment(vmin: float, vmax: float, count: int) -> float:
    """Step between round tick values when `[vmin, vmax]` is cut into about `count` pieces."""

    if count <= 0:
        raise ValueError("count must be > 0")
    span = abs(vmax - vmin)
    if span == 0 or not math.isfinite(span):
        return 0.0
    step = 10 ** math.floor(math.log10(span / count))
    err = count / span * step
    if err <= 0.15:
        step *= 10
    elif err <= 0.35:
        step *= 5
    elif err <= 0.75:
        step *= 2
    return float(step)


def nice_domain(vmin: float, vmax: float, count: int = 10) -> tuple[float, float]:
    """Round `[vmin, vmax]` outward to multiples of the tick step, keeping its direction."""

    step = tick_increment(vmin, vmax, count)
    if step == 0:
        return (float(vmin), float(vmax))
    reversed_ = vmax < vmin
    lo, hi = (vmax, vmin) if reversed_ else (vmin, vmax)
    lo = _snap(math.floor(lo / step) * step, step)
    hi = _snap(math.ceil(hi / step) * step, step)
    return (hi, lo) if reversed_ else (lo, hi)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if not (math.isfinite(vmin) and math.isfinite(vmax)):
        return np.asarray([], dtype=np.float64)
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    lo, hi = min(vmin, vmax), max(vmin, vmax)
    step = tick_increment(lo, hi, target)
    tick_min = math.ceil(lo / step) * step
    tick_max = math.floor(hi / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def _snap(value: float, step: float) -> float:
    snapped = float(np.rint(value / step) * step)
    if abs(snapped) <= step * 1e-9:
        return 0.0
    return snapped
