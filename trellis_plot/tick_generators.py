from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable, Sequence

if TYPE_CHECKING:
    from trellis_plot.scale import LinearScale


TickGenerator = Callable[["LinearScale"], Sequence[float]]


def default_tick_generator(scale: "LinearScale") -> list[float]:
    return [float(v) for v in scale.default_ticks()]


def interval_tick_generator(interval: float) -> TickGenerator:
    """Ticks at every multiple of `interval`, plus the domain ends when they fall between multiples."""

    if not interval > 0:
        raise ValueError("interval must be > 0")

    def generate(scale: "LinearScale") -> list[float]:
        d0, d1 = scale.domain()
        low, high = min(d0, d1), max(d0, d1)
        first = math.ceil(low / interval) * interval
        count = int(math.floor((high - first) / interval)) + 1
        ticks = [] if low % interval == 0 else [low]
        ticks.extend(first + i * interval for i in range(max(count, 0)))
        if high % interval != 0:
            ticks.append(high)
        return ticks

    return generate


def integer_tick_generator() -> TickGenerator:
    def generate(scale: "LinearScale") -> list[float]:
        return [tick for tick in default_tick_generator(scale) if math.floor(tick) == tick]

    return generate
