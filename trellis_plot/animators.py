from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol


EASINGS: dict[str, Callable[[float], float]] = {
    "linear": lambda t: t,
    "exp-in": lambda t: 0.0 if t <= 0 else 2.0 ** (10.0 * (t - 1.0)),
    "exp-out": lambda t: 1.0 if t >= 1 else 1.0 - 2.0 ** (-10.0 * t),
    "cubic-in-out": lambda t: 4.0 * t**3 if t < 0.5 else 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0,
}


class Animator(Protocol):
    def timing(self, num_elements: int) -> float:
        """Total milliseconds needed to animate `num_elements` marks."""
        ...

    def element_delay(self, index: int, num_elements: int) -> float:
        ...


class NullAnimator:
    """Applies the final state at once."""

    def timing(self, num_elements: int) -> float:
        return 0.0

    def element_delay(self, index: int, num_elements: int) -> float:
        return 0.0

    def progress(self, elapsed_ms: float, index: int, num_elements: int) -> float:
        return 1.0


@dataclass(frozen=True)
class BaseAnimator:
    """Staggered transition: element `i` starts `i * iterative_delay` after the first.

    The stagger shrinks when needed so the last element still finishes within
    `max_total_duration`.
    """

    duration: float = 300.0
    delay: float = 0.0
    easing: str = "exp-out"
    max_iterative_delay: float = 15.0
    max_total_duration: float = 600.0

    def __post_init__(self) -> None:
        if self.duration < 0 or self.delay < 0:
            raise ValueError("duration/delay must be >= 0")
        if self.max_iterative_delay < 0 or self.max_total_duration < 0:
            raise ValueError("max_iterative_delay/max_total_duration must be >= 0")
        if self.easing not in EASINGS:
            raise ValueError(f"unknown easing: {self.easing}")

    def iterative_delay(self, num_elements: int) -> float:
        max_delay_for_last = max(self.max_total_duration - self.duration, 0.0)
        return min(self.max_iterative_delay, max_delay_for_last / max(num_elements - 1, 1))

    def timing(self, num_elements: int) -> float:
        return self.delay + self.iterative_delay(num_elements) * num_elements + self.duration

    def element_delay(self, index: int, num_elements: int) -> float:
        return self.delay + self.iterative_delay(num_elements) * index

    def progress(self, elapsed_ms: float, index: int, num_elements: int) -> float:
        """Eased completion in `[0, 1]` of element `index` at `elapsed_ms` since the step began."""

        start = self.element_delay(index, num_elements)
        if self.duration == 0:
            return 1.0 if elapsed_ms >= start else 0.0
        t = min(1.0, max(0.0, (elapsed_ms - start) / self.duration))
        return EASINGS[self.easing](t)
