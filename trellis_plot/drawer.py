from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, Sequence

from trellis_plot.animators import Animator
from trellis_plot.raster.canvas import RasterSurface, apply_opacity, parse_color
from trellis_plot.raster.draw_markers import draw_symbol


Projector = Callable[[Any, int, Any, Mapping[str, Any]], Any]
AttrToProjector = Mapping[str, Projector]


@dataclass(frozen=True)
class DrawStep:
    attr_to_projector: AttrToProjector
    animator: Animator


@dataclass(frozen=True)
class RenderedMark:
    key: str
    index: int
    datum: Any


class Drawer(Protocol):
    """Renders one dataset of a plot for a sequence of draw steps."""

    def setup(self, surface: Any) -> None:
        ...

    def draw(
        self,
        data: Sequence[Any],
        steps: Sequence[DrawStep],
        user_metadata: Any,
        plot_metadata: Mapping[str, Any],
    ) -> float:
        """Draw `data` and return the total animation time of `steps` in milliseconds."""
        ...

    def rendered_marks(self) -> list[RenderedMark]:
        ...

    def remove(self) -> None:
        ...


class SymbolDrawer:
    """Draws one symbol per datum into a `RasterSurface`.

    Raster output is a still frame, so only the last step's attributes are
    painted; earlier steps still count towards the returned animation time.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        self._surface: RasterSurface | None = None
        self._marks: list[RenderedMark] = []

    def setup(self, surface: RasterSurface) -> None:
        self._surface = surface

    def draw(
        self,
        data: Sequence[Any],
        steps: Sequence[DrawStep],
        user_metadata: Any,
        plot_metadata: Mapping[str, Any],
    ) -> float:
        n = len(data)
        total_time = sum(step.animator.timing(n) for step in steps)
        self._marks = []
        if not steps:
            return total_time
        projectors = steps[-1].attr_to_projector
        pixels = self._surface.pixels() if self._surface is not None else None
        for index, datum in enumerate(data):
            if pixels is not None:
                x = float(projectors["x"](datum, index, user_metadata, plot_metadata))
                y = float(projectors["y"](datum, index, user_metadata, plot_metadata))
                r = float(projectors["r"](datum, index, user_metadata, plot_metadata))
                fill = parse_color(projectors["fill"](datum, index, user_metadata, plot_metadata))
                opacity = float(projectors["opacity"](datum, index, user_metadata, plot_metadata))
                symbol = projectors["symbol"](datum, index, user_metadata, plot_metadata)
                draw_symbol(pixels, x, y, r, apply_opacity(fill, opacity), symbol)
            self._marks.append(RenderedMark(self.key, index, datum))
        return total_time

    def rendered_marks(self) -> list[RenderedMark]:
        return list(self._marks)

    def remove(self) -> None:
        self._surface = None
        self._marks = []
