from __future__ import annotations

from typing import Any

from trellis_plot.animators import Animator, BaseAnimator, NullAnimator
from trellis_plot.drawer import DrawStep, SymbolDrawer
from trellis_plot.errors import PlotDataError
from trellis_plot.plot import NO_MATCH, ClosestMark, Plot, Projector, accessorize, attr_to_projector_with
from trellis_plot.scale import ColorScale, Scale
from trellis_ui.component_schema import Point
from trellis_ui.config import DEFAULT_CONFIG, EngineConfig
from trellis_ui.render_controller import RenderController


RESET_ANIMATOR_KEY = "symbols-reset"
MAIN_ANIMATOR_KEY = "symbols"


class PointMarkStrategy:
    """One symbol per datum, positioned by the `x` and `y` projections."""

    def __init__(self, *, config: EngineConfig | None = None, color_scale: ColorScale | None = None) -> None:
        self._config = config or DEFAULT_CONFIG
        self._color_scale = color_scale or ColorScale(config=self._config)

    def default_projectors(self, plot: Plot) -> dict[str, Projector]:
        return {
            "r": accessorize(self._config.mark_radius),
            "opacity": accessorize(self._config.mark_opacity),
            "fill": accessorize(self._color_scale.range()[0]),
            # Plain strings would be read as field names.
            "symbol": _constant("circle"),
        }

    def default_animators(self) -> dict[str, Animator]:
        return {
            RESET_ANIMATOR_KEY: NullAnimator(),
            MAIN_ANIMATOR_KEY: BaseAnimator(duration=250, delay=5),
        }

    def draw_steps(self, plot: Plot) -> list[DrawStep]:
        projectors = plot.generate_attr_to_projector()
        _require_position(projectors)
        steps: list[DrawStep] = []
        if plot.data_changed and plot.animation_enabled:
            reset = attr_to_projector_with(projectors, r=0)
            steps.append(DrawStep(reset, plot.animator(RESET_ANIMATOR_KEY)))
        steps.append(DrawStep(projectors, plot.animator(MAIN_ANIMATOR_KEY)))
        return steps

    def make_drawer(self, key: str) -> SymbolDrawer:
        return SymbolDrawer(key)

    def closest_mark(self, plot: Plot, point: Point, max_radius: float) -> ClosestMark:
        """Nearest rendered mark to `point` in plot-local pixels.

        A mark whose symbol contains the point beats any mark that merely lies
        within `max_radius`; ties keep the earlier dataset and index.
        """

        projectors = plot.generate_attr_to_projector()
        _require_position(projectors)
        px, py, pr = projectors["x"], projectors["y"], projectors["r"]
        max_dist_sq = max_radius * max_radius

        contained: tuple[float, ClosestMark] | None = None
        nearby: tuple[float, ClosestMark] | None = None
        for _, entry in plot.dataset_entries():
            user_metadata = entry.dataset.metadata()
            for mark in entry.drawer.rendered_marks():
                args = (mark.datum, mark.index, user_metadata, entry.plot_metadata)
                x = float(px(*args))
                y = float(py(*args))
                r = float(pr(*args))
                dist_sq = (x - point.x) ** 2 + (y - point.y) ** 2
                if dist_sq <= r * r:
                    if contained is None or dist_sq < contained[0]:
                        contained = (dist_sq, ClosestMark(mark, Point(x, y), mark.datum))
                elif dist_sq <= max_dist_sq:
                    if nearby is None or dist_sq < nearby[0]:
                        nearby = (dist_sq, ClosestMark(mark, Point(x, y), mark.datum))

        if contained is not None:
            return contained[1]
        if nearby is not None:
            return nearby[1]
        return NO_MATCH


def scatter_plot(
    x_scale: Scale,
    y_scale: Scale,
    *,
    config: EngineConfig | None = None,
    color_scale: ColorScale | None = None,
    component_id: str | None = None,
    render_controller: RenderController | None = None,
) -> Plot:
    """Point-mark plot projecting the `x`/`y` fields of each datum onto the given scales."""

    strategy = PointMarkStrategy(config=config, color_scale=color_scale)
    return Plot(
        strategy,
        x_scale=x_scale,
        y_scale=y_scale,
        config=config,
        component_id=component_id,
        render_controller=render_controller,
    )


def _constant(value: Any) -> Projector:
    return accessorize(lambda: value)


def _require_position(projectors: dict[str, Projector]) -> None:
    missing = [attr for attr in ("x", "y") if attr not in projectors]
    if missing:
        raise PlotDataError(f"point marks need projections for: {', '.join(missing)}")
