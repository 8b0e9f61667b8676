from __future__ import annotations

from dataclasses import dataclass
import inspect
import itertools
from typing import Any, Iterable, Mapping, Protocol

from trellis_plot.animators import Animator, NullAnimator
from trellis_plot.dataset import Dataset
from trellis_plot.drawer import AttrToProjector, Drawer, DrawStep, Projector, RenderedMark
from trellis_plot.errors import PlotDataError
from trellis_plot.scale import Scale
from trellis_ui.component import Component
from trellis_ui.component_schema import Point, RenderSurface
from trellis_ui.config import DEFAULT_CONFIG, EngineConfig
from trellis_ui.render_controller import RenderController


@dataclass(frozen=True)
class Projection:
    accessor: Projector
    scale: Scale | None = None


@dataclass(frozen=True)
class PlotDatasetEntry:
    dataset: Dataset
    plot_metadata: dict[str, Any]
    drawer: Drawer


@dataclass(frozen=True)
class ClosestMark:
    mark: RenderedMark | None
    pixel_position: Point | None
    datum: Any


NO_MATCH = ClosestMark(mark=None, pixel_position=None, datum=None)


class PlotStrategy(Protocol):
    """What a concrete mark type contributes to the generic `Plot` driver."""

    def default_projectors(self, plot: "Plot") -> dict[str, Projector]:
        ...

    def default_animators(self) -> dict[str, Animator]:
        ...

    def draw_steps(self, plot: "Plot") -> list[DrawStep]:
        ...

    def make_drawer(self, key: str) -> Drawer:
        ...

    def closest_mark(self, plot: "Plot", point: Point, max_radius: float) -> ClosestMark:
        ...


def accessorize(accessor: Any) -> Projector:
    """Normalize an accessor to `(datum, index, user_metadata, plot_metadata) -> value`.

    Callables may take any prefix of those four arguments. Strings name a
    field of the datum (mapping key or attribute), except strings starting
    with `#`, which are constants like every other value.
    """

    if callable(accessor):
        return _adapt_arity(accessor)
    if isinstance(accessor, str) and not accessor.startswith("#"):
        return _field_getter(accessor)

    def constant(datum: Any, index: int, user_metadata: Any, plot_metadata: Mapping[str, Any]) -> Any:
        return accessor

    return constant


def _field_getter(name: str) -> Projector:
    def get_field(datum: Any, index: int, user_metadata: Any, plot_metadata: Mapping[str, Any]) -> Any:
        if isinstance(datum, Mapping):
            return datum.get(name)
        return getattr(datum, name, None)

    return get_field


def _adapt_arity(fn: Any) -> Projector:
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        # Builtins without an introspectable signature get the datum only.
        arity = 1
    else:
        if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
            arity = 4
        else:
            positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            arity = min(4, sum(1 for p in params if p.kind in positional))

    def projector(datum: Any, index: int, user_metadata: Any, plot_metadata: Mapping[str, Any]) -> Any:
        return fn(*(datum, index, user_metadata, plot_metadata)[:arity])

    return projector


def _scaled(projection: Projection) -> Projector:
    scale = projection.scale
    accessor = projection.accessor
    if scale is None:
        return accessor

    def projector(datum: Any, index: int, user_metadata: Any, plot_metadata: Mapping[str, Any]) -> Any:
        return scale.scale(accessor(datum, index, user_metadata, plot_metadata))

    return projector


class Plot(Component):
    """Generic data-bound component; a `PlotStrategy` supplies the marks.

    Datasets are drawn, and hit-tested, in the order their keys were added.
    Projected attributes report their extents to their scales only while the
    plot is anchored, so a detached plot no longer influences any autodomain.
    """

    def __init__(
        self,
        strategy: PlotStrategy,
        *,
        x_scale: Scale | None = None,
        y_scale: Scale | None = None,
        config: EngineConfig | None = None,
        component_id: str | None = None,
        render_controller: RenderController | None = None,
    ) -> None:
        super().__init__(component_id, render_controller=render_controller)
        self._strategy = strategy
        self._config = config or DEFAULT_CONFIG
        self._entries: dict[str, PlotDatasetEntry] = {}
        self._projections: dict[str, Projection] = {}
        self._key_counter = itertools.count()
        self._animate = False
        self._animators: dict[str, Animator] = dict(strategy.default_animators())
        self._data_changed = False
        self._last_draw_time = 0.0
        self._interactions: list[Any] = []
        self._x_scale = x_scale
        self._y_scale = y_scale
        if x_scale is not None:
            self.project("x", "x", x_scale)
        if y_scale is not None:
            self.project("y", "y", y_scale)

    @property
    def strategy(self) -> PlotStrategy:
        return self._strategy

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def x_scale(self) -> Scale | None:
        return self._x_scale

    @property
    def y_scale(self) -> Scale | None:
        return self._y_scale

    @property
    def data_changed(self) -> bool:
        return self._data_changed

    @property
    def last_draw_time(self) -> float:
        return self._last_draw_time

    # -- datasets ------------------------------------------------------------

    def add_dataset(self, dataset: Dataset | Iterable[Any], key: str | None = None) -> "Plot":
        if not isinstance(dataset, Dataset):
            dataset = Dataset(dataset)
        if key is None:
            key = self._next_key()
        if key in self._entries:
            self._remove_entry(key)
        entry = PlotDatasetEntry(dataset, {"dataset_key": key}, self._strategy.make_drawer(key))
        self._entries[key] = entry
        dataset.broadcaster.register(self._on_dataset_update, key=self)
        self._on_dataset_update(dataset)
        return self

    def remove_dataset(self, key_or_dataset: str | Dataset) -> "Plot":
        if isinstance(key_or_dataset, Dataset):
            keys = [k for k, e in self._entries.items() if e.dataset is key_or_dataset]
            if not keys:
                raise PlotDataError("dataset is not part of this plot")
        else:
            if key_or_dataset not in self._entries:
                raise PlotDataError(f"unknown dataset key: {key_or_dataset}")
            keys = [key_or_dataset]
        for key in keys:
            self._remove_entry(key)
        self._data_changed = True
        self.invalidate_layout()
        return self

    def dataset(self, key: str) -> Dataset:
        try:
            return self._entries[key].dataset
        except KeyError:
            raise PlotDataError(f"unknown dataset key: {key}") from None

    def datasets(self) -> list[Dataset]:
        return [entry.dataset for entry in self._entries.values()]

    def dataset_keys(self) -> list[str]:
        return list(self._entries)

    def dataset_entries(self) -> list[tuple[str, PlotDatasetEntry]]:
        return list(self._entries.items())

    def _next_key(self) -> str:
        while True:
            key = f"_{next(self._key_counter)}"
            if key not in self._entries:
                return key

    def _remove_entry(self, key: str) -> None:
        entry = self._entries.pop(key)
        entry.drawer.remove()
        entry.dataset.forget_extents(plot_metadata=entry.plot_metadata)
        provider_key = self._provider_key(key)
        for attr, projection in self._projections.items():
            if projection.scale is not None:
                projection.scale.remove_extent(provider_key, attr)
        if not any(e.dataset is entry.dataset for e in self._entries.values()):
            entry.dataset.broadcaster.deregister(self)

    def _on_dataset_update(self, dataset: Dataset) -> None:
        self._update_extents()
        self._data_changed = True
        self.invalidate_layout()

    # -- projections ---------------------------------------------------------

    def project(self, attr: str, accessor: Any, scale: Scale | None = None) -> "Plot":
        previous = self._projections.get(attr)
        if previous is not None:
            for entry in self._entries.values():
                entry.dataset.forget_extents(accessor=previous.accessor)
        if previous is not None and previous.scale is not None:
            for key in self._entries:
                previous.scale.remove_extent(self._provider_key(key), attr)
        self._projections[attr] = Projection(accessorize(accessor), scale)
        if previous is not None and previous.scale is not None and previous.scale is not scale:
            self._release_scale(previous.scale)
        if scale is not None:
            scale.broadcaster.register(self._on_scale_update, key=self)
        self._update_extent(attr)
        self.schedule_render()
        return self

    def projections(self) -> dict[str, Projection]:
        return dict(self._projections)

    def generate_attr_to_projector(self) -> dict[str, Projector]:
        projectors = dict(self._strategy.default_projectors(self))
        for attr, projection in self._projections.items():
            projectors[attr] = _scaled(projection)
        return projectors

    def generate_draw_steps(self) -> list[DrawStep]:
        return self._strategy.draw_steps(self)

    def _provider_key(self, dataset_key: str) -> str:
        return f"{self.component_id}_{dataset_key}"

    def _update_extents(self) -> None:
        for attr in self._projections:
            self._update_extent(attr)

    def _update_extent(self, attr: str) -> None:
        projection = self._projections[attr]
        scale = projection.scale
        if scale is None:
            return
        for key, entry in self._entries.items():
            provider_key = self._provider_key(key)
            extent = entry.dataset.extent(projection.accessor, scale.coerce, entry.plot_metadata)
            if not extent or not self.is_anchored:
                scale.remove_extent(provider_key, attr)
            else:
                scale.update_extent(provider_key, attr, extent)

    def _release_scale(self, scale: Scale) -> None:
        if not any(p.scale is scale for p in self._projections.values()):
            scale.broadcaster.deregister(self)

    def _on_scale_update(self, scale: Scale) -> None:
        self.schedule_render()

    # -- animation -----------------------------------------------------------

    def animate(self, enabled: bool = True) -> "Plot":
        self._animate = bool(enabled)
        return self

    @property
    def animation_enabled(self) -> bool:
        return self._animate

    def animator(self, key: str) -> Animator:
        if not self._animate:
            return NullAnimator()
        return self._animators.get(key, NullAnimator())

    def set_animator(self, key: str, animator: Animator) -> "Plot":
        self._animators[key] = animator
        return self

    # -- interaction ---------------------------------------------------------

    def closest_mark(self, point: Point | tuple[float, float], max_radius: float | None = None) -> ClosestMark:
        if not isinstance(point, Point):
            point = Point(float(point[0]), float(point[1]))
        radius = self._config.hover_radius if max_radius is None else float(max_radius)
        if radius < 0:
            raise ValueError("max_radius must be >= 0")
        return self._strategy.closest_mark(self, point, radius)

    def register_interaction(self, interaction: Any) -> "Plot":
        interaction.anchor(self)
        self._interactions.append(interaction)
        return self

    def interactions(self) -> list[Any]:
        return list(self._interactions)

    # -- component hooks -----------------------------------------------------

    def anchor(self, surface: RenderSurface) -> "Plot":
        super().anchor(surface)
        self._update_extents()
        return self

    def _unanchor(self) -> None:
        super()._unanchor()
        for entry in self._entries.values():
            entry.drawer.remove()
        self._update_extents()

    def remove(self) -> None:
        super().remove()
        for key in list(self._entries):
            self._remove_entry(key)
        for interaction in self._interactions:
            interaction.unanchor()
        self._interactions.clear()
        for projection in self._projections.values():
            if projection.scale is not None:
                projection.scale.broadcaster.deregister(self)

    def _layout_children(self) -> None:
        if self._x_scale is not None:
            self._x_scale.set_range((0.0, self.width()))
        if self._y_scale is not None:
            self._y_scale.set_range((self.height(), 0.0))

    def _paint(self, surface: RenderSurface) -> None:
        steps = self.generate_draw_steps()
        longest = 0.0
        for entry in self._entries.values():
            entry.drawer.setup(surface)
            elapsed = entry.drawer.draw(
                entry.dataset.data(),
                steps,
                entry.dataset.metadata(),
                entry.plot_metadata,
            )
            longest = max(longest, elapsed)
        self._last_draw_time = longest
        self._data_changed = False


def attr_to_projector_with(projectors: AttrToProjector, **overrides: Any) -> dict[str, Projector]:
    """Copy of `projectors` with some attributes replaced by accessors."""

    merged = dict(projectors)
    for attr, accessor in overrides.items():
        merged[attr] = accessorize(accessor)
    return merged
