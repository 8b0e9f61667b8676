from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Sequence

from trellis_ui.component import Component
from trellis_ui.component_schema import EMPTY_REQUEST, Point, SpaceRequest
from trellis_ui.config import DEFAULT_CONFIG, EngineConfig
from trellis_ui.container import ComponentContainer
from trellis_ui.render_controller import RenderController

LOGGER = logging.getLogger(__name__)

Cell = Component | None


@dataclass(frozen=True)
class TableLayout:
    guaranteed_widths: tuple[float, ...]
    guaranteed_heights: tuple[float, ...]
    col_proportional_space: tuple[float, ...]
    row_proportional_space: tuple[float, ...]
    wants_width: bool
    wants_height: bool
    iterations: int

    @property
    def col_widths(self) -> tuple[float, ...]:
        return tuple(g + p for g, p in zip(self.guaranteed_widths, self.col_proportional_space, strict=True))

    @property
    def row_heights(self) -> tuple[float, ...]:
        return tuple(g + p for g, p in zip(self.guaranteed_heights, self.row_proportional_space, strict=True))


@dataclass(frozen=True)
class _Guarantees:
    widths: list[float]
    heights: list[float]
    wants_width: list[bool]
    wants_height: list[bool]


class Table(ComponentContainer):
    """Grid of optional components sized by iterative space negotiation.

    Every cell is asked for its minimum size given an offer, the minimums
    become per-track guarantees, and leftover space is split among tracks
    that can use it. The offer changes the answer for components such as
    wrapping text, so the query is repeated until the free space stops
    changing or the iteration bound is hit.
    """

    def __init__(
        self,
        rows: Sequence[Sequence[Cell]] = (),
        component_id: str | None = None,
        *,
        config: EngineConfig | None = None,
        render_controller: RenderController | None = None,
    ) -> None:
        super().__init__(component_id=component_id, render_controller=render_controller)
        self._config = config or DEFAULT_CONFIG
        self._rows: list[list[Cell]] = []
        self._row_weights: list[float | None] = []
        self._col_weights: list[float | None] = []
        self._row_padding = 0.0
        self._col_padding = 0.0
        self._last_layout: TableLayout | None = None
        for row_index, row in enumerate(rows):
            if not row:
                self._ensure_cell(row_index, 0)
            for col_index, component in enumerate(row):
                self._ensure_cell(row_index, col_index)
                if component is not None:
                    self.add_component(row_index, col_index, component)

    @property
    def shape(self) -> tuple[int, int]:
        return (len(self._rows), len(self._col_weights))

    def rows(self) -> list[list[Cell]]:
        return [list(row) for row in self._rows]

    def cell(self, row: int, col: int) -> Cell:
        return self._rows[row][col]

    def add_component(self, row: int, col: int, component: Component | None) -> bool:  # type: ignore[override]
        if row < 0 or col < 0:
            raise ValueError("row and col must be >= 0")
        if component is None or component in self:
            return False
        self._ensure_cell(row, col)
        if self._rows[row][col] is not None:
            raise ValueError(f"table cell ({row}, {col}) is already occupied")
        self._rows[row][col] = component
        return super().add_component(component)

    def remove_component(self, component: Component) -> None:
        for row in self._rows:
            for col_index, cell in enumerate(row):
                if cell is component:
                    row[col_index] = None
        super().remove_component(component)

    def set_padding(self, *, row: float | None = None, col: float | None = None) -> "Table":
        if row is not None:
            if row < 0:
                raise ValueError("row padding must be >= 0")
            self._row_padding = float(row)
        if col is not None:
            if col < 0:
                raise ValueError("col padding must be >= 0")
            self._col_padding = float(col)
        self.invalidate_layout()
        return self

    @property
    def padding(self) -> tuple[float, float]:
        return (self._row_padding, self._col_padding)

    def set_row_weight(self, index: int, weight: float | None) -> "Table":
        self._row_weights[index] = _check_weight(weight)
        self.invalidate_layout()
        return self

    def set_col_weight(self, index: int, weight: float | None) -> "Table":
        self._col_weights[index] = _check_weight(weight)
        self.invalidate_layout()
        return self

    def last_layout(self) -> TableLayout | None:
        return self._last_layout

    def fixed_width(self) -> bool:
        return all(cell is None or cell.fixed_width() for row in self._rows for cell in row)

    def fixed_height(self) -> bool:
        return all(cell is None or cell.fixed_height() for row in self._rows for cell in row)

    def requested_space(self, available_width: float, available_height: float) -> SpaceRequest:
        n_rows, n_cols = self.shape
        layout = self._iterate_layout(available_width, available_height)
        return SpaceRequest(
            width=sum(layout.guaranteed_widths) + self._col_padding * max(0, n_cols - 1),
            height=sum(layout.guaranteed_heights) + self._row_padding * max(0, n_rows - 1),
            wants_width=layout.wants_width,
            wants_height=layout.wants_height,
        )

    def _layout_children(self) -> None:
        layout = self._iterate_layout(self.width(), self.height())
        self._last_layout = layout
        col_widths = layout.col_widths
        row_heights = layout.row_heights
        y = 0.0
        for row_index, row in enumerate(self._rows):
            x = 0.0
            for col_index, component in enumerate(row):
                if component is not None:
                    component.compute_layout(Point(x, y), col_widths[col_index], row_heights[row_index])
                x += col_widths[col_index] + self._col_padding
            y += row_heights[row_index] + self._row_padding

    def _iterate_layout(self, available_width: float, available_height: float) -> TableLayout:
        n_rows, n_cols = self.shape
        width_after_padding = max(0.0, available_width - self._col_padding * max(0, n_cols - 1))
        height_after_padding = max(0.0, available_height - self._row_padding * max(0, n_rows - 1))

        columns = self._columns()
        row_weights = _track_weights(self._row_weights, self._rows, lambda c: c is None or c.fixed_height())
        col_weights = _track_weights(self._col_weights, columns, lambda c: c is None or c.fixed_width())

        # Fixed tracks start at half weight so the first query offers them some space.
        col_space = _proportional_space([w if w != 0 else 0.5 for w in col_weights], width_after_padding)
        row_space = _proportional_space([w if w != 0 else 0.5 for w in row_weights], height_after_padding)

        guarantees = _Guarantees([0.0] * n_cols, [0.0] * n_rows, [False] * n_cols, [False] * n_rows)
        free_width: float | None = None
        free_height: float | None = None
        iterations = 0
        max_iterations = self._config.table_max_iterations
        while True:
            offered_widths = [g + p for g, p in zip(guarantees.widths, col_space, strict=True)]
            offered_heights = [g + p for g, p in zip(guarantees.heights, row_space, strict=True)]
            guarantees = self._determine_guarantees(offered_widths, offered_heights)

            last_free_width = free_width
            last_free_height = free_height
            free_width = width_after_padding - sum(guarantees.widths)
            free_height = height_after_padding - sum(guarantees.heights)

            col_space = _proportional_space(_wanting_weights(guarantees.wants_width, col_weights), free_width)
            row_space = _proportional_space(_wanting_weights(guarantees.wants_height, row_weights), free_height)
            iterations += 1

            can_improve_width = free_width > 0 and free_width != last_free_width
            can_improve_height = free_height > 0 and free_height != last_free_height
            if not (can_improve_width or can_improve_height):
                break
            if iterations >= max_iterations:
                LOGGER.debug(
                    "%s: layout did not settle after %d iterations; using last allocation",
                    self.component_id,
                    iterations,
                )
                break

        # Hand out what is left by the real weights, not the wants-more weights.
        free_width = max(0.0, width_after_padding - sum(guarantees.widths))
        free_height = max(0.0, height_after_padding - sum(guarantees.heights))
        return TableLayout(
            guaranteed_widths=tuple(guarantees.widths),
            guaranteed_heights=tuple(guarantees.heights),
            col_proportional_space=tuple(_proportional_space(col_weights, free_width)),
            row_proportional_space=tuple(_proportional_space(row_weights, free_height)),
            wants_width=any(guarantees.wants_width),
            wants_height=any(guarantees.wants_height),
            iterations=iterations,
        )

    def _determine_guarantees(self, offered_widths: list[float], offered_heights: list[float]) -> _Guarantees:
        n_rows, n_cols = self.shape
        widths = [0.0] * n_cols
        heights = [0.0] * n_rows
        wants_width = [False] * n_cols
        wants_height = [False] * n_rows
        for row_index, row in enumerate(self._rows):
            for col_index, component in enumerate(row):
                if component is None:
                    request = EMPTY_REQUEST
                else:
                    request = component.requested_space(offered_widths[col_index], offered_heights[row_index])
                allocated_width = min(request.width, offered_widths[col_index])
                allocated_height = min(request.height, offered_heights[row_index])
                widths[col_index] = max(widths[col_index], allocated_width)
                heights[row_index] = max(heights[row_index], allocated_height)
                # A request larger than the offer also counts as wanting more.
                wants_width[col_index] = (
                    wants_width[col_index] or request.wants_width or request.width > offered_widths[col_index]
                )
                wants_height[row_index] = (
                    wants_height[row_index] or request.wants_height or request.height > offered_heights[row_index]
                )
        return _Guarantees(widths, heights, wants_width, wants_height)

    def _columns(self) -> list[list[Cell]]:
        _, n_cols = self.shape
        return [[row[col] for row in self._rows] for col in range(n_cols)]

    def _ensure_cell(self, row: int, col: int) -> None:
        n_rows, n_cols = self.shape
        if col >= n_cols:
            extra = col + 1 - n_cols
            for existing in self._rows:
                existing.extend([None] * extra)
            self._col_weights.extend([None] * extra)
            n_cols = col + 1
        while len(self._rows) <= row:
            self._rows.append([None] * n_cols)
            self._row_weights.append(None)


def _check_weight(weight: float | None) -> float | None:
    if weight is None:
        return None
    if weight < 0:
        raise ValueError("track weight must be >= 0")
    return float(weight)


def _track_weights(
    explicit: list[float | None],
    tracks: Sequence[Sequence[Cell]],
    is_fixed: Callable[[Cell], bool],
) -> list[float]:
    weights: list[float] = []
    for weight, track in zip(explicit, tracks, strict=True):
        if weight is not None:
            weights.append(weight)
        else:
            weights.append(0.0 if all(is_fixed(cell) for cell in track) else 1.0)
    return weights


def _wanting_weights(wants: list[bool], weights: list[float]) -> list[float]:
    if not any(wants):
        return weights
    return [(0.1 if w else 0.0) + weight for w, weight in zip(wants, weights, strict=True)]


def _proportional_space(weights: Sequence[float], free_space: float) -> list[float]:
    total = sum(weights)
    if total == 0:
        return [0.0] * len(weights)
    return [free_space * weight / total for weight in weights]
