from __future__ import annotations

from typing import Callable, Protocol

from trellis_plot.plot import NO_MATCH, ClosestMark
from trellis_ui.component_schema import BoundingBox, Point
from trellis_ui.errors import ComponentStateError


HoverCallback = Callable[[ClosestMark], None]


class Hoverable(Protocol):
    component_id: str

    def box(self) -> BoundingBox | None:
        ...

    def absolute_origin(self) -> Point:
        ...

    def closest_mark(self, point: Point, max_radius: float | None = None) -> ClosestMark:
        ...


class HoverInteraction:
    """Turns raw pointer positions into hover-over / hover-out callbacks.

    Pointer coordinates are in root-surface pixels; they are shifted into the
    component's own frame before asking it for the closest mark.
    """

    def __init__(self, *, max_radius: float | None = None) -> None:
        if max_radius is not None and max_radius < 0:
            raise ValueError("max_radius must be >= 0")
        self._max_radius = max_radius
        self._component: Hoverable | None = None
        self._current: ClosestMark = NO_MATCH
        self._over_callbacks: list[HoverCallback] = []
        self._out_callbacks: list[HoverCallback] = []

    def anchor(self, component: Hoverable) -> "HoverInteraction":
        self._component = component
        self._current = NO_MATCH
        return self

    def unanchor(self) -> "HoverInteraction":
        self._component = None
        self._current = NO_MATCH
        return self

    def on_hover_over(self, callback: HoverCallback) -> "HoverInteraction":
        self._over_callbacks.append(callback)
        return self

    def on_hover_out(self, callback: HoverCallback) -> "HoverInteraction":
        self._out_callbacks.append(callback)
        return self

    def current(self) -> ClosestMark:
        return self._current

    def handle_pointer(self, x: float, y: float) -> ClosestMark:
        component = self._component
        if component is None:
            raise ComponentStateError("HoverInteraction is not registered on a component")
        box = component.box()
        if box is None:
            raise ComponentStateError(f"{component.component_id} has no layout")
        origin = component.absolute_origin()
        local = Point(x - origin.x, y - origin.y)
        if not (0 <= local.x <= box.width and 0 <= local.y <= box.height):
            self.handle_pointer_exit()
            return NO_MATCH

        result = component.closest_mark(local, self._max_radius)
        if result.mark is None:
            self.handle_pointer_exit()
            return result
        previous = self._current.mark
        self._current = result
        if previous is None or (previous.key, previous.index) != (result.mark.key, result.mark.index):
            for callback in list(self._over_callbacks):
                callback(result)
        return result

    def handle_pointer_exit(self) -> None:
        previous = self._current
        self._current = NO_MATCH
        if previous.mark is not None:
            for callback in list(self._out_callbacks):
                callback(previous)
