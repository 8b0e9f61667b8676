from __future__ import annotations

from typing import Iterable

from .component import Component
from .component_schema import Point, RenderSurface, SpaceRequest
from .render_controller import RenderController


class ComponentContainer(Component):
    """Ordered owner of child components.

    Insertion order is paint order. Children hold only a weak reference back
    to the container; the container's list is the single owner.
    """

    def __init__(
        self,
        components: Iterable[Component | None] = (),
        component_id: str | None = None,
        *,
        render_controller: RenderController | None = None,
    ) -> None:
        super().__init__(component_id, render_controller=render_controller)
        self._components: list[Component] = []
        for component in components:
            self.add_component(component)

    def components(self) -> list[Component]:
        return list(self._components)

    def empty(self) -> bool:
        return len(self._components) == 0

    def __contains__(self, component: object) -> bool:
        return any(c is component for c in self._components)

    def add_component(self, component: Component | None, prepend: bool = False) -> bool:
        if component is None or component in self:
            return False
        previous = component.parent()
        if previous is not None:
            component.detach()
        if prepend:
            self._components.insert(0, component)
        else:
            self._components.append(component)
        component._set_parent(self)
        if self.is_anchored and self.surface is not None:
            component.anchor(self.surface)
        self.invalidate_layout()
        return True

    def remove_component(self, component: Component) -> None:
        for index, child in enumerate(self._components):
            if child is component:
                del self._components[index]
                component._set_parent(None)
                self.invalidate_layout()
                return

    def detach_all(self) -> "ComponentContainer":
        # Each detach() removes the child from self._components.
        for component in list(self._components):
            component.detach()
        return self

    def anchor(self, surface: RenderSurface) -> "ComponentContainer":
        super().anchor(surface)
        for component in self._components:
            component.anchor(surface)
        return self

    def render(self) -> "ComponentContainer":
        super().render()
        for component in self._components:
            component.render()
        return self

    def remove(self) -> None:
        super().remove()
        for component in list(self._components):
            component.remove()

    def _unanchor(self) -> None:
        super()._unanchor()
        for component in self._components:
            component._unanchor()


class Group(ComponentContainer):
    """Children stacked in the same box, first child painted first."""

    def requested_space(self, available_width: float, available_height: float) -> SpaceRequest:
        requests = [c.requested_space(available_width, available_height) for c in self._components]
        return SpaceRequest(
            width=max((r.width for r in requests), default=0.0),
            height=max((r.height for r in requests), default=0.0),
            wants_width=any(r.wants_width for r in requests),
            wants_height=any(r.wants_height for r in requests),
        )

    def fixed_width(self) -> bool:
        return all(c.fixed_width() for c in self._components)

    def fixed_height(self) -> bool:
        return all(c.fixed_height() for c in self._components)

    def _layout_children(self) -> None:
        for component in self._components:
            component.compute_layout(Point(0.0, 0.0), self.width(), self.height())

    def merge(self, other: Component, *, below: bool = False) -> "Group":
        self.add_component(other, prepend=not below)
        return self
