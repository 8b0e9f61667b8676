from __future__ import annotations

import itertools
from typing import TYPE_CHECKING
import weakref

from .component_schema import (
    X_ALIGN_PROPORTIONS,
    Y_ALIGN_PROPORTIONS,
    BoundingBox,
    ComponentState,
    Point,
    RenderSurface,
    SpaceRequest,
    XAlignment,
    YAlignment,
)
from .errors import ComponentStateError
from .render_controller import RenderController, default_render_controller

if TYPE_CHECKING:
    from .container import ComponentContainer, Group


_COMPONENT_IDS = itertools.count()


def _as_point(origin: Point | tuple[float, float]) -> Point:
    if isinstance(origin, Point):
        return origin
    x, y = origin
    return Point(float(x), float(y))


class Component:
    """Base layout unit.

    A component is anchored to a surface, asked how much space it wants,
    given a box, and then painted into that box. Subclasses override
    `requested_space`, `_layout_children` and `_paint`; nothing else needs to
    change for a new leaf type.
    """

    _fixed_width_flag = False
    _fixed_height_flag = False

    def __init__(
        self,
        component_id: str | None = None,
        *,
        render_controller: RenderController | None = None,
    ) -> None:
        self.component_id = component_id or f"{type(self).__name__.lower()}-{next(_COMPONENT_IDS)}"
        self._render_controller = render_controller
        self._surface: RenderSurface | None = None
        self._state: ComponentState = "unanchored"
        self._parent_ref: weakref.ReferenceType[ComponentContainer] | None = None
        self._box: BoundingBox | None = None
        self._offered: tuple[Point, float, float] | None = None
        self._x_align: XAlignment = "left"
        self._y_align: YAlignment = "top"
        self._x_offset = 0.0
        self._y_offset = 0.0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.component_id!r}, state={self._state})"

    @property
    def state(self) -> ComponentState:
        return self._state

    @property
    def is_anchored(self) -> bool:
        return self._state in ("anchored", "placed")

    @property
    def has_layout(self) -> bool:
        return self._box is not None

    @property
    def surface(self) -> RenderSurface | None:
        return self._surface

    @property
    def render_controller(self) -> RenderController:
        return self._render_controller or default_render_controller()

    def parent(self) -> "ComponentContainer | None":
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def _set_parent(self, parent: "ComponentContainer | None") -> None:
        self._parent_ref = None if parent is None else weakref.ref(parent)

    # -- lifecycle -----------------------------------------------------------

    def anchor(self, surface: RenderSurface) -> "Component":
        if self._state == "detached":
            raise ComponentStateError(f"{self.component_id} was removed and cannot be anchored again")
        if self.is_anchored and self._surface is surface:
            return self
        self._surface = surface
        self._box = None
        self._state = "anchored"
        return self

    def requested_space(self, available_width: float, available_height: float) -> SpaceRequest:
        _ = (available_width, available_height)
        return SpaceRequest(
            width=0.0,
            height=0.0,
            wants_width=not self.fixed_width(),
            wants_height=not self.fixed_height(),
        )

    def fixed_width(self) -> bool:
        return self._fixed_width_flag

    def fixed_height(self) -> bool:
        return self._fixed_height_flag

    def compute_layout(
        self,
        origin: Point | tuple[float, float] | None = None,
        width: float | None = None,
        height: float | None = None,
    ) -> "Component":
        if origin is None and width is None and height is None:
            origin, width, height = self._default_offer()
        elif origin is None or width is None or height is None:
            raise ValueError("origin, width and height must be given together")
        offered_origin = _as_point(origin)
        offered_w = max(0.0, float(width))
        offered_h = max(0.0, float(height))
        self._offered = (offered_origin, offered_w, offered_h)

        request = self.requested_space(offered_w, offered_h)
        w = min(offered_w, request.width) if self.fixed_width() else offered_w
        h = min(offered_h, request.height) if self.fixed_height() else offered_h
        x = offered_origin.x + (offered_w - w) * X_ALIGN_PROPORTIONS[self._x_align] + self._x_offset
        y = offered_origin.y + (offered_h - h) * Y_ALIGN_PROPORTIONS[self._y_align] + self._y_offset
        self._box = BoundingBox(x=x, y=y, width=w, height=h)
        if self.is_anchored:
            self._state = "placed"
        self._layout_children()
        return self

    def _default_offer(self) -> tuple[Point, float, float]:
        if self._offered is not None:
            return self._offered
        if self.parent() is None and self._surface is not None:
            return (Point(0.0, 0.0), float(self._surface.width), float(self._surface.height))
        raise ComponentStateError(
            f"{self.component_id}: compute_layout() without arguments needs a previous layout or a top-level surface"
        )

    def _layout_children(self) -> None:
        """Hook run after this component's box is stored."""

    def render(self) -> "Component":
        if not self.is_anchored or self._surface is None:
            raise ComponentStateError(f"{self.component_id} must be anchored before render()")
        if self._box is None:
            raise ComponentStateError(f"{self.component_id}: compute_layout() must be called before render()")
        self._paint(self._surface.region(self.absolute_box()))
        return self

    def _paint(self, surface: RenderSurface) -> None:
        """Paint this component's own content; `surface` is clipped to its box."""

    def render_to(self, surface: RenderSurface) -> "Component":
        self.anchor(surface)
        self.compute_layout(Point(0.0, 0.0), surface.width, surface.height)
        self.render()
        return self

    def detach(self) -> "Component":
        if self.is_anchored and self._surface is not None and self._box is not None:
            self._surface.region(self.absolute_box()).clear()
        parent = self.parent()
        if parent is not None:
            parent.remove_component(self)
        self._set_parent(None)
        self._unanchor()
        return self

    def _unanchor(self) -> None:
        self.render_controller.discard(self)
        self._surface = None
        self._box = None
        self._offered = None
        if self._state != "detached":
            self._state = "unanchored"

    def remove(self) -> None:
        self.detach()
        self._state = "detached"

    # -- invalidation --------------------------------------------------------

    def invalidate_layout(self) -> None:
        parent = self.parent()
        if parent is not None:
            parent.invalidate_layout()
        elif self.is_anchored and self._box is not None:
            self.render_controller.register_to_compute_layout(self)

    def redraw(self) -> "Component":
        self.invalidate_layout()
        return self

    def schedule_render(self) -> None:
        # Render requests are served by the root, which repaints its subtree.
        root = self.root()
        if root.is_anchored and root._box is not None:
            root.render_controller.register_to_render(root)

    def root(self) -> "Component":
        node = self
        parent = node.parent()
        while parent is not None:
            node = parent
            parent = node.parent()
        return node

    # -- geometry ------------------------------------------------------------

    def box(self) -> BoundingBox | None:
        return self._box

    def width(self) -> float:
        return 0.0 if self._box is None else self._box.width

    def height(self) -> float:
        return 0.0 if self._box is None else self._box.height

    def absolute_origin(self) -> Point:
        if self._box is None:
            raise ComponentStateError(f"{self.component_id} has no layout")
        x = self._box.x
        y = self._box.y
        parent = self.parent()
        while parent is not None:
            parent_box = parent.box()
            if parent_box is None:
                raise ComponentStateError(f"{parent.component_id} has no layout")
            x += parent_box.x
            y += parent_box.y
            parent = parent.parent()
        return Point(x, y)

    def absolute_box(self) -> BoundingBox:
        box = self._box
        if box is None:
            raise ComponentStateError(f"{self.component_id} has no layout")
        origin = self.absolute_origin()
        return BoundingBox(x=origin.x, y=origin.y, width=box.width, height=box.height)

    def set_alignment(self, *, x: XAlignment | None = None, y: YAlignment | None = None) -> "Component":
        if x is not None:
            if x not in X_ALIGN_PROPORTIONS:
                raise ValueError(f"unsupported x alignment: {x}")
            self._x_align = x
        if y is not None:
            if y not in Y_ALIGN_PROPORTIONS:
                raise ValueError(f"unsupported y alignment: {y}")
            self._y_align = y
        self.invalidate_layout()
        return self

    def set_offset(self, *, x: float | None = None, y: float | None = None) -> "Component":
        if x is not None:
            self._x_offset = float(x)
        if y is not None:
            self._y_offset = float(y)
        self.invalidate_layout()
        return self

    @property
    def alignment(self) -> tuple[XAlignment, YAlignment]:
        return (self._x_align, self._y_align)

    # -- composition ---------------------------------------------------------

    def merge(self, other: "Component", *, below: bool = False) -> "Group":
        from .container import Group

        if isinstance(other, Group):
            other.add_component(self, prepend=below)
            return other
        members = [self, other] if below else [other, self]
        return Group(members)

    def above(self, other: "Component") -> "Group":
        return self.merge(other, below=False)

    def below(self, other: "Component") -> "Group":
        return self.merge(other, below=True)
