from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol


ComponentState = Literal["unanchored", "anchored", "placed", "detached"]
XAlignment = Literal["left", "center", "right"]
YAlignment = Literal["top", "center", "bottom"]

X_ALIGN_PROPORTIONS: dict[str, float] = {"left": 0.0, "center": 0.5, "right": 1.0}
Y_ALIGN_PROPORTIONS: dict[str, float] = {"top": 0.0, "center": 0.5, "bottom": 1.0}


class RenderSurface(Protocol):
    """Drawing target a component tree is anchored to.

    `region` returns a surface restricted to `box`; anything painted through it
    is clipped to that box.
    """

    @property
    def width(self) -> int:
        ...

    @property
    def height(self) -> int:
        ...

    def region(self, box: "BoundingBox") -> "RenderSurface":
        ...

    def clear(self) -> None:
        ...


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("BoundingBox width/height must be >= 0")

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height

    def translated(self, dx: float, dy: float) -> "BoundingBox":
        return BoundingBox(x=self.x + dx, y=self.y + dy, width=self.width, height=self.height)


@dataclass(frozen=True)
class SpaceRequest:
    """Minimum size a component needs, and whether it would use more."""

    width: float
    height: float
    wants_width: bool = False
    wants_height: bool = False

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("SpaceRequest width/height must be >= 0")


EMPTY_REQUEST = SpaceRequest(width=0.0, height=0.0)
