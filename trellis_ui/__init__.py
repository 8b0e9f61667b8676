"""Layout tree for trellis charts: components, containers and the table allocator."""

from .component import Component
from .component_schema import (
    EMPTY_REQUEST,
    BoundingBox,
    ComponentState,
    Point,
    RenderSurface,
    SpaceRequest,
    XAlignment,
    YAlignment,
)
from .config import DEFAULT_CONFIG, EngineConfig, load_config
from .container import ComponentContainer, Group
from .errors import ComponentStateError
from .render_controller import RenderController, default_render_controller
from .table import Table, TableLayout

__all__ = [
    "BoundingBox",
    "Component",
    "ComponentContainer",
    "ComponentState",
    "ComponentStateError",
    "DEFAULT_CONFIG",
    "EMPTY_REQUEST",
    "EngineConfig",
    "Group",
    "Point",
    "RenderController",
    "RenderSurface",
    "SpaceRequest",
    "Table",
    "TableLayout",
    "XAlignment",
    "YAlignment",
    "default_render_controller",
    "load_config",
]
