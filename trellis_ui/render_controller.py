from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .config import DEFAULT_CONFIG, RenderPolicy

if TYPE_CHECKING:
    from .component import Component

LOGGER = logging.getLogger(__name__)


class RenderController:
    """Queues layout and render requests and flushes them in order.

    With the `immediate` policy every request is flushed before the call
    returns. With `deferred` the host decides when to call `flush()`, so
    repeated invalidations of the same component collapse into one pass.
    """

    def __init__(self, policy: RenderPolicy = DEFAULT_CONFIG.render_policy) -> None:
        self._policy: RenderPolicy = "immediate"
        self.set_policy(policy)
        self._layout_queue: dict[int, Component] = {}
        self._render_queue: dict[int, Component] = {}
        self._flushing = False

    @property
    def policy(self) -> RenderPolicy:
        return self._policy

    def set_policy(self, policy: RenderPolicy) -> "RenderController":
        if policy not in ("immediate", "deferred"):
            raise ValueError(f"unknown render policy: {policy}")
        self._policy = policy
        return self

    def pending(self) -> bool:
        return bool(self._layout_queue or self._render_queue)

    def register_to_compute_layout(self, component: "Component") -> None:
        self._layout_queue[id(component)] = component
        self._request_flush()

    def register_to_render(self, component: "Component") -> None:
        self._render_queue[id(component)] = component
        self._request_flush()

    def discard(self, component: "Component") -> None:
        self._layout_queue.pop(id(component), None)
        self._render_queue.pop(id(component), None)

    def flush(self) -> None:
        if self._flushing:
            # Requests made while flushing are picked up by the running loop.
            return
        self._flushing = True
        layout_count = 0
        render_count = 0
        try:
            while self._layout_queue or self._render_queue:
                while self._layout_queue:
                    batch = list(self._layout_queue.values())
                    self._layout_queue.clear()
                    for component in batch:
                        if not component.is_anchored:
                            continue
                        component.compute_layout()
                        self._render_queue[id(component)] = component
                        layout_count += 1
                batch = list(self._render_queue.values())
                self._render_queue.clear()
                for component in batch:
                    if component.is_anchored and component.has_layout and component.surface is not None:
                        component.surface.region(component.absolute_box()).clear()
                        component.render()
                        render_count += 1
        finally:
            self._flushing = False
        LOGGER.debug("flushed %d layout and %d render passes", layout_count, render_count)

    def _request_flush(self) -> None:
        if self._policy == "immediate":
            self.flush()


_DEFAULT_CONTROLLER = RenderController()


def default_render_controller() -> RenderController:
    return _DEFAULT_CONTROLLER
