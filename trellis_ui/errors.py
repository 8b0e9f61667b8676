from __future__ import annotations


class ComponentStateError(RuntimeError):
    """Raised when a component lifecycle call is made out of order."""
