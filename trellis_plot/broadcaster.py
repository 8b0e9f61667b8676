from __future__ import annotations

from typing import Any, Callable, Hashable


Listener = Callable[[Any], None]


class Broadcaster:
    """Calls every registered listener with the object that owns the broadcaster.

    Listeners are keyed so one subscriber registers at most once; re-registering
    under the same key replaces the callback.
    """

    def __init__(self, source: Any) -> None:
        self._source = source
        self._listeners: dict[Hashable, Listener] = {}

    def register(self, listener: Listener, key: Hashable | None = None) -> "Broadcaster":
        self._listeners[listener if key is None else key] = listener
        return self

    def deregister(self, key: Hashable) -> "Broadcaster":
        self._listeners.pop(key, None)
        return self

    def deregister_all(self) -> "Broadcaster":
        self._listeners.clear()
        return self

    def broadcast(self) -> None:
        # Listeners may (de)register while being called.
        for listener in list(self._listeners.values()):
            listener(self._source)

    def __len__(self) -> int:
        return len(self._listeners)
