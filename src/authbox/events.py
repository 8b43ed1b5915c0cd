"""Host-facing event emitter.

Widgets hold an :class:`EventEmitter` rather than being one. The dispatcher
and render pipeline emit lifecycle events through it (``"show"``,
``"hide"``, ``"signin ready"``, ``"render error"``, ...) and hosts listen
with :meth:`EventEmitter.on`.
"""

from __future__ import annotations

from typing import Any, Callable

Listener = Callable[..., Any]


class EventEmitter:
    """Minimal synchronous event emitter.

    Example::

        emitter = EventEmitter()
        off = emitter.on("show", lambda: print("shown"))
        emitter.emit("show")
        off()
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register *listener* for *event*; returns an unsubscribe function."""
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def once(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register *listener* to run on the next *event* only."""

        def wrapper(*args: Any) -> Any:
            self.off(event, wrapper)
            return listener(*args)

        return self.on(event, wrapper)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of *event* with *args*.

        Returns:
            ``True`` if at least one listener was registered.
        """
        listeners = list(self._listeners.get(event, ()))
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))
