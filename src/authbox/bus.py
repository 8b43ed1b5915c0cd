"""Named-channel observation of state changes.

Subscribers register for a ``(channel, instance_id)`` pair and are called
with the *current* tree from the :class:`~authbox.store.StateStore` every
time that pair is published. Publishing is synchronous: all callbacks have
returned before :meth:`ObservationBus.publish` does.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from authbox.models import StateTree
from authbox.store import StateStore

logger = logging.getLogger(__name__)

RENDER_CHANNEL = "render"
"""The only channel used by the engine itself."""

Observer = Callable[[StateTree], None]


class ObservationBus:
    """Publish/subscribe keyed by channel name and instance id.

    Several observers may share a pair; they run in registration order.

    Args:
        store: Source of the snapshots handed to observers.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._observers: dict[tuple[str, str], list[Observer]] = {}
        self._lock = threading.Lock()

    def observe(
        self, channel: str, instance_id: str, callback: Observer
    ) -> Callable[[], None]:
        """Register *callback* and return a function that unregisters it."""
        key = (channel, instance_id)
        with self._lock:
            self._observers.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                observers = self._observers.get(key, [])
                if callback in observers:
                    observers.remove(callback)
                if not observers:
                    self._observers.pop(key, None)

        return unsubscribe

    def publish(self, channel: str, instance_id: str) -> int:
        """Invoke every observer of ``(channel, instance_id)``.

        The snapshot is read from the store at publish time, never captured
        at subscribe time.

        Returns:
            The number of observers called.

        Raises:
            NotFoundError: If *instance_id* is not in the store.
        """
        tree = self._store.get(instance_id)
        with self._lock:
            observers = list(self._observers.get((channel, instance_id), ()))
        logger.debug(
            "Publishing '%s' for %s to %d observer(s)",
            channel,
            instance_id,
            len(observers),
        )
        for observer in observers:
            observer(tree)
        return len(observers)

    def forget(self, instance_id: str) -> None:
        """Drop every subscription held for *instance_id* on any channel."""
        with self._lock:
            for key in [k for k in self._observers if k[1] == instance_id]:
                del self._observers[key]

    def observer_count(self, channel: str, instance_id: str) -> int:
        with self._lock:
            return len(self._observers.get((channel, instance_id), ()))
