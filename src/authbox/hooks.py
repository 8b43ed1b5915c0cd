"""Host extension points addressed by name.

A hook is any callable attribute of the host-supplied engine. The
:class:`HookRunner` looks it up at call time and hands it the current
snapshot of its instance. Snapshots are frozen, so a hook can only change
state by calling ``update`` on the widget like any other host code.
"""

from __future__ import annotations

import logging
from typing import Any

from authbox.store import StateStore

logger = logging.getLogger(__name__)


class HookRunner:
    """Runs optional engine hooks for one widget instance.

    Args:
        store: Store the snapshot is read from.
        instance_id: The instance whose snapshot is passed to hooks.
        engine: The host engine object hooks are looked up on.
    """

    def __init__(self, store: StateStore, instance_id: str, engine: Any) -> None:
        self._store = store
        self._instance_id = instance_id
        self._engine = engine

    def has_hook(self, name: str) -> bool:
        return callable(getattr(self._engine, name, None))

    def run(self, name: str, *args: Any) -> Any:
        """Invoke hook *name* with ``(snapshot, *args)``.

        Missing hooks are a no-op returning ``None``. Exceptions raised by the
        hook propagate to the caller unchanged.

        Raises:
            NotFoundError: If the instance no longer exists.
        """
        hook = getattr(self._engine, name, None)
        if not callable(hook):
            return None
        tree = self._store.get(self._instance_id)
        logger.debug("Running hook '%s' for %s", name, self._instance_id)
        return hook(tree, *args)

    __call__ = run
