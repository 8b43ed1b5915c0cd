"""Per-instance state storage keyed by instance id.

The :class:`StateStore` is an explicit arena: one immutable
:class:`~authbox.models.StateTree` per live instance id. It has plain
key/value semantics and does not care why a tree changed. Every write goes
through :class:`~authbox.actions.ActionDispatcher`, which also uses the
per-id locks exposed here to serialise operations on one instance.
"""

from __future__ import annotations

import logging
import threading

from authbox.exceptions import InvalidArgumentError, NotFoundError
from authbox.models import StateTree, seal

logger = logging.getLogger(__name__)


class StateStore:
    """Thread-safe mapping from instance id to its current state tree.

    Readers always observe a complete tree: a write swaps one reference
    under the store lock, and trees themselves are frozen.

    Example::

        store = StateStore()
        store.set("authbox-1", tree)
        assert store.get("authbox-1") is tree
    """

    def __init__(self) -> None:
        self._trees: dict[str, StateTree] = {}
        self._id_locks: dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    def get(self, instance_id: str) -> StateTree:
        """Return the current tree for *instance_id*.

        Raises:
            NotFoundError: If no instance with that id is stored.
        """
        with self._lock:
            try:
                return self._trees[instance_id]
            except KeyError:
                raise NotFoundError(
                    f"No widget instance with id '{instance_id}'"
                ) from None

    def set(self, instance_id: str, tree: StateTree) -> StateTree:
        """Store *tree* as the current state of *instance_id*.

        The tree is sealed first (see :func:`~authbox.models.seal`), so its
        mapping regions are read-only for every later reader.

        Returns:
            The stored tree; *tree* itself when it was already sealed.

        Raises:
            InvalidArgumentError: If *tree* is not a :class:`StateTree`
                belonging to *instance_id*.
        """
        tree = self._checked(instance_id, tree)
        with self._lock:
            self._trees[instance_id] = tree
        return tree

    def add(self, instance_id: str, tree: StateTree) -> StateTree:
        """Store the first tree of a new instance.

        Raises:
            InvalidArgumentError: If *instance_id* is already stored, or
                *tree* does not belong to it.
        """
        tree = self._checked(instance_id, tree)
        with self._lock:
            if instance_id in self._trees:
                raise InvalidArgumentError(
                    f"Widget instance '{instance_id}' is already set up"
                )
            self._trees[instance_id] = tree
        return tree

    def remove(self, instance_id: str) -> None:
        """Delete *instance_id*; later lookups raise :class:`NotFoundError`."""
        with self._lock:
            if self._trees.pop(instance_id, None) is None:
                raise NotFoundError(f"No widget instance with id '{instance_id}'")
            self._id_locks.pop(instance_id, None)
        logger.debug("Removed state for %s", instance_id)

    def contains(self, instance_id: str) -> bool:
        with self._lock:
            return instance_id in self._trees

    def ids(self) -> list[str]:
        """Return the ids of all live instances in insertion order."""
        with self._lock:
            return list(self._trees)

    def lock_for(self, instance_id: str) -> threading.RLock:
        """Return the re-entrant lock serialising operations on *instance_id*.

        The lock is re-entrant so that a render triggered by one dispatch may
        itself dispatch on the same instance (e.g. a screen transition). Locks
        exist only for live instances and are dropped by :meth:`remove`.

        Raises:
            NotFoundError: If no instance with that id is stored.
        """
        with self._lock:
            if instance_id not in self._trees:
                raise NotFoundError(f"No widget instance with id '{instance_id}'")
            lock = self._id_locks.get(instance_id)
            if lock is None:
                lock = self._id_locks[instance_id] = threading.RLock()
            return lock

    @staticmethod
    def _checked(instance_id: str, tree: StateTree) -> StateTree:
        if not isinstance(tree, StateTree):
            raise InvalidArgumentError(
                f"Expected a StateTree, got {type(tree).__name__}"
            )
        if tree.id != instance_id:
            raise InvalidArgumentError(
                f"State tree for '{tree.id}' cannot be stored under '{instance_id}'"
            )
        return seal(tree)
