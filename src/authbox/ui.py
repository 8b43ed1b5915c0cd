"""The UI mount primitive consumed by the render pipeline.

A :class:`Mount` receives finished render props keyed by container id and is
told when a container must be emptied. How props become pixels is up to the
host. :class:`MemoryMount` keeps the latest props in memory; it backs
headless hosts, the ``authbox preview`` command and the tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from authbox.render import RenderProps


class Mount(ABC):
    """Host UI primitive that mounts and unmounts widget containers."""

    @abstractmethod
    def render(self, container_id: str, props: RenderProps) -> None:
        """Mount or update *container_id* with *props*."""
        ...

    @abstractmethod
    def remove(self, container_id: str) -> None:
        """Unmount *container_id*; unmounting an empty container is a no-op."""
        ...


class MemoryMount(Mount):
    """Mount that records the props of every container in memory.

    Attributes:
        history: ``(action, container_id)`` pairs in call order, where
            *action* is ``"render"`` or ``"remove"``.
    """

    def __init__(self) -> None:
        self._mounted: dict[str, RenderProps] = {}
        self.history: list[tuple[str, str]] = []

    def render(self, container_id: str, props: RenderProps) -> None:
        self._mounted[container_id] = props
        self.history.append(("render", container_id))

    def remove(self, container_id: str) -> None:
        self._mounted.pop(container_id, None)
        self.history.append(("remove", container_id))

    def get(self, container_id: str) -> Optional[RenderProps]:
        return self._mounted.get(container_id)

    def is_mounted(self, container_id: str) -> bool:
        return container_id in self._mounted

    def render_count(self, container_id: str) -> int:
        return self.history.count(("render", container_id))
