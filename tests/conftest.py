"""Shared test fixtures for authbox.

Provides a recording engine and screens, a fresh runtime per test, and a
factory for widgets wired to an in-memory mount.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import pytest

from authbox.models import StateTree
from authbox.output import reset_output
from authbox.screens import Screen
from authbox.ui import MemoryMount
from authbox.widget import Runtime, Widget


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Drop handlers the CLI installs on the ``authbox`` logger."""
    logger = logging.getLogger("authbox")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


# ---------------------------------------------------------------------------
# Engine and screens
# ---------------------------------------------------------------------------


class RecordingScreen(Screen):
    """Screen whose handlers record ``(handler, instance_id, args)`` calls."""

    def __init__(self, name: str, calls: list, with_handlers: bool = True) -> None:
        self._name = name
        self._calls = calls
        self._with_handlers = with_handlers

    @property
    def name(self) -> str:
        return self._name

    def render(self) -> Any:
        return f"<{self._name}>"

    def render_tabs(self, tree: StateTree) -> Any:
        return ["login", "signUp"] if tree.core.allow_sign_up else None

    def render_terms(self, tree: StateTree, t: Callable[..., str]) -> Any:
        return t("terms")

    def back_handler(self, tree: StateTree) -> Optional[Callable[..., Any]]:
        if not self._with_handlers:
            return None
        return lambda instance_id, *args: self._calls.append(("back", instance_id, args))

    def submit_handler(self, tree: StateTree) -> Optional[Callable[..., Any]]:
        if not self._with_handlers:
            return None
        return lambda instance_id, *args: self._calls.append(("submit", instance_id, args))


class RecordingEngine:
    """Engine resolving ``screen_name`` and recording hook invocations.

    Set ``fail`` to make the next renders raise.
    """

    def __init__(self, screen_name: str = "login", with_handlers: bool = True) -> None:
        self.screen_name = screen_name
        self.with_handlers = with_handlers
        self.fail = False
        self.render_calls = 0
        self.handler_calls: list = []
        self.hook_calls: list = []

    def render(self, tree: StateTree) -> Screen:
        self.render_calls += 1
        if self.fail:
            raise RuntimeError("engine exploded")
        return RecordingScreen(self.screen_name, self.handler_calls, self.with_handlers)

    def will_show(self, tree: StateTree) -> None:
        self.hook_calls.append(("will_show", tree))

    def lookup(self, tree: StateTree, key: str) -> Any:
        self.hook_calls.append(("lookup", tree, key))
        return tree.screens.get(key)


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def runtime() -> Runtime:
    return Runtime()


@pytest.fixture
def mount() -> MemoryMount:
    return MemoryMount()


@pytest.fixture
def make_widget(runtime: Runtime, engine: RecordingEngine, mount: MemoryMount):
    """Factory creating widgets in the shared runtime with the shared mount."""

    def factory(options: Optional[dict[str, Any]] = None, **kwargs: Any) -> Widget:
        kwargs.setdefault("engine", engine)
        kwargs.setdefault("mount", mount)
        return Widget(
            "test-client",
            "example.auth0.com",
            options or {},
            runtime=runtime,
            **kwargs,
        )

    return factory
