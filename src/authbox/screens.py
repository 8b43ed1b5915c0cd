"""Interfaces for the host-supplied engine and its screens.

The engine resolves the active :class:`Screen` from a state tree and may
carry optional hook methods addressed by name (see :mod:`authbox.hooks`).
Screens describe one UI step; the render pipeline only calls the capability
methods below and never looks at the screen's own state.

Every capability has a no-op default, so a screen only overrides what it
shows.

Example:
    Minimal engine::

        class LoginScreen(Screen):
            @property
            def name(self) -> str:
                return "login"

        class MyEngine(Engine):
            def render(self, tree):
                return LoginScreen()

            def will_show(self, tree):
                print("about to show", tree.id)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from authbox.models import StateTree

Handler = Callable[..., Any]


class Screen(ABC):
    """One pluggable UI step (login, sign-up, loading, ...)."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the screen name used for transitions and readiness events."""
        ...

    def render(self) -> Any:
        """Return the main content component."""
        return None

    def render_auxiliary_pane(self, tree: StateTree) -> Any:
        return None

    def render_tabs(self, tree: StateTree) -> Any:
        return None

    def render_terms(self, tree: StateTree, t: Callable[..., str]) -> Any:
        return None

    def back_handler(self, tree: StateTree) -> Optional[Handler]:
        """Return a handler called as ``handler(instance_id, *args)``, or ``None``."""
        return None

    def submit_handler(self, tree: StateTree) -> Optional[Handler]:
        """Return a handler called as ``handler(instance_id, *args)``, or ``None``."""
        return None


class Engine(ABC):
    """Base class for host engines.

    Subclassing is optional: any object with a callable ``render`` attribute
    is accepted as an engine.
    """

    @abstractmethod
    def render(self, tree: StateTree) -> Screen:
        """Resolve the screen to show for *tree*."""
        ...
