"""Widget instances and the runtime arena they live in.

A :class:`Runtime` owns one :class:`~authbox.store.StateStore`, one
:class:`~authbox.bus.ObservationBus` and the
:class:`~authbox.actions.ActionDispatcher` writing to them. Widgets created
with the same runtime share that arena but never each other's state.

A :class:`Widget` is the host-facing handle of one instance. Construction
validates its arguments before anything is allocated, sets the instance up
through the dispatcher and subscribes a
:class:`~authbox.render.RenderPipeline` to its ``"render"`` channel. From
then on every operation is a dispatch.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional

from authbox import ids
from authbox.actions import (
    CLOSE_ANIMATION_DELAY,
    ActionDispatcher,
    Transformer,
    validate_setup_arguments,
)
from authbox.bus import RENDER_CHANNEL, ObservationBus
from authbox.events import EventEmitter
from authbox.exceptions import InvalidArgumentError
from authbox.hooks import HookRunner
from authbox.i18n import DictionaryTranslator, Translator
from authbox.models import StateTree
from authbox.render import RenderPipeline, RenderProps
from authbox.store import StateStore
from authbox.ui import MemoryMount, Mount
from authbox.web_api import WebAPI

logger = logging.getLogger(__name__)


class Runtime:
    """Arena of widget instances: store, bus and dispatcher.

    Args:
        close_animation_delay: Forwarded to the dispatcher.
    """

    def __init__(self, close_animation_delay: float = CLOSE_ANIMATION_DELAY) -> None:
        self.store = StateStore()
        self.bus = ObservationBus(self.store)
        self.dispatcher = ActionDispatcher(
            self.store, self.bus, close_animation_delay=close_animation_delay
        )

    def create(
        self,
        client_id: str,
        domain: str,
        options: Optional[Mapping[str, Any]] = None,
        login_callback: Optional[Callable[..., Any]] = None,
        engine: Any = None,
        **kwargs: Any,
    ) -> Widget:
        """Create a widget in this runtime; see :class:`Widget`."""
        return Widget(
            client_id, domain, options, login_callback, engine, runtime=self, **kwargs
        )


def _noop_login_callback(*args: Any) -> None:
    return None


class Widget:
    """One isolated authentication widget.

    Args:
        client_id: Non-empty client identifier.
        domain: Non-empty authentication domain.
        options: Widget options (see :class:`~authbox.models.WidgetOptions`).
        login_callback: Called by screens when a login completes.
        engine: Host engine; must have a callable ``render(tree)`` and may
            carry named hook methods.
        runtime: Arena to create the instance in; a fresh one by default.
        mount: UI mount primitive; a :class:`~authbox.ui.MemoryMount` by
            default.
        translator: String resolver; a
            :class:`~authbox.i18n.DictionaryTranslator` by default.
        web_api: Network collaborator for profile/session calls.

    Raises:
        InvalidArgumentError: If any argument is malformed. Nothing is
            allocated or stored in that case.

    Example::

        widget = Widget("my-client", "example.auth0.com", {}, engine=MyEngine())
        widget.on("signin ready", lambda: print("ready"))
        widget.show()
    """

    def __init__(
        self,
        client_id: str,
        domain: str,
        options: Optional[Mapping[str, Any]] = None,
        login_callback: Optional[Callable[..., Any]] = None,
        engine: Any = None,
        *,
        runtime: Optional[Runtime] = None,
        mount: Optional[Mount] = None,
        translator: Optional[Translator] = None,
        web_api: Optional[WebAPI] = None,
    ) -> None:
        if options is None:
            options = {}
        if login_callback is None:
            login_callback = _noop_login_callback
        validate_setup_arguments(client_id, domain, options, login_callback)
        if not callable(getattr(engine, "render", None)):
            raise InvalidArgumentError("An `engine` with a callable `render` must be provided.")

        self.runtime = runtime if runtime is not None else Runtime()
        self.id = ids.incremental()
        self.engine = engine
        self.events = EventEmitter()
        self.mount = mount if mount is not None else MemoryMount()
        self._web_api = web_api if web_api is not None else WebAPI()
        self._hooks = HookRunner(self.runtime.store, self.id, engine)

        dispatcher = self.runtime.dispatcher
        dispatcher.setup(
            self.id,
            client_id,
            domain,
            options,
            login_callback,
            self.run_hook,
            self.events.emit,
        )
        self._pipeline = RenderPipeline(
            engine,
            dispatcher,
            self.mount,
            translator if translator is not None else DictionaryTranslator(),
        )
        self.runtime.bus.observe(RENDER_CHANNEL, self.id, self._pipeline)
        self._web_api.register(self.id, client_id, domain)
        logger.info("Created widget %s", self.id)

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> StateTree:
        """The current state tree (raises once the widget is destroyed)."""
        return self.runtime.store.get(self.id)

    @property
    def props(self) -> Optional[RenderProps]:
        """The props most recently mounted by this widget's render pipeline."""
        return self._pipeline.last_props

    @property
    def last_rendered_screen_name(self) -> Optional[str]:
        return self._pipeline.last_rendered_screen_name

    # ------------------------------------------------------------------ #
    # Dispatch surface
    # ------------------------------------------------------------------ #

    def show(self) -> bool:
        return self.runtime.dispatcher.open(self.id)

    def hide(self) -> bool:
        return self.runtime.dispatcher.close(self.id, immediate=True)

    def destroy(self) -> None:
        self.runtime.dispatcher.remove(self.id)
        self._web_api.unregister(self.id)

    def update(self, transformer: Transformer) -> StateTree:
        return self.runtime.dispatcher.update(self.id, transformer)

    def set_model(self, tree: StateTree) -> StateTree:
        return self.update(lambda _: tree)

    def run_hook(self, name: str, *args: Any) -> Any:
        return self._hooks.run(name, *args)

    async def submit(
        self,
        operation: Awaitable[Any],
        on_success: Optional[Callable[[StateTree, Any], StateTree]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Run *operation* with the submitting flag; see :meth:`ActionDispatcher.submit`."""
        return await self.runtime.dispatcher.submit(
            self.id, operation, on_success=on_success, timeout=timeout
        )

    # ------------------------------------------------------------------ #
    # Host events
    # ------------------------------------------------------------------ #

    def on(self, event: str, listener: Callable[..., Any]) -> Callable[[], None]:
        return self.events.on(event, listener)

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        self.events.off(event, listener)

    # ------------------------------------------------------------------ #
    # Network pass-through
    # ------------------------------------------------------------------ #

    def get_profile(self, token: str) -> dict[str, Any]:
        return self._web_api.get_profile(self.id, token)

    def parse_hash(self, hash: Optional[str] = None) -> Optional[dict[str, Any]]:
        return self._web_api.parse_hash(self.id, hash)

    def logout(self, query: Optional[dict[str, Any]] = None) -> str:
        return self._web_api.logout(self.id, query)
