"""Action dispatcher -- the only writer of the state store.

:class:`ActionDispatcher` exposes the named operations that move an instance
from one state tree to the next (``setup``, ``open``, ``close``, ``update``,
``remove``) together with a few conveniences built on ``update``. Each
operation reads the current tree, derives a new one, stores it and publishes
on the ``"render"`` channel, all while holding the per-instance lock, so one
dispatch always finishes its render before the next dispatch on the same
instance begins.

Asynchronous work (login requests, captcha verification) re-enters through
:meth:`ActionDispatcher.submit`, which guarantees a single terminal update per
operation whether it succeeds, fails, times out or is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from authbox.bus import RENDER_CHANNEL, ObservationBus
from authbox.exceptions import InvalidArgumentError, NotFoundError
from authbox.models import StateTree, WidgetOptions, initial_state, set_in
from authbox.store import StateStore

logger = logging.getLogger(__name__)

Transformer = Callable[[StateTree], StateTree]

CLOSE_ANIMATION_DELAY = 1.0
"""Seconds a modal keeps its transient state after hiding, for the exit animation."""


@dataclass(frozen=True)
class _Collaborators:
    login_callback: Callable[..., Any]
    hook_runner: Callable[..., Any]
    emit_event: Callable[..., Any]


def validate_setup_arguments(
    client_id: Any, domain: Any, options: Any, login_callback: Any
) -> WidgetOptions:
    """Check construction arguments and return the validated options.

    Raises:
        InvalidArgumentError: If ``client_id`` or ``domain`` is not a
            non-empty string, ``options`` is not a mapping (or fails
            validation), or ``login_callback`` is not callable.
    """
    if not isinstance(client_id, str) or not client_id:
        raise InvalidArgumentError("A `client_id` string must be provided.")
    if not isinstance(domain, str) or not domain:
        raise InvalidArgumentError("A `domain` string must be provided.")
    if not isinstance(options, Mapping):
        raise InvalidArgumentError("When provided, `options` must be a mapping.")
    if not callable(login_callback):
        raise InvalidArgumentError("When provided, `login_callback` must be callable.")
    try:
        return WidgetOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise InvalidArgumentError(f"Invalid widget options: {exc}") from exc


def _hide(tree: StateTree) -> StateTree:
    return set_in(tree, ("ui", "visible"), False)


def _reset(tree: StateTree) -> StateTree:
    """Clear what should not survive a close: messages, submitting, captcha input."""
    ui = tree.ui.model_copy(update={"submitting": False, "captcha_value": ""})
    return tree.model_copy(update={"ui": ui, "global_error": None, "global_success": None})


class ActionDispatcher:
    """Named state transitions for widget instances.

    Args:
        store: The state store this dispatcher writes to.
        bus: The bus on which ``"render"`` is published after each write.
        close_animation_delay: Seconds between hiding a modal and clearing
            its transient state when the close is not immediate.

    Example::

        dispatcher = ActionDispatcher(store, bus)
        dispatcher.setup("authbox-1", "client", "example.auth0.com", {},
                         login_callback, hook_runner, emitter.emit)
        dispatcher.open("authbox-1")
    """

    def __init__(
        self,
        store: StateStore,
        bus: ObservationBus,
        close_animation_delay: float = CLOSE_ANIMATION_DELAY,
    ) -> None:
        self._store = store
        self._bus = bus
        self._close_animation_delay = close_animation_delay
        self._collaborators: dict[str, _Collaborators] = {}

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def setup(
        self,
        instance_id: str,
        client_id: str,
        domain: str,
        options: Mapping[str, Any],
        login_callback: Callable[..., Any],
        hook_runner: Callable[..., Any],
        emit_event: Callable[..., Any],
    ) -> StateTree:
        """Create the initial state tree of a new instance.

        Defaults are merged with *options*; the hook runner and event emitter
        are kept for later dispatches. No render is published, since nothing
        observes the instance yet.

        Returns:
            The stored initial tree.

        Raises:
            InvalidArgumentError: On malformed arguments, or if *instance_id*
                already exists.
        """
        widget_options = validate_setup_arguments(
            client_id, domain, options, login_callback
        )
        tree = self._store.add(
            instance_id, initial_state(instance_id, client_id, domain, widget_options)
        )
        self._collaborators[instance_id] = _Collaborators(
            login_callback=login_callback,
            hook_runner=hook_runner,
            emit_event=emit_event,
        )
        logger.info("Set up widget %s for client %s", instance_id, client_id)
        return tree

    def open(self, instance_id: str) -> bool:
        """Show the widget.

        Returns:
            ``True`` if the widget was hidden and is now shown; ``False`` if
            it was already visible (no render is published in that case).
        """
        with self._store.lock_for(instance_id):
            tree = self._store.get(instance_id)
            if tree.ui.visible:
                return False
            self.run_hook(instance_id, "will_show")
            self.emit_event(instance_id, "show")
            self._swap(instance_id, lambda m: set_in(m, ("ui", "visible"), True))
            return True

    def close(self, instance_id: str, immediate: bool = False) -> bool:
        """Hide the widget.

        With ``immediate=False`` and an asyncio loop running, the transient
        state is cleared :attr:`close_animation_delay` seconds later in a
        separate dispatch so the exit animation can finish with the old
        content. Otherwise the reset happens in this same transition.

        Returns:
            ``True`` if the widget was visible; ``False`` for a no-op close.
        """
        with self._store.lock_for(instance_id):
            tree = self._store.get(instance_id)
            if not tree.ui.visible:
                return False
            self.emit_event(instance_id, "hide")
            loop = None if immediate else _running_loop()
            if loop is None:
                self._swap(instance_id, lambda m: _reset(_hide(m)))
            else:
                self._swap(instance_id, _hide)
                loop.call_later(
                    self._close_animation_delay, self._finish_close, instance_id
                )
            return True

    def update(self, instance_id: str, transformer: Transformer) -> StateTree:
        """Apply *transformer* to the current tree and publish the result.

        This is the generic mutation primitive used by screens, hooks and
        asynchronous completions.

        Returns:
            The new tree.

        Raises:
            NotFoundError: If the instance does not exist.
            InvalidArgumentError: If *transformer* does not return a tree for
                the same instance, or changes the captcha configuration. The
                store is left untouched.
        """
        if not callable(transformer):
            raise InvalidArgumentError("update() requires a callable transformer")
        return self._swap(instance_id, transformer)

    def remove(self, instance_id: str) -> None:
        """Destroy the instance.

        A visible widget is first hidden (so the UI is unmounted), then its
        tree, subscriptions and collaborators are dropped.

        Raises:
            NotFoundError: If the instance does not exist.
        """
        with self._store.lock_for(instance_id):
            tree = self._store.get(instance_id)
            if tree.ui.visible:
                self._swap(instance_id, _hide)
            self.emit_event(instance_id, "destroy")
            self._store.remove(instance_id)
            self._bus.forget(instance_id)
            self._collaborators.pop(instance_id, None)
        logger.info("Removed widget %s", instance_id)

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def emit_event(self, instance_id: str, event: str, *args: Any) -> Any:
        """Emit *event* through the emitter registered at setup."""
        return self._collaborator(instance_id).emit_event(event, *args)

    def run_hook(self, instance_id: str, name: str, *args: Any) -> Any:
        """Run host hook *name* through the hook runner registered at setup."""
        return self._collaborator(instance_id).hook_runner(name, *args)

    def login_callback(self, instance_id: str) -> Callable[..., Any]:
        return self._collaborator(instance_id).login_callback

    # ------------------------------------------------------------------
    # Conveniences over update
    # ------------------------------------------------------------------

    def set_global_error(self, instance_id: str, message: Optional[str]) -> StateTree:
        return self.update(
            instance_id,
            lambda m: m.model_copy(update={"global_error": message, "global_success": None}),
        )

    def set_global_success(self, instance_id: str, message: Optional[str]) -> StateTree:
        return self.update(
            instance_id,
            lambda m: m.model_copy(update={"global_success": message, "global_error": None}),
        )

    def hide_global_messages(self, instance_id: str) -> StateTree:
        return self.update(
            instance_id,
            lambda m: m.model_copy(update={"global_error": None, "global_success": None}),
        )

    def reload_captcha(self, instance_id: str) -> StateTree:
        """Discard the entered captcha answer and ask the host for a new challenge.

        The new challenge itself is fetched by the network collaborator in
        response to the ``"captcha reload"`` event and arrives through
        :meth:`update` like any other asynchronous completion.
        """
        with self._store.lock_for(instance_id):
            tree = self.update(instance_id, lambda m: set_in(m, ("ui", "captcha_value"), ""))
            self.emit_event(instance_id, "captcha reload", tree.core.captcha.provider)
            return tree

    async def submit(
        self,
        instance_id: str,
        operation: Awaitable[Any],
        on_success: Optional[Callable[[StateTree, Any], StateTree]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Run an asynchronous operation bracketed by the submitting flag.

        ``ui.submitting`` is set (and stale messages cleared) before awaiting
        *operation*. Exactly one terminal update follows:

        * success -- *on_success* (if given) derives the new tree from the
          current tree and the result; submitting is cleared.
        * failure or timeout -- submitting is cleared and ``global_error``
          holds the error text; ``None`` is returned.
        * cancellation -- submitting is cleared, ``global_error`` is set, and
          :class:`asyncio.CancelledError` is re-raised.

        If the instance was removed while the operation ran, the terminal
        update is skipped. If *on_success* raises, the instance still settles
        with submitting cleared and the error text, and the exception is
        re-raised to the caller.

        Returns:
            The operation's result, or ``None`` on failure.

        Raises:
            NotFoundError: If the instance does not exist. A coroutine passed
                as *operation* is closed without running.
        """
        try:
            self.update(
                instance_id,
                lambda m: set_in(m, ("ui", "submitting"), True).model_copy(
                    update={"global_error": None, "global_success": None}
                ),
            )
        except Exception:
            if asyncio.iscoroutine(operation):
                operation.close()
            raise
        try:
            if timeout is not None:
                result = await asyncio.wait_for(operation, timeout)
            else:
                result = await operation
        except asyncio.CancelledError:
            self._settle(instance_id, error="The request was cancelled.")
            raise
        except asyncio.TimeoutError:
            self._settle(instance_id, error="The request timed out.")
            return None
        except Exception as exc:
            logger.debug("Submit for %s failed: %s", instance_id, exc)
            self._settle(instance_id, error=str(exc) or type(exc).__name__)
            return None

        def succeed(tree: StateTree) -> StateTree:
            return on_success(tree, result) if on_success is not None else tree

        try:
            self._settle(instance_id, transformer=succeed)
        except Exception as exc:
            logger.warning("Completing submit for %s failed: %s", instance_id, exc)
            self._settle(instance_id, error=str(exc) or type(exc).__name__)
            raise
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _swap(self, instance_id: str, transformer: Transformer) -> StateTree:
        with self._store.lock_for(instance_id):
            previous = self._store.get(instance_id)
            tree = transformer(previous)
            if not isinstance(tree, StateTree):
                raise InvalidArgumentError(
                    f"Transformer returned {type(tree).__name__}, expected StateTree"
                )
            if tree.id != instance_id:
                raise InvalidArgumentError(
                    f"Transformer returned the state of '{tree.id}' for '{instance_id}'"
                )
            if tree.core.captcha != previous.core.captcha:
                raise InvalidArgumentError(
                    "The captcha configuration is read-only after setup"
                )
            tree = self._store.set(instance_id, tree)
            logger.debug("Dispatched state change for %s", instance_id)
            self._bus.publish(RENDER_CHANNEL, instance_id)
            return tree

    def _settle(
        self,
        instance_id: str,
        transformer: Optional[Transformer] = None,
        error: Optional[str] = None,
    ) -> None:
        if not self._store.contains(instance_id):
            logger.debug("Widget %s removed before its operation settled", instance_id)
            return

        def terminal(tree: StateTree) -> StateTree:
            if transformer is not None:
                tree = transformer(tree)
            tree = set_in(tree, ("ui", "submitting"), False)
            if error is not None:
                tree = tree.model_copy(update={"global_error": error, "global_success": None})
            return tree

        self._swap(instance_id, terminal)

    def _finish_close(self, instance_id: str) -> None:
        try:
            lock = self._store.lock_for(instance_id)
        except NotFoundError:
            return
        with lock:
            if not self._store.contains(instance_id):
                return
            if self._store.get(instance_id).ui.visible:
                # reopened during the exit animation
                return
            self._swap(instance_id, _reset)

    def _collaborator(self, instance_id: str) -> _Collaborators:
        try:
            return self._collaborators[instance_id]
        except KeyError:
            raise NotFoundError(f"No widget instance with id '{instance_id}'") from None


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
