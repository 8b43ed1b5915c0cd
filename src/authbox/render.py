"""Render pipeline -- turns a state snapshot into mounted render props.

:class:`RenderPipeline` is subscribed to the ``"render"`` channel of one
instance. For each published snapshot it either unmounts the widget (when
hidden) or resolves the active screen through the host engine, builds an
immutable :class:`RenderProps` describing *what* to show, and hands it to the
:class:`~authbox.ui.Mount` keyed by the instance's container id.

The pipeline never writes the state store. When the engine, a screen or the
mount fails, the previous props stay in place and the failure is logged and
emitted to the host as a ``"render error"`` event. Failures never propagate
into the dispatch that published the snapshot, and neither does an exception
raised by a ``"render error"`` listener. Listeners of the ready events are
host code called in-line; their exceptions do propagate.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from authbox.actions import ActionDispatcher
from authbox.captcha import CaptchaVariant, render_captcha_pane
from authbox.exceptions import RenderError
from authbox.i18n import Translator
from authbox.models import StateTree, terms_accepted
from authbox.screens import Screen
from authbox.ui import Mount

logger = logging.getLogger(__name__)

LOADING_SCREEN = "loading"
SIGN_UP_SCREEN = "main.signUp"

READY_EVENTS: dict[str, str] = {
    "login": "signin ready",
    "signUp": "signup ready",
}
"""Event emitted once each time the rendered screen changes to the key."""


@dataclass(frozen=True)
class RenderProps:
    """Everything the UI layer needs to draw one widget frame.

    Handlers are already bound to the instance id, so the UI calls them with
    its own arguments only. ``close_handler`` is ``None`` when the widget is
    not closable, meaning no close control is drawn.
    """

    id: str
    screen_name: str
    title: str
    transition_name: str
    avatar: Optional[str] = None
    content: Any = None
    content_props: dict[str, Any] = field(default_factory=dict)
    auxiliary_pane: Any = None
    tabs: Any = None
    terms: Any = None
    captcha: Optional[CaptchaVariant] = None
    autofocus: bool = True
    is_mobile: bool = False
    is_modal: bool = True
    closable: bool = True
    is_submitting: bool = False
    disable_submit_button: bool = False
    error: Optional[str] = None
    success: Optional[str] = None
    primary_color: str = ""
    logo: Optional[str] = None
    back_handler: Optional[Callable[..., Any]] = None
    submit_handler: Optional[Callable[..., Any]] = None
    close_handler: Optional[Callable[..., Any]] = None

    def describe(self) -> dict[str, Any]:
        """Return a JSON-friendly summary; handlers are reported as presence flags."""
        captcha = None
        if self.captcha is not None:
            captcha = {"kind": self.captcha.kind, "value": self.captcha.value}
            site_key = getattr(self.captcha, "site_key", None)
            if site_key is not None:
                captcha["provider"] = self.captcha.provider.value
                captcha["site_key"] = site_key
        return {
            "id": self.id,
            "screen_name": self.screen_name,
            "title": self.title,
            "transition_name": self.transition_name,
            "avatar": self.avatar,
            "captcha": captcha,
            "autofocus": self.autofocus,
            "is_mobile": self.is_mobile,
            "is_modal": self.is_modal,
            "closable": self.closable,
            "is_submitting": self.is_submitting,
            "disable_submit_button": self.disable_submit_button,
            "error": self.error,
            "success": self.success,
            "primary_color": self.primary_color,
            "logo": self.logo,
            "handlers": {
                "back": self.back_handler is not None,
                "submit": self.submit_handler is not None,
                "close": self.close_handler is not None,
            },
        }


def transition_name(screen_name: str) -> str:
    return "fade" if screen_name == LOADING_SCREEN else "horizontal-fade"


class RenderPipeline:
    """Observer that renders one widget instance.

    Args:
        engine: Host engine whose ``render(tree)`` resolves the screen.
        dispatcher: Used to bind close/captcha handlers and emit events.
        mount: UI primitive receiving the props.
        translator: String resolver for titles and screen copy.
    """

    def __init__(
        self,
        engine: Any,
        dispatcher: ActionDispatcher,
        mount: Mount,
        translator: Translator,
    ) -> None:
        self._engine = engine
        self._dispatcher = dispatcher
        self._mount = mount
        self._translator = translator
        self.last_rendered_screen_name: Optional[str] = None
        self.last_props: Optional[RenderProps] = None

    def __call__(self, tree: StateTree) -> None:
        self.render(tree)

    def render(self, tree: StateTree) -> Optional[RenderProps]:
        """Mount, update or unmount the widget for *tree*.

        Returns:
            The mounted props, or ``None`` when the widget was unmounted or
            rendering failed.
        """
        container_id = tree.ui.container_id
        if not tree.ui.visible:
            try:
                self._mount.remove(container_id)
            except Exception as exc:
                self._report(tree, "unmount", exc)
            return None

        try:
            screen = self._engine.render(tree)
            props = self.build_props(tree, screen)
            self._mount.render(container_id, props)
        except Exception as exc:
            self._report(tree, "render", exc)
            return None

        self.last_props = props
        self._notify_screen_change(tree, screen.name)
        return props

    def build_props(self, tree: StateTree, screen: Screen) -> RenderProps:
        """Compute the render props for *tree* showing *screen*."""

        def t(key: str, **params: Any) -> str:
            return self._translator.t(tree, key, **params)

        avatar = tree.avatar
        has_avatar = avatar is not None and avatar.transient.sync_status == "ok"
        if has_avatar:
            title = t("welcome", name=avatar.transient.display_name)
        else:
            title = t("title")

        captcha = None
        if tree.core.captcha.required:
            captcha = render_captcha_pane(
                tree,
                on_reload=functools.partial(self._dispatcher.reload_captcha, tree.id),
                placeholder=t("captchaCodeInputPlaceholder"),
            )

        close_handler = None
        if tree.ui.closable:
            close_handler = functools.partial(self._dispatcher.close, tree.id)

        # TODO: replace the screen-name check with a capability reported by
        # the sign-up screen once screens can declare terms requirements.
        disable_submit_button = screen.name == SIGN_UP_SCREEN and not terms_accepted(tree)

        return RenderProps(
            id=tree.id,
            screen_name=screen.name,
            title=title,
            transition_name=transition_name(screen.name),
            avatar=avatar.transient.url if has_avatar else None,
            content=screen.render(),
            content_props={"model": tree, "t": t},
            auxiliary_pane=screen.render_auxiliary_pane(tree),
            tabs=screen.render_tabs(tree),
            terms=screen.render_terms(tree, t),
            captcha=captcha,
            autofocus=tree.ui.autofocus,
            is_mobile=tree.ui.mobile,
            is_modal=tree.ui.is_modal,
            closable=tree.ui.closable,
            is_submitting=tree.ui.submitting,
            disable_submit_button=disable_submit_button,
            error=tree.global_error,
            success=None if tree.global_error else tree.global_success,
            primary_color=tree.ui.primary_color,
            logo=tree.ui.logo,
            back_handler=_bind(screen.back_handler(tree), tree.id),
            submit_handler=_bind(screen.submit_handler(tree), tree.id),
            close_handler=close_handler,
        )

    def _report(self, tree: StateTree, action: str, exc: Exception) -> None:
        error = RenderError(f"Could not {action} widget '{tree.id}': {exc}")
        error.__cause__ = exc
        logger.warning("%s", error)
        try:
            self._dispatcher.emit_event(tree.id, "render error", error)
        except Exception:
            logger.exception("A 'render error' listener of %s failed", tree.id)

    def _notify_screen_change(self, tree: StateTree, screen_name: str) -> None:
        previous = self.last_rendered_screen_name
        self.last_rendered_screen_name = screen_name
        if previous == screen_name:
            return
        logger.debug("Widget %s moved from '%s' to '%s'", tree.id, previous, screen_name)
        event = READY_EVENTS.get(screen_name)
        if event is not None:
            self._dispatcher.emit_event(tree.id, event)


def _bind(handler: Optional[Callable[..., Any]], instance_id: str) -> Optional[Callable[..., Any]]:
    if handler is None:
        return None
    return functools.partial(handler, instance_id)
