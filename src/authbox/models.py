"""Canonical Pydantic models for widget options and per-instance state.

The models fall into two groups:

**Option models** -- what a host passes when creating a widget:
    :class:`ThemeOptions`, :class:`AvatarOptions`, :class:`FlashMessage`,
    :class:`CaptchaConfig`, :class:`WidgetOptions` and the on-disk
    :class:`WidgetConfig` read by the command line.

**State models** -- the immutable state tree held by the
:class:`~authbox.store.StateStore`, one per widget instance:
    :class:`UIState`, :class:`CoreState`, :class:`AvatarTransient`,
    :class:`AvatarState` and :class:`StateTree`.

State models are frozen, and so are their mapping regions (``screens`` and
``ui.language_dictionary`` are read-only mappings, see :func:`freeze`). A
mutation is always expressed as a new tree, either through
``model_copy(update=...)`` or the :func:`set_in` helper for nested paths.
Option models use ``extra="allow"`` so that screen-owned option keys survive
validation and are available to screens via ``model_extra``.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


DEFAULT_PRIMARY_COLOR = "#ea5323"
"""Accent colour used when the host does not configure a theme."""


# --- Read-only containers ---


def freeze(value: Any) -> Any:
    """Return a read-only deep copy of *value*.

    Mappings become :class:`~types.MappingProxyType`, lists and tuples become
    tuples and sets become frozensets. A value that is already read-only all
    the way down is returned unchanged, so sealed trees keep their identity.
    """
    if isinstance(value, Mapping):
        items = {key: freeze(item) for key, item in value.items()}
        if isinstance(value, MappingProxyType) and all(
            items[key] is value[key] for key in items
        ):
            return value
        return MappingProxyType(items)
    if isinstance(value, (list, tuple)):
        items = tuple(freeze(item) for item in value)
        if isinstance(value, tuple) and all(a is b for a, b in zip(items, value)):
            return value
        return items
    if isinstance(value, (set, frozenset)):
        return value if isinstance(value, frozenset) else frozenset(value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`, producing plain dicts and lists for serialisation."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


# --- Option models ---


class ThemeOptions(BaseModel):
    """Theming values forwarded untouched to the render props."""

    primary_color: str = Field(default=DEFAULT_PRIMARY_COLOR)
    logo: Optional[str] = Field(default=None, description="Logo image URL")


class AvatarOptions(BaseModel):
    """A pre-resolved identity preview shown above the form."""

    display_name: str
    url: Optional[str] = None


class FlashMessage(BaseModel):
    """A message displayed as soon as the widget is first shown."""

    type: Literal["error", "success"]
    text: str


class CaptchaConfig(BaseModel):
    """Captcha configuration, read-only after setup.

    ``provider`` is deliberately a free-form string: identifiers outside the
    known set are not a validation error, they select the default input
    variant (see :mod:`authbox.captcha`).

    Example::

        CaptchaConfig(provider="hcaptcha", site_key="mySiteKey", required=True)
    """

    model_config = ConfigDict(frozen=True)

    provider: Optional[str] = Field(
        default=None,
        description="recaptcha_v2, recaptcha_enterprise, hcaptcha, friendly_captcha",
    )
    site_key: str = Field(default="", description="Public key for the provider SDK")
    required: bool = False


class WidgetOptions(BaseModel):
    """Validated shape of the ``options`` mapping given to a widget.

    Anything not declared here is preserved in ``model_extra`` and copied into
    the ``screens`` region of the state tree, where screens can read it.
    """

    model_config = ConfigDict(extra="allow")

    container: Optional[str] = Field(
        default=None,
        description="Host container id; when absent the widget is shown as a modal",
    )
    closable: Optional[bool] = Field(
        default=None, description="Defaults to True for modals, False otherwise"
    )
    autofocus: Optional[bool] = Field(
        default=None, description="Defaults to True unless the widget is mobile"
    )
    mobile: bool = False
    initial_screen: Optional[str] = None
    allow_sign_up: bool = True
    must_accept_terms: bool = False
    language_dictionary: dict[str, str] = Field(default_factory=dict)
    theme: ThemeOptions = Field(default_factory=ThemeOptions)
    avatar: Optional[AvatarOptions] = None
    flash_message: Optional[FlashMessage] = None
    captcha: CaptchaConfig = Field(default_factory=CaptchaConfig)


# --- State models ---


class UIState(BaseModel):
    """Transient UI flags for one widget instance."""

    model_config = ConfigDict(frozen=True)

    visible: bool = False
    screen: Optional[str] = None
    submitting: bool = False
    mobile: bool = False
    container: Optional[str] = None
    container_id: str
    closable: bool = True
    autofocus: bool = True
    primary_color: str = DEFAULT_PRIMARY_COLOR
    logo: Optional[str] = None
    language_dictionary: Mapping[str, str] = Field(default_factory=_empty_mapping)
    terms_accepted: bool = False
    captcha_value: str = ""

    @property
    def is_modal(self) -> bool:
        """Whether the widget owns its own container (no host container given)."""
        return self.container is None

    @field_validator("language_dictionary", mode="after")
    @classmethod
    def _freeze_dictionary(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return freeze(value)

    @field_serializer("language_dictionary")
    def _dump_dictionary(self, value: Mapping[str, str]) -> dict[str, str]:
        return thaw(value)


class CoreState(BaseModel):
    """Durable configuration for one widget instance."""

    model_config = ConfigDict(frozen=True)

    captcha: CaptchaConfig = Field(default_factory=CaptchaConfig)
    must_accept_terms: bool = False
    allow_sign_up: bool = True


class AvatarTransient(BaseModel):
    model_config = ConfigDict(frozen=True)

    sync_status: str = "ok"
    display_name: str = ""
    url: Optional[str] = None


class AvatarState(BaseModel):
    model_config = ConfigDict(frozen=True)

    transient: AvatarTransient = Field(default_factory=AvatarTransient)


class StateTree(BaseModel):
    """The immutable snapshot of one widget instance.

    The tree is replaced wholesale on every dispatch. Screens keep their own
    data under ``screens``; the core never interprets that region.

    Attributes:
        id: The owning instance id.
        client_id: Client identifier given at construction.
        domain: Authentication domain given at construction.
        ui: Transient UI flags.
        core: Durable configuration (captcha, terms, sign-up).
        avatar: Optional identity preview.
        global_error: User-facing error message, if any.
        global_success: User-facing success message, if any.
        screens: Screen-owned regions, keyed by screen name.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    client_id: str
    domain: str
    ui: UIState
    core: CoreState = Field(default_factory=CoreState)
    avatar: Optional[AvatarState] = None
    global_error: Optional[str] = None
    global_success: Optional[str] = None
    screens: Mapping[str, Any] = Field(default_factory=_empty_mapping)

    @field_validator("screens", mode="after")
    @classmethod
    def _freeze_screens(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return freeze(value)

    @field_serializer("screens")
    def _dump_screens(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return thaw(value)


def initial_state(
    instance_id: str, client_id: str, domain: str, options: WidgetOptions
) -> StateTree:
    """Build the first state tree of an instance from validated options."""
    closable = options.closable
    if closable is None:
        closable = options.container is None
    autofocus = options.autofocus
    if autofocus is None:
        autofocus = not options.mobile

    avatar = None
    if options.avatar is not None:
        avatar = AvatarState(
            transient=AvatarTransient(
                sync_status="ok",
                display_name=options.avatar.display_name,
                url=options.avatar.url,
            )
        )

    global_error = global_success = None
    if options.flash_message is not None:
        if options.flash_message.type == "error":
            global_error = options.flash_message.text
        else:
            global_success = options.flash_message.text

    return StateTree(
        id=instance_id,
        client_id=client_id,
        domain=domain,
        ui=UIState(
            screen=options.initial_screen,
            mobile=options.mobile,
            container=options.container,
            container_id=options.container or f"authbox-container-{instance_id}",
            closable=closable,
            autofocus=autofocus,
            primary_color=options.theme.primary_color,
            logo=options.theme.logo,
            language_dictionary=dict(options.language_dictionary),
        ),
        core=CoreState(
            captcha=options.captcha,
            must_accept_terms=options.must_accept_terms,
            allow_sign_up=options.allow_sign_up,
        ),
        avatar=avatar,
        global_error=global_error,
        global_success=global_success,
        screens=dict(options.model_extra or {}),
    )


# --- Path helpers ---


def get_in(value: Any, path: Sequence[str], default: Any = None) -> Any:
    """Read a nested attribute or mapping key, returning *default* on a miss."""
    current = value
    for key in path:
        if isinstance(current, BaseModel):
            if not hasattr(current, key):
                return default
            current = getattr(current, key)
        elif isinstance(current, Mapping):
            if key not in current:
                return default
            current = current[key]
        else:
            return default
    return current


def set_in(value: Any, path: Sequence[str], new_value: Any) -> Any:
    """Return a copy of *value* with the nested *path* replaced by *new_value*.

    Works through frozen models (via ``model_copy``) and plain dicts. Nothing
    along the path is modified in place.

    Example::

        tree = set_in(tree, ("ui", "submitting"), True)
    """
    if not path:
        return new_value
    head, rest = path[0], path[1:]
    if isinstance(value, BaseModel):
        child = getattr(value, head)
        return value.model_copy(update={head: set_in(child, rest, new_value)})
    if isinstance(value, Mapping):
        child = value.get(head, {}) if rest else None
        return freeze({**value, head: set_in(child, rest, new_value)})
    raise TypeError(f"Cannot set '{head}' on {type(value).__name__}")


def terms_accepted(tree: StateTree) -> bool:
    """Whether the sign-up terms are satisfied for *tree*."""
    return not tree.core.must_accept_terms or tree.ui.terms_accepted


def seal(tree: StateTree) -> StateTree:
    """Return *tree* with its mapping regions frozen.

    ``model_copy(update=...)`` skips validation, so a transformer can hand
    back a tree holding plain dicts. The store seals every tree it keeps;
    a tree that is already sealed is returned as is.
    """
    screens = freeze(tree.screens)
    dictionary = freeze(tree.ui.language_dictionary)
    if screens is tree.screens and dictionary is tree.ui.language_dictionary:
        return tree
    ui = tree.ui
    if dictionary is not ui.language_dictionary:
        ui = ui.model_copy(update={"language_dictionary": dictionary})
    return tree.model_copy(update={"ui": ui, "screens": screens})


class WidgetConfig(BaseModel):
    """On-disk widget configuration used by the command line.

    Loaded by :func:`~authbox.config.resolve_widget_config`; ``options`` is
    validated later, at widget construction.

    Example file::

        {
          "client_id": "my-client",
          "domain": "example.auth0.com",
          "options": {"captcha": {"provider": "hcaptcha", "site_key": "k", "required": true}}
        }
    """

    client_id: str = ""
    domain: str = ""
    options: dict[str, Any] = Field(default_factory=dict)
