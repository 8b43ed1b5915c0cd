"""Captcha region variants and the provider table that selects them.

Two variants exist:

* :class:`CaptchaInput` -- the default: a plain text input for a challenge
  served by the authentication server. It has no site-key dependency.
* :class:`ExtendedCaptcha` -- a third-party widget (reCAPTCHA v2, reCAPTCHA
  Enterprise, hCaptcha, Friendly Captcha) configured with a site key.

:func:`render_captcha_pane` reads ``core.captcha`` from a state tree and asks
:data:`captcha_selector` for the variant to show.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from authbox.models import StateTree
from authbox.providers import ProviderSelector


class CaptchaProvider(str, enum.Enum):
    """Third-party captcha providers rendered with :class:`ExtendedCaptcha`."""

    RECAPTCHA_V2 = "recaptcha_v2"
    RECAPTCHA_ENTERPRISE = "recaptcha_enterprise"
    HCAPTCHA = "hcaptcha"
    FRIENDLY_CAPTCHA = "friendly_captcha"


SCRIPT_URLS: dict[CaptchaProvider, str] = {
    CaptchaProvider.RECAPTCHA_V2: "https://www.recaptcha.net/recaptcha/api.js?render=explicit",
    CaptchaProvider.RECAPTCHA_ENTERPRISE: "https://www.recaptcha.net/recaptcha/enterprise.js?render=explicit",
    CaptchaProvider.HCAPTCHA: "https://js.hcaptcha.com/1/api.js?render=explicit",
    CaptchaProvider.FRIENDLY_CAPTCHA: "https://cdn.jsdelivr.net/npm/friendly-challenge@0.9.12/widget.min.js",
}
"""SDK script loaded by the UI layer for each provider."""


@dataclass(frozen=True)
class CaptchaInput:
    """Default captcha variant: a text input next to a server-issued challenge."""

    value: str = ""
    placeholder: str = ""
    on_reload: Optional[Callable[[], Any]] = None

    kind = "input"

    def reload(self) -> Any:
        return self.on_reload() if self.on_reload is not None else None


@dataclass(frozen=True)
class ExtendedCaptcha:
    """Third-party captcha widget bound to a site key."""

    provider: CaptchaProvider
    site_key: str
    value: str = ""
    on_reload: Optional[Callable[[], Any]] = None

    kind = "extended"

    @property
    def script_url(self) -> str:
        return SCRIPT_URLS[self.provider]

    def reload(self) -> Any:
        return self.on_reload() if self.on_reload is not None else None


CaptchaVariant = Union[CaptchaInput, ExtendedCaptcha]


def _extended(provider: CaptchaProvider) -> Callable[[Mapping[str, Any]], ExtendedCaptcha]:
    def build(params: Mapping[str, Any]) -> ExtendedCaptcha:
        return ExtendedCaptcha(
            provider=provider,
            site_key=params.get("site_key", ""),
            value=params.get("value", ""),
            on_reload=params.get("on_reload"),
        )

    return build


def _input(params: Mapping[str, Any]) -> CaptchaInput:
    return CaptchaInput(
        value=params.get("value", ""),
        placeholder=params.get("placeholder", ""),
        on_reload=params.get("on_reload"),
    )


captcha_selector: ProviderSelector[CaptchaVariant] = ProviderSelector(
    {provider.value: _extended(provider) for provider in CaptchaProvider},
    default=_input,
)


def render_captcha_pane(
    tree: StateTree,
    on_reload: Optional[Callable[[], Any]] = None,
    placeholder: str = "",
) -> CaptchaVariant:
    """Select the captcha variant configured in ``tree.core.captcha``."""
    captcha = tree.core.captcha
    return captcha_selector.select(
        captcha.provider,
        {
            "site_key": captcha.site_key,
            "value": tree.ui.captcha_value,
            "placeholder": placeholder,
            "on_reload": on_reload,
        },
    )
