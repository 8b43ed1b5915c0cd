"""``authbox providers`` -- list captcha providers and the variant each selects."""

from __future__ import annotations

from authbox.captcha import SCRIPT_URLS, CaptchaProvider, captcha_selector
from authbox.output import print_table


def providers_command() -> None:
    """List captcha providers.

    Every known provider renders the extended widget with its SDK script;
    anything else (including no provider) renders the plain input.
    """
    rows = []
    for provider in CaptchaProvider:
        variant = captcha_selector.select(provider.value, {"site_key": "<site key>"})
        rows.append([provider.value, variant.kind, SCRIPT_URLS[provider]])
    default = captcha_selector.select(None)
    rows.append(["(none or unknown)", default.kind, "-"])
    print_table(["provider", "variant", "script"], rows, title="Captcha providers")
