"""String resolution for widget copy.

The render pipeline asks a :class:`Translator` for every user-facing string.
:class:`DictionaryTranslator` looks keys up in the instance's
``ui.language_dictionary`` first and falls back to :data:`DEFAULT_DICTIONARY`.
Hosts with a real i18n layer pass their own translator to the widget.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from authbox.models import StateTree

logger = logging.getLogger(__name__)

DEFAULT_DICTIONARY: dict[str, str] = {
    "title": "Log In",
    "welcome": "Welcome {name}!",
    "captchaCodeInputPlaceholder": "Enter the code shown above",
    "captchaMathInputPlaceholder": "Solve the formula shown above",
}


class Translator(ABC):
    @abstractmethod
    def t(self, tree: StateTree, key: str, **params: Any) -> str:
        """Return the string for *key*, interpolating *params*."""
        ...


class DictionaryTranslator(Translator):
    """Translator over per-instance overrides and a default dictionary.

    Templates use :meth:`str.format` placeholders. A template referencing a
    missing parameter is returned uninterpolated; an unknown key resolves to
    the key itself.
    """

    def __init__(self, defaults: dict[str, str] | None = None) -> None:
        self._defaults = dict(DEFAULT_DICTIONARY if defaults is None else defaults)

    def t(self, tree: StateTree, key: str, **params: Any) -> str:
        template = tree.ui.language_dictionary.get(key, self._defaults.get(key))
        if template is None:
            logger.debug("Missing translation for '%s'", key)
            return key
        try:
            return template.format(**params)
        except (KeyError, IndexError):
            return template
