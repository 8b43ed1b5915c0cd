"""Configuration-driven selection of one implementation from a closed set.

:class:`ProviderSelector` is a dispatch table: provider identifiers map to
variant factories, and anything absent, empty or unknown falls through to
the default factory. Selection is a pure function of the identifier and the
parameters; it performs no I/O and touches no state.

The captcha region is the main user (see :mod:`authbox.captcha`), but any UI
decision of the form "pick exactly one implementation, else the default"
uses the same selector.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Generic, Optional, TypeVar, Union

V = TypeVar("V")

VariantFactory = Callable[[Mapping[str, Any]], V]


class ProviderSelector(Generic[V]):
    """Fixed registry of variant factories with an explicit default arm.

    Args:
        registry: Provider identifier to factory. Each factory receives the
            selection parameters as a read-only mapping.
        default: Factory used when the identifier is missing or unknown.

    Example::

        selector = ProviderSelector(
            {"fancy": lambda params: Fancy(params["key"])},
            default=lambda params: Plain(),
        )
        selector.select("fancy", {"key": "k"})  # Fancy("k")
        selector.select("other", {"key": "k"})  # Plain()
    """

    def __init__(
        self,
        registry: Mapping[str, VariantFactory[V]],
        default: VariantFactory[V],
    ) -> None:
        self._registry = MappingProxyType(dict(registry))
        self._default = default

    @property
    def providers(self) -> list[str]:
        """Sorted identifiers of every registered provider."""
        return sorted(self._registry)

    def is_known(self, provider_id: Union[str, enum.Enum, None]) -> bool:
        key = _normalise(provider_id)
        return key is not None and key in self._registry

    def select(
        self,
        provider_id: Union[str, enum.Enum, None],
        params: Optional[Mapping[str, Any]] = None,
    ) -> V:
        """Build the variant for *provider_id* with *params*.

        Args:
            provider_id: Identifier from configuration. ``None``, ``""`` and
                identifiers outside the registry select the default.
            params: Provider-specific parameters (e.g. a site key).

        Returns:
            The variant built by the matching factory.
        """
        frozen = MappingProxyType(dict(params or {}))
        key = _normalise(provider_id)
        factory = self._registry.get(key) if key else None
        if factory is None:
            return self._default(frozen)
        return factory(frozen)


def _normalise(provider_id: Union[str, enum.Enum, None]) -> Optional[str]:
    if isinstance(provider_id, enum.Enum):
        provider_id = provider_id.value
    if not isinstance(provider_id, str) or not provider_id:
        return None
    return provider_id
