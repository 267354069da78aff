"""Provider factory — selects the active imagery provider by name.

Usage::

    from lawn_estimator.providers.factory import get_provider

    provider = get_provider("bing", ProviderConfig(name="bing", api_key=key))
    payload = provider.fetch(request)

The provider name normally comes from ``EstimatorConfig.imagery_provider``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lawn_estimator.core.exceptions import REASON_MISCONFIGURED
from lawn_estimator.models.imagery import ProviderConfig
from lawn_estimator.providers.base import ImageryProvider, ProviderError
from lawn_estimator.utils.registry import AdapterRegistry

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

BING = "bing"
MAPBOX = "mapbox"

_PROVIDERS: AdapterRegistry[ImageryProvider] = AdapterRegistry(
    {
        BING: "lawn_estimator.providers.bing:BingMapsImageryProvider",
        MAPBOX: "lawn_estimator.providers.mapbox:MapboxImageryProvider",
    }
)


def register_provider(name: str, loader: Callable[[], type[ImageryProvider]]) -> None:
    """Register a custom provider adapter (``loader`` returns its class)."""
    _PROVIDERS.register(name, loader)
    logger.debug("Registered provider adapter: %s", name)


def unregister_provider(name: str) -> None:
    _PROVIDERS.unregister(name)


def get_provider(name: str, config: ProviderConfig | None = None) -> ImageryProvider:
    """Create an imagery provider.

    Args:
        name: Provider identifier (e.g. ``"bing"``, ``"mapbox"``).
        config: Credentials and endpoint.  Defaults to a config with no
            credential, which fails as misconfigured on first fetch.

    Raises:
        ProviderError: If *name* is not registered or *config* names a
            different provider.
    """
    adapter_cls = _PROVIDERS.lookup(name)
    if adapter_cls is None:
        msg = f"Unknown imagery provider: {name!r}. Available: {', '.join(_PROVIDERS.names())}"
        raise ProviderError(provider=name, message=msg, reason=REASON_MISCONFIGURED)

    if config is None:
        config = ProviderConfig(name=name)
    elif config.name != name:
        msg = f"ProviderConfig.name {config.name!r} does not match requested provider {name!r}"
        raise ProviderError(provider=name, message=msg, reason=REASON_MISCONFIGURED)

    logger.info("Creating imagery provider: %s", name)
    return adapter_cls(config)


def list_providers() -> list[str]:
    return _PROVIDERS.names()
