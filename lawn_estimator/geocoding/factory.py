"""Geocoder factory — selects the active geocoder by name."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lawn_estimator.core.exceptions import REASON_MISCONFIGURED
from lawn_estimator.geocoding.base import Geocoder, GeocodeServiceError
from lawn_estimator.models.imagery import ProviderConfig
from lawn_estimator.utils.registry import AdapterRegistry

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_GEOCODERS: AdapterRegistry[Geocoder] = AdapterRegistry(
    {
        "bing": "lawn_estimator.geocoding.bing:BingMapsGeocoder",
        "mapbox": "lawn_estimator.geocoding.mapbox:MapboxGeocoder",
    }
)


def register_geocoder(name: str, loader: Callable[[], type[Geocoder]]) -> None:
    _GEOCODERS.register(name, loader)


def unregister_geocoder(name: str) -> None:
    _GEOCODERS.unregister(name)


def get_geocoder(name: str, config: ProviderConfig | None = None) -> Geocoder:
    """Create a geocoder.

    Raises:
        GeocodeServiceError: If *name* is not registered (misconfigured).
    """
    adapter_cls = _GEOCODERS.lookup(name)
    if adapter_cls is None:
        msg = f"Unknown geocoder: {name!r}. Available: {', '.join(_GEOCODERS.names())}"
        raise GeocodeServiceError(msg, reason=REASON_MISCONFIGURED)

    logger.info("Creating geocoder: %s", name)
    return adapter_cls(config or ProviderConfig(name=name))


def list_geocoders() -> list[str]:
    return _GEOCODERS.names()
