"""Shared helper functions used by the orchestrator and its callers.

Centralises turning an ``EstimatorConfig`` into the per-adapter
``ProviderConfig`` objects, so credentials are read from configuration
in exactly one place.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lawn_estimator.models.imagery import ProviderConfig

if TYPE_CHECKING:
    from lawn_estimator.core.config import EstimatorConfig
    from lawn_estimator.geocoding.base import Geocoder
    from lawn_estimator.providers.base import ImageryProvider


def build_provider_config(
    config: EstimatorConfig,
    provider_name: str,
    api_base_url: str = "",
) -> ProviderConfig:
    """Build a ``ProviderConfig`` for *provider_name* from *config*.

    Args:
        config: Loaded estimator configuration.
        provider_name: Registry name of the provider or geocoder.
        api_base_url: Endpoint override (a proxy or test server).

    Returns:
        A populated ``ProviderConfig`` carrying the matching credential
        and the configured HTTP timeout.
    """
    return ProviderConfig(
        name=provider_name,
        api_key=config.credential_for(provider_name),
        api_base_url=api_base_url,
        timeout_s=config.http_timeout_s,
    )


def provider_from_config(config: EstimatorConfig) -> ImageryProvider:
    """Create the imagery provider named by ``config.imagery_provider``."""
    from lawn_estimator.providers.factory import get_provider

    name = config.imagery_provider
    return get_provider(name, build_provider_config(config, name))


def geocoder_from_config(config: EstimatorConfig) -> Geocoder:
    """Create the geocoder named by ``config.geocoder_provider``."""
    from lawn_estimator.geocoding.factory import get_geocoder

    name = config.geocoder_provider
    return get_geocoder(name, build_provider_config(config, name))
