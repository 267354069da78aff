"""Imagery provider adapters.

Implements the provider-agnostic adapter pattern (Strategy pattern):
- ImageryProvider: Abstract base class defining the interface
- BingMapsImageryProvider: Bing Maps REST static aerial imagery
- MapboxImageryProvider: Mapbox Static Images (satellite-v9)

The active provider is selected via configuration, enabling zero-code-change
provider switching.
"""

from lawn_estimator.providers.base import (
    ImageryProvider,
    ProviderAuthError,
    ProviderContractError,
    ProviderError,
    ProviderUnavailableError,
    redact_url,
)
from lawn_estimator.providers.factory import (
    BING,
    MAPBOX,
    get_provider,
    list_providers,
    register_provider,
)

__all__ = [
    "BING",
    "MAPBOX",
    "ImageryProvider",
    "ProviderAuthError",
    "ProviderContractError",
    "ProviderError",
    "ProviderUnavailableError",
    "get_provider",
    "list_providers",
    "redact_url",
    "register_provider",
]
