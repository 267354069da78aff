"""Address geocoding adapters (Bing Maps Locations, Mapbox Places)."""

from lawn_estimator.geocoding.base import (
    GeocodeNotFoundError,
    GeocodeResult,
    Geocoder,
    GeocodeServiceError,
)
from lawn_estimator.geocoding.factory import get_geocoder, list_geocoders, register_geocoder

__all__ = [
    "GeocodeNotFoundError",
    "GeocodeResult",
    "GeocodeServiceError",
    "Geocoder",
    "get_geocoder",
    "list_geocoders",
    "register_geocoder",
]
