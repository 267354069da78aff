"""Mapbox Places geocoder.

``GET geocoding/v5/mapbox.places/<address>.json?limit=1``; the best match
is the first feature, with ``geometry.coordinates`` given as
``[lng, lat]`` and ``place_name`` as the formatted address.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from lawn_estimator.geocoding.base import GeocodeResult, Geocoder, not_found
from lawn_estimator.models.geo import GeoPoint

_DEFAULT_BASE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"


class MapboxGeocoder(Geocoder):
    """Mapbox Geocoding API (v5, ``mapbox.places``)."""

    def build_query(self, address: str) -> tuple[str, dict[str, str]]:
        base = (self.config.api_base_url or _DEFAULT_BASE_URL).rstrip("/")
        url = f"{base}/{quote(address, safe='')}.json"
        return url, {"access_token": self.config.api_key, "limit": "1"}

    def parse_response(self, data: Any, address: str) -> GeocodeResult:
        try:
            feature = data["features"][0]
            lng, lat = feature["geometry"]["coordinates"][:2]
            point = GeoPoint(latitude=float(lat), longitude=float(lng))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise not_found(self.name, address) from exc

        return GeocodeResult(point=point, formatted_address=str(feature.get("place_name") or address))
