"""Bing Maps Locations geocoder.

``GET Locations?query=<address>&key=<key>``; the best match is the first
resource of the first resource set, with ``point.coordinates`` given as
``[lat, lng]``.
"""

from __future__ import annotations

from typing import Any

from lawn_estimator.geocoding.base import GeocodeResult, Geocoder, not_found
from lawn_estimator.models.geo import GeoPoint

_DEFAULT_BASE_URL = "https://dev.virtualearth.net/REST/v1"


class BingMapsGeocoder(Geocoder):
    """Bing Maps REST Locations API."""

    def build_query(self, address: str) -> tuple[str, dict[str, str]]:
        base = (self.config.api_base_url or _DEFAULT_BASE_URL).rstrip("/")
        return f"{base}/Locations", {"query": address, "key": self.config.api_key}

    def parse_response(self, data: Any, address: str) -> GeocodeResult:
        try:
            resource = data["resourceSets"][0]["resources"][0]
            lat, lng = resource["point"]["coordinates"][:2]
            point = GeoPoint(latitude=float(lat), longitude=float(lng))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise not_found(self.name, address) from exc

        formatted = (resource.get("address") or {}).get("formattedAddress") or address
        return GeocodeResult(point=point, formatted_address=str(formatted))
