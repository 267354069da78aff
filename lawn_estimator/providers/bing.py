"""Bing Maps static aerial imagery adapter.

Uses the Bing Maps REST Imagery API:

- Point-zoom:   ``Imagery/Map/Aerial/{lat},{lng}/{zoom}?mapSize=W,H``
- Bounding box: ``Imagery/Map/Aerial?mapArea=S,W,N,E&mapSize=W,H``

Bing renders 256 px Web Mercator tiles, which is the tiling the zoom
scale formula is calibrated against.

References:
    https://learn.microsoft.com/bingmaps/rest-services/imagery/get-a-static-map
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from lawn_estimator.providers.base import ImageryProvider, ProviderError

if TYPE_CHECKING:
    from lawn_estimator.models.imagery import ImageryRequest

_DEFAULT_BASE_URL = "https://dev.virtualearth.net/REST/v1"


class BingMapsImageryProvider(ImageryProvider):
    """Bing Maps aerial imagery (``key`` query-parameter auth)."""

    credential_param = "key"

    def build_request_url(self, request: ImageryRequest) -> str:
        base = (self.config.api_base_url or _DEFAULT_BASE_URL).rstrip("/")
        params = {
            "mapSize": f"{request.width_px},{request.height_px}",
            "format": request.image_format,
        }

        box, center = request.bounding_box, request.center
        if box is not None:
            path = f"{base}/Imagery/Map/Aerial"
            params = {"mapArea": f"{box.south},{box.west},{box.north},{box.east}", **params}
        elif center is not None:
            path = f"{base}/Imagery/Map/Aerial/{center.latitude},{center.longitude}/{request.zoom}"
        else:
            raise ProviderError(self.name, "Imagery request has no bounding box or center")

        params[self.credential_param] = self.config.api_key
        return str(httpx.URL(path, params=params))
