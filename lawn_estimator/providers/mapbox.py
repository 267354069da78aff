"""Mapbox Static Images adapter (``satellite-v9`` style).

- Point-zoom:   ``static/{lng},{lat},{zoom}/{W}x{H}``
- Bounding box: ``static/[W,S,E,N]/{W}x{H}``

Mapbox styles are rendered from 512 px tiles, so Mapbox zoom ``z``
covers the same ground per pixel as 256 px tile zoom ``z + 1``.  Point
requests are sent one zoom level lower to keep the image consistent with
the resolved ``ScaleModel``.

The logo and attribution overlays are disabled so every returned pixel
is imagery.

References:
    https://docs.mapbox.com/api/maps/static-images/
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from lawn_estimator.providers.base import ImageryProvider, ProviderError

if TYPE_CHECKING:
    from lawn_estimator.models.imagery import ImageryRequest

_DEFAULT_BASE_URL = "https://api.mapbox.com/styles/v1/mapbox/satellite-v9/static"

#: 512 px style tiles vs 256 px reference tiles.
_TILE_ZOOM_OFFSET = 1


class MapboxImageryProvider(ImageryProvider):
    """Mapbox satellite static images (``access_token`` auth)."""

    credential_param = "access_token"

    def build_request_url(self, request: ImageryRequest) -> str:
        base = (self.config.api_base_url or _DEFAULT_BASE_URL).rstrip("/")
        size = f"{request.width_px}x{request.height_px}"

        box, center = request.bounding_box, request.center
        if box is not None:
            overlay = f"[{box.west},{box.south},{box.east},{box.north}]"
        elif center is not None and request.zoom is not None:
            zoom = request.zoom - _TILE_ZOOM_OFFSET
            overlay = f"{center.longitude},{center.latitude},{zoom}"
        else:
            raise ProviderError(self.name, "Imagery request has no bounding box or center")

        params = {
            "attribution": "false",
            "logo": "false",
            self.credential_param: self.config.api_key,
        }
        return str(httpx.URL(f"{base}/{overlay}/{size}", params=params))
