"""Resolve a viewport into an imagery request and a ground scale.

Two derivations exist and are never mixed for one request:

- **Point-zoom**: the zoom is rounded half-up and clamped to [1, 21];
  ``mpp = 0.596 * 2 ** (18 - zoom)``, then divided by
  ``cos(latitude)`` when the centre is off the equator.
- **Bounding box**: the geodesic ground width and height of the box
  (WGS 84, measured through the box centre) are divided by the requested
  pixel width and height.  A single ``mpp`` is the geometric mean of the
  two axes, so ``width_px * height_px * mpp**2`` equals the ground area
  of the box.  No latitude correction applies: the box already encodes
  ground extent.
"""

from __future__ import annotations

import logging
import math

from lawn_estimator.core.constants import (
    BASE_METERS_PER_PIXEL_AT_ZOOM_18,
    MAX_ZOOM,
    MIN_ZOOM,
    POLE_LATITUDE,
    REFERENCE_ZOOM,
)
from lawn_estimator.core.exceptions import InvalidViewportError
from lawn_estimator.models.geo import BoundingBox, GeoPoint, ViewportMode, ViewportSpec
from lawn_estimator.models.imagery import ImageryRequest, ScaleModel

logger = logging.getLogger("lawn_estimator.activities.resolve_scale")


def resolve_scale(viewport: ViewportSpec) -> tuple[ImageryRequest, ScaleModel]:
    """Turn *viewport* into an ``ImageryRequest`` and matching ``ScaleModel``.

    Raises:
        InvalidViewportError: If neither (or both) of centre/zoom and
            bounding box are given, pixel dimensions are not positive,
            the bounding box has no positive extent, or the centre is
            on a pole.
    """
    _validate_dimensions(viewport)

    has_point = viewport.center is not None or viewport.zoom is not None
    has_box = viewport.bounding_box is not None

    if has_point and has_box:
        msg = "Viewport must use either center/zoom or a bounding box, not both"
        raise InvalidViewportError(msg)

    if viewport.bounding_box is not None:
        request, scale = _resolve_bounding_box(viewport.bounding_box, viewport)
    elif viewport.center is not None and viewport.zoom is not None:
        request, scale = _resolve_point_zoom(viewport.center, viewport.zoom, viewport)
    else:
        msg = "Viewport needs a center and zoom, or a bounding box"
        raise InvalidViewportError(msg)

    logger.info(
        "Scale resolved | mode=%s | size=%dx%d | zoom=%s | mpp=%.4f | latitude_corrected=%s",
        request.mode.value,
        request.width_px,
        request.height_px,
        request.zoom,
        scale.meters_per_pixel,
        scale.latitude_corrected,
    )
    return request, scale


def clamp_zoom(zoom: float) -> int:
    """Round *zoom* half-up to an integer and clamp it to [1, 21].

    *zoom* must be finite; ``ViewportSpec`` rejects anything else.
    """
    return max(MIN_ZOOM, min(MAX_ZOOM, math.floor(zoom + 0.5)))


def meters_per_pixel_at_zoom(zoom: int, latitude: float = 0.0) -> tuple[float, bool]:
    """Return ``(meters_per_pixel, latitude_corrected)`` for a clamped *zoom*."""
    mpp = BASE_METERS_PER_PIXEL_AT_ZOOM_18 * 2.0 ** (REFERENCE_ZOOM - zoom)
    if latitude == 0:
        return mpp, False
    return mpp / math.cos(math.radians(latitude)), True


def bounding_box_ground_size(box: BoundingBox) -> tuple[float, float]:
    """Return the geodesic ``(width_m, height_m)`` of *box* through its centre."""
    from pyproj import Geod

    geod = Geod(ellps="WGS84")
    mid_lat = (box.north + box.south) / 2
    mid_lon = (box.east + box.west) / 2
    _, _, width_m = geod.inv(box.west, mid_lat, box.east, mid_lat)
    _, _, height_m = geod.inv(mid_lon, box.south, mid_lon, box.north)
    return abs(width_m), abs(height_m)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _validate_dimensions(viewport: ViewportSpec) -> None:
    if viewport.width_px <= 0 or viewport.height_px <= 0:
        msg = (
            f"Pixel dimensions must be positive, got "
            f"{viewport.width_px}x{viewport.height_px}"
        )
        raise InvalidViewportError(msg)


def _resolve_point_zoom(
    center: GeoPoint,
    zoom: float,
    viewport: ViewportSpec,
) -> tuple[ImageryRequest, ScaleModel]:
    if abs(center.latitude) >= POLE_LATITUDE:
        msg = f"Latitude {center.latitude} is a pole; the secant scale correction is undefined"
        raise InvalidViewportError(msg)

    valid_zoom = clamp_zoom(zoom)
    if valid_zoom != zoom:
        logger.debug("Zoom adjusted | requested=%s | used=%d", zoom, valid_zoom)

    mpp, corrected = meters_per_pixel_at_zoom(valid_zoom, center.latitude)
    request = ImageryRequest(
        mode=ViewportMode.POINT_ZOOM,
        width_px=viewport.width_px,
        height_px=viewport.height_px,
        center=center,
        zoom=valid_zoom,
    )
    scale = ScaleModel(
        meters_per_pixel=mpp,
        latitude_corrected=corrected,
        mode=ViewportMode.POINT_ZOOM,
    )
    return request, scale


def _resolve_bounding_box(
    box: BoundingBox,
    viewport: ViewportSpec,
) -> tuple[ImageryRequest, ScaleModel]:
    if not box.has_positive_extent:
        msg = (
            f"Bounding box must have north > south and east > west, got "
            f"north={box.north}, south={box.south}, east={box.east}, west={box.west}"
        )
        raise InvalidViewportError(msg)

    width_m, height_m = bounding_box_ground_size(box)
    if not (width_m > 0 and height_m > 0):
        msg = f"Bounding box has no ground extent ({width_m:.3f} m x {height_m:.3f} m)"
        raise InvalidViewportError(msg)

    mpp = math.sqrt((width_m / viewport.width_px) * (height_m / viewport.height_px))
    request = ImageryRequest(
        mode=ViewportMode.BOUNDING_BOX,
        width_px=viewport.width_px,
        height_px=viewport.height_px,
        bounding_box=box,
    )
    scale = ScaleModel(
        meters_per_pixel=mpp,
        latitude_corrected=False,
        mode=ViewportMode.BOUNDING_BOX,
    )
    return request, scale
