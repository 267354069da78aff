"""Geographic value types: points, bounding boxes, and viewports.

A ``ViewportSpec`` describes what the caller wants to look at, in one of
two discriminated modes:

- ``POINT_ZOOM``:   a centre point plus a slippy-map zoom level.
- ``BOUNDING_BOX``: an explicit north/south/east/west box.

Both carry the requested image size in pixels.  Coordinates are WGS 84
decimal degrees.  Geometry that cannot be turned into a ground scale
(degenerate boxes, non-positive pixel sizes) is *not* rejected here; the
scale resolver owns that decision and raises ``InvalidViewportError``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from lawn_estimator.models.validation import check_finite, check_range


class ViewportMode(enum.Enum):
    """How a viewport (and the imagery request built from it) is expressed."""

    POINT_ZOOM = "point_zoom"
    BOUNDING_BOX = "bounding_box"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A WGS 84 position.

    Attributes:
        latitude: Decimal degrees, -90 to 90.
        longitude: Decimal degrees, -180 to 180.
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        check_range("GeoPoint", "latitude", self.latitude, -90.0, 90.0)
        check_range("GeoPoint", "longitude", self.longitude, -180.0, 180.0)

    def label(self) -> str:
        """Return the ``"Location (lat, lng)"`` label used when no address is known."""
        return f"Location ({self.latitude:.6f}, {self.longitude:.6f})"


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """A north/south/east/west box in decimal degrees.

    Edges are range-checked individually; the extent (``north > south``,
    ``east > west``) is checked by the scale resolver.
    """

    north: float
    south: float
    east: float
    west: float

    def __post_init__(self) -> None:
        check_range("BoundingBox", "north", self.north, -90.0, 90.0)
        check_range("BoundingBox", "south", self.south, -90.0, 90.0)
        check_range("BoundingBox", "east", self.east, -180.0, 180.0)
        check_range("BoundingBox", "west", self.west, -180.0, 180.0)

    @property
    def has_positive_extent(self) -> bool:
        return self.north > self.south and self.east > self.west

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(
            latitude=(self.north + self.south) / 2,
            longitude=(self.east + self.west) / 2,
        )


@dataclass(frozen=True, slots=True)
class ViewportSpec:
    """The caller's requested viewport.

    Use ``ViewportSpec.point_zoom`` or ``ViewportSpec.bounding_box_mode``
    rather than populating the optional fields by hand; exactly one of
    ``center``/``zoom`` or ``bounding_box`` is meant to be active.

    Attributes:
        width_px: Requested image width in pixels.
        height_px: Requested image height in pixels.
        center: Centre point (point-zoom mode).
        zoom: Zoom level, may be fractional (point-zoom mode).
        bounding_box: Explicit box (bounding-box mode).
    """

    width_px: int
    height_px: int
    center: GeoPoint | None = None
    zoom: float | None = None
    bounding_box: BoundingBox | None = None

    def __post_init__(self) -> None:
        if self.zoom is not None:
            check_finite("ViewportSpec", "zoom", self.zoom)

    @classmethod
    def point_zoom(
        cls,
        center: GeoPoint,
        zoom: float,
        width_px: int,
        height_px: int,
    ) -> ViewportSpec:
        return cls(width_px=width_px, height_px=height_px, center=center, zoom=zoom)

    @classmethod
    def bounding_box_mode(
        cls,
        bounding_box: BoundingBox,
        width_px: int,
        height_px: int,
    ) -> ViewportSpec:
        return cls(width_px=width_px, height_px=height_px, bounding_box=bounding_box)

    @property
    def mode(self) -> ViewportMode:
        """``BOUNDING_BOX`` when a box is set, otherwise ``POINT_ZOOM``."""
        if self.bounding_box is not None:
            return ViewportMode.BOUNDING_BOX
        return ViewportMode.POINT_ZOOM
