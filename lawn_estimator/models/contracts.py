"""Caller-facing request contract.

``EstimateRequest`` is the one payload a transport layer hands to the
pipeline.  Field aliases match the JSON the map front end sends
(``mapWidth``, ``mapHeight``, ``mapBounds``); snake_case names are
accepted as well.

Pixel sizes and bounding-box extents are deliberately left
unconstrained here so the scale resolver reports them as
``InvalidViewportError`` rather than as generic input errors.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from lawn_estimator.core.constants import (
    DEFAULT_MAP_HEIGHT_PX,
    DEFAULT_MAP_WIDTH_PX,
    DEFAULT_ZOOM,
)
from lawn_estimator.core.exceptions import InvalidInputError
from lawn_estimator.models.geo import BoundingBox, GeoPoint, ViewportSpec


class Coordinates(BaseModel):
    """A ``{lat, lng}`` pair as sent by the map widget."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    def to_point(self) -> GeoPoint:
        return GeoPoint(latitude=self.lat, longitude=self.lng)


class MapBounds(BaseModel):
    """The visible map rectangle as ``{north, south, east, west}``."""

    model_config = ConfigDict(frozen=True)

    north: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    south: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    east: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    west: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    def to_bounding_box(self) -> BoundingBox:
        return BoundingBox(north=self.north, south=self.south, east=self.east, west=self.west)


class EstimateRequest(BaseModel):
    """Input to the lawn estimation pipeline.

    Either ``address`` or ``coordinates`` must be supplied.  When both
    are present the coordinates drive the imagery and the address is
    used only as the result label.

    Attributes:
        address: Free-text postal address.
        coordinates: Map centre as ``{lat, lng}``.
        zoom: Map zoom level (may be fractional; clamped later).
        map_width: Rendered map width in pixels.
        map_height: Rendered map height in pixels.
        map_bounds: Visible map rectangle; selects bounding-box mode.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: str | None = None
    coordinates: Coordinates | None = None
    zoom: float = Field(default=DEFAULT_ZOOM, allow_inf_nan=False)
    map_width: int = Field(default=DEFAULT_MAP_WIDTH_PX, alias="mapWidth")
    map_height: int = Field(default=DEFAULT_MAP_HEIGHT_PX, alias="mapHeight")
    map_bounds: MapBounds | None = Field(default=None, alias="mapBounds")

    @field_validator("address")
    @classmethod
    def _blank_address_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @model_validator(mode="after")
    def _require_location(self) -> EstimateRequest:
        if self.address is None and self.coordinates is None:
            msg = "Either an address or coordinates are required"
            raise ValueError(msg)
        return self

    @classmethod
    def parse(cls, payload: Mapping[str, Any]) -> EstimateRequest:
        """Validate a raw mapping, raising ``InvalidInputError`` on failure."""
        if not isinstance(payload, Mapping):
            msg = f"Estimate request must be a JSON object, got {type(payload).__name__}"
            raise InvalidInputError(msg)
        try:
            return cls.model_validate(dict(payload))
        except pydantic.ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
                for err in exc.errors()
            )
            msg = f"Invalid estimate request: {details}"
            raise InvalidInputError(msg) from exc

    def viewport_for(self, center: GeoPoint | None = None) -> ViewportSpec:
        """Build the ``ViewportSpec`` this request describes.

        Args:
            center: Geocoded centre to use when the request carried only
                an address.

        Raises:
            InvalidInputError: If no centre is available.
        """
        if self.coordinates is not None:
            if self.map_bounds is not None:
                return ViewportSpec.bounding_box_mode(
                    self.map_bounds.to_bounding_box(), self.map_width, self.map_height
                )
            center = self.coordinates.to_point()
        if center is None:
            msg = "Valid coordinates are required"
            raise InvalidInputError(msg)
        return ViewportSpec.point_zoom(center, self.zoom, self.map_width, self.map_height)
