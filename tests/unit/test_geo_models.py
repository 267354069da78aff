"""Tests for geographic value types (GeoPoint, BoundingBox, ViewportSpec)."""

from __future__ import annotations

import math

import pytest

from lawn_estimator.models.geo import BoundingBox, GeoPoint, ViewportMode, ViewportSpec
from lawn_estimator.models.validation import ModelValidationError


class TestGeoPoint:
    def test_valid_point(self) -> None:
        point = GeoPoint(latitude=47.6062, longitude=-122.3321)
        assert point.latitude == 47.6062

    @pytest.mark.parametrize(
        ("lat", "lng"),
        [(90.5, 0.0), (-91.0, 0.0), (0.0, 180.1), (0.0, -181.0), (math.nan, 0.0), (0.0, math.inf)],
    )
    def test_out_of_range_rejected(self, lat: float, lng: float) -> None:
        with pytest.raises(ModelValidationError):
            GeoPoint(latitude=lat, longitude=lng)

    def test_label_uses_six_decimals(self) -> None:
        assert GeoPoint(latitude=1.5, longitude=-2.25).label() == "Location (1.500000, -2.250000)"

    def test_frozen(self) -> None:
        point = GeoPoint(latitude=0.0, longitude=0.0)
        with pytest.raises(AttributeError):
            point.latitude = 1.0  # type: ignore[misc]


class TestBoundingBox:
    def test_positive_extent(self) -> None:
        box = BoundingBox(north=47.61, south=47.60, east=-122.33, west=-122.34)
        assert box.has_positive_extent

    def test_degenerate_box_is_constructible(self) -> None:
        """Extent is judged by the scale resolver, not the model."""
        box = BoundingBox(north=47.6, south=47.6, east=-122.33, west=-122.34)
        assert not box.has_positive_extent

    def test_inverted_box_has_no_extent(self) -> None:
        box = BoundingBox(north=47.60, south=47.61, east=-122.33, west=-122.34)
        assert not box.has_positive_extent

    def test_center(self) -> None:
        box = BoundingBox(north=10.0, south=0.0, east=20.0, west=10.0)
        assert box.center == GeoPoint(latitude=5.0, longitude=15.0)

    def test_edge_out_of_range_rejected(self) -> None:
        with pytest.raises(ModelValidationError, match="north"):
            BoundingBox(north=95.0, south=0.0, east=1.0, west=0.0)


class TestViewportSpec:
    def test_point_zoom_constructor(self) -> None:
        center = GeoPoint(latitude=1.0, longitude=2.0)
        spec = ViewportSpec.point_zoom(center, 17.4, 640, 480)
        assert spec.center == center
        assert spec.zoom == 17.4
        assert spec.bounding_box is None
        assert spec.mode is ViewportMode.POINT_ZOOM

    def test_bounding_box_constructor(self) -> None:
        box = BoundingBox(north=1.0, south=0.0, east=1.0, west=0.0)
        spec = ViewportSpec.bounding_box_mode(box, 300, 200)
        assert spec.bounding_box == box
        assert spec.center is None and spec.zoom is None
        assert spec.mode is ViewportMode.BOUNDING_BOX

    def test_non_finite_zoom_rejected(self) -> None:
        with pytest.raises(ModelValidationError, match="zoom"):
            ViewportSpec.point_zoom(GeoPoint(latitude=0.0, longitude=0.0), math.nan, 10, 10)
