"""Tests for the estimate_area activity."""

from __future__ import annotations

import math

import pytest

from lawn_estimator.activities.estimate_area import estimate_area, round_half_up
from lawn_estimator.core.exceptions import InvalidViewportError
from lawn_estimator.models.geo import ViewportMode
from lawn_estimator.models.imagery import ScaleModel


def _scale(mpp: float = 1.0) -> ScaleModel:
    return ScaleModel(meters_per_pixel=mpp, latitude_corrected=False, mode=ViewportMode.POINT_ZOOM)


class TestEstimateArea:
    def test_two_by_two_scenario(self) -> None:
        estimate = estimate_area(1, 4, _scale(1.0), 2, 2)
        assert estimate.green_fraction == 0.25
        assert estimate.coverage_pct == 25
        assert estimate.total_area_sq_meters == 4.0
        assert estimate.square_feet == 11
        assert estimate.square_meters == 1

    def test_feet_to_meters_uses_conventional_constant(self) -> None:
        estimate = estimate_area(10, 10, _scale(1.0), 100, 100)
        assert math.isclose(estimate.estimated_sq_feet, 10_000 * 10.764)
        assert estimate.square_feet == 107_640
        assert estimate.square_meters == round_half_up(107_640 * 0.092903)

    def test_all_vegetation_caps_at_100(self) -> None:
        estimate = estimate_area(240_000, 240_000, _scale(0.596), 600, 400)
        assert estimate.coverage_pct == 100

    def test_no_vegetation_is_zero(self) -> None:
        estimate = estimate_area(0, 240_000, _scale(0.596), 600, 400)
        assert estimate.coverage_pct == 0
        assert estimate.square_feet == 0
        assert estimate.square_meters == 0

    def test_coverage_is_floored(self) -> None:
        estimate = estimate_area(2, 3, _scale(), 3, 1)
        assert estimate.coverage_pct == 66

    @pytest.mark.parametrize("classified", [1, 7, 50, 1000])
    def test_area_linear_in_classified_count(self, classified: int) -> None:
        single = estimate_area(classified, 10_000, _scale(0.3), 100, 100)
        double = estimate_area(classified * 2, 10_000, _scale(0.3), 100, 100)
        assert math.isclose(double.estimated_sq_feet, 2 * single.estimated_sq_feet)
        assert abs(double.square_feet - 2 * single.square_feet) <= 1

    def test_coverage_always_within_bounds(self) -> None:
        for total in (1, 3, 7, 97, 1000):
            for classified in range(0, total + 1, max(1, total // 10)):
                estimate = estimate_area(classified, total, _scale(), total, 1)
                assert 0 <= estimate.coverage_pct <= 100

    def test_zero_pixels_rejected(self) -> None:
        with pytest.raises(InvalidViewportError) as exc_info:
            estimate_area(0, 0, _scale(), 0, 0)
        assert exc_info.value.stage == "estimate_area"


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(10.764, 11), (0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (0.0, 0)],
    )
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected
