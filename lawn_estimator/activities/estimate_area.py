"""Estimate area activity — turn a classified fraction into ground area.

::

    green_fraction   = classified / total
    total_sq_meters  = (width_px * mpp) * (height_px * mpp)
    estimated_sq_ft  = total_sq_meters * 10.764 * green_fraction
    estimated_sq_m   = estimated_sq_ft * 0.092903
    coverage_pct     = min(100, floor(green_fraction * 100))

Square metres are converted back from square feet with the conventional
constant rather than re-derived from ``total_sq_meters``.  Area outputs
are rounded half-up to whole units.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from lawn_estimator.core.constants import SQ_FEET_PER_SQ_METER, SQ_METERS_PER_SQ_FOOT
from lawn_estimator.core.exceptions import InvalidViewportError
from lawn_estimator.models.estimate import AreaEstimate

if TYPE_CHECKING:
    from lawn_estimator.models.imagery import ScaleModel

logger = logging.getLogger("lawn_estimator.activities.estimate_area")


def estimate_area(
    classified_count: int,
    total_count: int,
    scale: ScaleModel,
    width_px: int,
    height_px: int,
) -> AreaEstimate:
    """Compute lawn area and coverage for one classified raster.

    Args:
        classified_count: Pixels classified as vegetation.
        total_count: Pixels scanned (must be > 0).
        scale: Ground scale matching *width_px* x *height_px*.
        width_px: Width of the scanned raster.
        height_px: Height of the scanned raster.

    Raises:
        InvalidViewportError: If no pixels were scanned.
    """
    if total_count <= 0:
        msg = "Image has no pixels; cannot estimate area"
        raise InvalidViewportError(msg, stage="estimate_area")

    green_fraction = classified_count / total_count
    area_width_m = width_px * scale.meters_per_pixel
    area_height_m = height_px * scale.meters_per_pixel
    total_area_sq_meters = area_width_m * area_height_m
    total_area_sq_feet = total_area_sq_meters * SQ_FEET_PER_SQ_METER

    estimated_sq_feet = total_area_sq_feet * green_fraction
    estimated_sq_meters = estimated_sq_feet * SQ_METERS_PER_SQ_FOOT
    coverage_pct = min(100, math.floor(green_fraction * 100))

    estimate = AreaEstimate(
        square_feet=round_half_up(estimated_sq_feet),
        square_meters=round_half_up(estimated_sq_meters),
        coverage_pct=coverage_pct,
        green_fraction=green_fraction,
        total_area_sq_meters=total_area_sq_meters,
        estimated_sq_feet=estimated_sq_feet,
    )
    logger.info(
        "estimate_area completed | fraction=%.4f | total_sq_m=%.1f | sq_ft=%d | coverage=%d%%",
        green_fraction,
        total_area_sq_meters,
        estimate.square_feet,
        estimate.coverage_pct,
    )
    return estimate


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)
