"""Pipeline output models.

- ``NormalizedPixel``: One classified pixel, position scaled to [0, 1).
- ``ClassificationResult``: Classifier counts plus the ordered pixel list.
- ``AreaEstimate``: Square feet / metres and coverage for one raster.
- ``EstimateResult``: The assembled, immutable answer for one request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from lawn_estimator.models.geo import ViewportMode
from lawn_estimator.models.validation import ModelValidationError, check_min


class NormalizedPixel(NamedTuple):
    """A classified pixel's column and row divided by image width and height."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Output of one vegetation scan.

    Attributes:
        classified_count: Pixels classified as vegetation.
        total_count: Pixels scanned.
        pixels: Classified pixel positions in row-major scan order.
    """

    classified_count: int
    total_count: int
    pixels: tuple[NormalizedPixel, ...] = field(default=(), repr=False)

    def __post_init__(self) -> None:
        check_min("ClassificationResult", "classified_count", self.classified_count, 0)
        check_min("ClassificationResult", "total_count", self.total_count, 0)
        if self.classified_count > self.total_count:
            raise ModelValidationError(
                "ClassificationResult",
                "classified_count",
                self.classified_count,
                f"must be <= total_count ({self.total_count})",
            )


@dataclass(frozen=True, slots=True)
class AreaEstimate:
    """Area figures for one classified raster.

    The unrounded intermediate values are kept alongside the rounded
    outputs so callers and tests can reason about linearity.

    Attributes:
        square_feet: Estimated lawn area, rounded to whole square feet.
        square_meters: Estimated lawn area, rounded to whole square metres.
        coverage_pct: Floor of the green fraction as a percentage, capped at 100.
        green_fraction: Classified pixels / total pixels.
        total_area_sq_meters: Ground area covered by the raster.
        estimated_sq_feet: Unrounded lawn area in square feet.
    """

    square_feet: int
    square_meters: int
    coverage_pct: int
    green_fraction: float
    total_area_sq_meters: float
    estimated_sq_feet: float


@dataclass(frozen=True, slots=True)
class EstimateResult:
    """The final answer for one pipeline run.

    Attributes:
        address: Human-readable location label.
        square_feet: Estimated lawn area in square feet (>= 0).
        square_meters: Estimated lawn area in square metres (>= 0).
        lawn_coverage_pct: Integer coverage percentage (0-100).
        image_reference: Credential-free reference to the analysed image.
        detected_pixels: Classified pixel positions in scan order.
        mode: Viewport mode the estimate was computed in.
        zoom: Zoom level used (``None`` in bounding-box mode).
    """

    address: str | None
    square_feet: int
    square_meters: int
    lawn_coverage_pct: int
    image_reference: str
    detected_pixels: tuple[NormalizedPixel, ...] = field(default=(), repr=False)
    mode: ViewportMode = ViewportMode.POINT_ZOOM
    zoom: int | None = None

    def __post_init__(self) -> None:
        check_min("EstimateResult", "square_feet", self.square_feet, 0)
        check_min("EstimateResult", "square_meters", self.square_meters, 0)
        if not 0 <= self.lawn_coverage_pct <= 100:
            raise ModelValidationError(
                "EstimateResult",
                "lawn_coverage_pct",
                self.lawn_coverage_pct,
                "must be between 0 and 100",
            )

    def to_dict(self) -> dict[str, object]:
        """Serialise to the camelCase wire shape returned to callers."""
        return {
            "address": self.address,
            "squareFeet": self.square_feet,
            "squareMeters": self.square_meters,
            "lawnCoverage": self.lawn_coverage_pct,
            "imageUrl": self.image_reference,
            "detectedPixels": [{"x": p.x, "y": p.y} for p in self.detected_pixels],
            "zoom": self.zoom,
        }
