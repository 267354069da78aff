"""Data models and schemas.

Defines the data structures used throughout the pipeline:
- GeoPoint, BoundingBox, ViewportSpec: what the caller asked to look at
- ImageryRequest, ScaleModel: the resolved viewport
- RasterImage: decoded pixels
- ClassificationResult, AreaEstimate, EstimateResult: pipeline outputs
- EstimateRequest: caller-facing request contract
"""

from lawn_estimator.models.estimate import (
    AreaEstimate,
    ClassificationResult,
    EstimateResult,
    NormalizedPixel,
)
from lawn_estimator.models.geo import BoundingBox, GeoPoint, ViewportMode, ViewportSpec
from lawn_estimator.models.imagery import (
    ImageryPayload,
    ImageryRequest,
    ProviderConfig,
    RasterImage,
    ScaleModel,
)
from lawn_estimator.models.validation import ModelValidationError

__all__ = [
    "AreaEstimate",
    "BoundingBox",
    "ClassificationResult",
    "EstimateResult",
    "GeoPoint",
    "ImageryPayload",
    "ImageryRequest",
    "ModelValidationError",
    "NormalizedPixel",
    "ProviderConfig",
    "RasterImage",
    "ScaleModel",
    "ViewportMode",
    "ViewportSpec",
]
