"""Lawn estimate pipeline orchestrator.

A run is a linear state machine:

    Resolve → Fetch → Decode → Classify → Estimate → Assemble

with two terminal states, ``SUCCEEDED`` (carrying an ``EstimateResult``)
and ``FAILED`` (carrying the originating ``PipelineError``).  The first
failing stage short-circuits the run; nothing is retried here and no
partial result is ever returned.

Two entry points:

- ``run_estimate_pipeline`` takes an already-resolved ``ViewportSpec``
  and raises on failure.
- ``estimate_lawn`` takes the caller-facing request (``EstimateRequest``
  or a raw mapping), geocodes an address when needed, and always
  returns a ``PipelineOutcome``.
"""

from __future__ import annotations

import enum
import logging
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lawn_estimator.activities.classify_vegetation import (
    VegetationThresholds,
    classify_vegetation,
)
from lawn_estimator.activities.decode_raster import decode_raster
from lawn_estimator.activities.estimate_area import estimate_area
from lawn_estimator.activities.fetch_imagery import fetch_imagery
from lawn_estimator.activities.resolve_scale import resolve_scale
from lawn_estimator.core.config import EstimatorConfig
from lawn_estimator.core.exceptions import (
    InvalidInputError,
    InvalidViewportError,
    PipelineError,
)
from lawn_estimator.geocoding.base import GeocodeNotFoundError
from lawn_estimator.models.contracts import EstimateRequest
from lawn_estimator.models.estimate import EstimateResult
from lawn_estimator.utils.helpers import geocoder_from_config, provider_from_config

if TYPE_CHECKING:
    from lawn_estimator.geocoding.base import GeocodeResult, Geocoder
    from lawn_estimator.models.geo import GeoPoint, ViewportSpec
    from lawn_estimator.providers.base import ImageryProvider

logger = logging.getLogger("lawn_estimator.orchestrators.pipeline")


class PipelineStatus(enum.Enum):
    """Terminal state of one pipeline run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PipelineOutcome:
    """Result of ``estimate_lawn``: exactly one of ``result`` / ``error`` is set.

    Attributes:
        status: Terminal state.
        result: The estimate when the run succeeded.
        error: The originating error when the run failed.
        failed_stage: Stage name taken from ``error.stage``.
        correlation_id: Identifier logged with every message of the run.
    """

    status: PipelineStatus
    result: EstimateResult | None = None
    error: PipelineError | None = None
    failed_stage: str = ""
    correlation_id: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is PipelineStatus.SUCCEEDED

    @classmethod
    def success(cls, result: EstimateResult, correlation_id: str = "") -> PipelineOutcome:
        return cls(status=PipelineStatus.SUCCEEDED, result=result, correlation_id=correlation_id)

    @classmethod
    def failure(cls, error: PipelineError, correlation_id: str = "") -> PipelineOutcome:
        return cls(
            status=PipelineStatus.FAILED,
            error=error,
            failed_stage=error.stage,
            correlation_id=correlation_id,
        )

    def to_dict(self) -> dict[str, object]:
        """Return a transport-neutral summary of the outcome."""
        payload: dict[str, object] = {"status": self.status.value}
        if self.result is not None:
            payload["result"] = self.result.to_dict()
        if self.error is not None:
            payload["failed_stage"] = self.failed_stage
            payload["error"] = self.error.to_error_dict()
        return payload


# ---------------------------------------------------------------------------
# Raising entry point
# ---------------------------------------------------------------------------


def run_estimate_pipeline(
    viewport: ViewportSpec,
    *,
    provider: ImageryProvider,
    config: EstimatorConfig | None = None,
    address: str | None = None,
    correlation_id: str = "",
) -> EstimateResult:
    """Run Resolve → Fetch → Decode → Classify → Estimate → Assemble.

    Args:
        viewport: Point-zoom or bounding-box viewport.
        provider: Imagery provider adapter to fetch from.
        config: Thresholds, working resolution, worker count, and timeout.
            Defaults to ``EstimatorConfig()``.
        address: Label for the result.  Defaults to the viewport centre
            rendered as ``"Location (lat, lng)"``.
        correlation_id: Identifier included in log messages.

    Returns:
        The assembled ``EstimateResult``.

    Raises:
        PipelineError: The first stage failure, unchanged.
    """
    config = config or EstimatorConfig()
    run_start = time.monotonic()
    logger.info(
        "pipeline started | correlation_id=%s | provider=%s | mode=%s",
        correlation_id,
        provider.name,
        viewport.mode.value,
    )

    request, scale = resolve_scale(viewport)

    payload = fetch_imagery(request, provider, timeout_s=config.http_timeout_s)

    raster = decode_raster(
        payload.content,
        max_width_px=config.working_max_width_px,
        max_height_px=config.working_max_height_px,
    )
    requested_size = (request.width_px, request.height_px)
    if raster.size != requested_size:
        scale = scale.rescaled(requested_size, raster.size)
        logger.info(
            "Scale rescaled to raster | correlation_id=%s | requested=%dx%d"
            " | decoded=%dx%d | raster=%dx%d | mpp=%.4f",
            correlation_id,
            request.width_px,
            request.height_px,
            raster.source_width_px,
            raster.source_height_px,
            raster.width_px,
            raster.height_px,
            scale.meters_per_pixel,
        )

    classification = classify_vegetation(
        raster,
        VegetationThresholds.from_config(config),
        workers=config.classifier_workers,
    )

    area = estimate_area(
        classification.classified_count,
        classification.total_count,
        scale,
        raster.width_px,
        raster.height_px,
    )

    result = EstimateResult(
        address=address or _viewport_center(viewport).label(),
        square_feet=area.square_feet,
        square_meters=area.square_meters,
        lawn_coverage_pct=area.coverage_pct,
        image_reference=payload.image_reference,
        detected_pixels=classification.pixels,
        mode=request.mode,
        zoom=request.zoom,
    )

    logger.info(
        "pipeline completed | correlation_id=%s | sq_ft=%d | coverage=%d%% | detected=%d | duration=%.2fs",
        correlation_id,
        result.square_feet,
        result.lawn_coverage_pct,
        len(result.detected_pixels),
        time.monotonic() - run_start,
    )
    return result


# ---------------------------------------------------------------------------
# Caller-facing entry point
# ---------------------------------------------------------------------------


def estimate_lawn(
    request: EstimateRequest | Mapping[str, Any],
    *,
    config: EstimatorConfig | None = None,
    provider: ImageryProvider | None = None,
    geocoder: Geocoder | None = None,
    correlation_id: str = "",
) -> PipelineOutcome:
    """Estimate the lawn area for one caller request.

    Accepts either ``{address}`` or ``{coordinates, zoom, mapWidth,
    mapHeight, mapBounds?}``.  An address without coordinates is geocoded
    first; an address that cannot be found fails with
    ``InvalidInputError("address not found")``.

    Args:
        request: Validated ``EstimateRequest`` or a raw mapping.
        config: Estimator configuration.  Defaults to
            ``EstimatorConfig.from_env()``.
        provider: Imagery provider override.  Defaults to the one named by
            ``config.imagery_provider``.
        geocoder: Geocoder override.  Defaults to the one named by
            ``config.geocoder_provider``.
        correlation_id: Identifier for logs and error payloads; a random
            one is generated when empty.

    Returns:
        A ``PipelineOutcome``.  ``PipelineError`` is never raised; it is
        returned in the ``FAILED`` outcome with its ``correlation_id`` set.
    """
    correlation_id = correlation_id or uuid.uuid4().hex
    try:
        if not isinstance(request, EstimateRequest):
            request = EstimateRequest.parse(request)
        config = config or EstimatorConfig.from_env()

        center: GeoPoint | None = None
        address = request.address
        if request.coordinates is not None:
            address = address or request.coordinates.to_point().label()
        elif request.address is not None:
            located = _geocode(request.address, geocoder or geocoder_from_config(config))
            center = located.point
            address = located.formatted_address or request.address

        result = run_estimate_pipeline(
            request.viewport_for(center),
            provider=provider or provider_from_config(config),
            config=config,
            address=address,
            correlation_id=correlation_id,
        )
    except PipelineError as exc:
        if not exc.correlation_id:
            exc.correlation_id = correlation_id
        logger.warning(
            "pipeline failed | correlation_id=%s | stage=%s | code=%s | retryable=%s | error=%s",
            correlation_id,
            exc.stage,
            exc.code,
            exc.retryable,
            exc,
        )
        return PipelineOutcome.failure(exc, correlation_id)

    return PipelineOutcome.success(result, correlation_id)


def _geocode(address: str, geocoder: Geocoder) -> GeocodeResult:
    try:
        return geocoder.geocode(address)
    except GeocodeNotFoundError as exc:
        msg = "address not found"
        raise InvalidInputError(msg, stage="geocode") from exc


def _viewport_center(viewport: ViewportSpec) -> GeoPoint:
    if viewport.bounding_box is not None:
        return viewport.bounding_box.center
    if viewport.center is None:
        msg = "Viewport needs a center and zoom, or a bounding box"
        raise InvalidViewportError(msg)
    return viewport.center
