"""Estimator configuration loaded from environment variables.

All configuration values have sensible defaults.  Provider credentials
are read here and nowhere else: ``from_env()`` captures them and the
orchestrator injects them into the imagery provider and geocoder
through ``ProviderConfig``.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any numeric
    value cannot be parsed or is out of its valid range.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

from lawn_estimator.core.constants import DEFAULT_HTTP_TIMEOUT_S
from lawn_estimator.core.exceptions import PipelineError


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class EstimatorConfig:
    """Immutable estimator configuration.

    Attributes:
        imagery_provider: Active imagery provider (``bing`` or ``mapbox``).
        geocoder_provider: Active geocoder (``bing`` or ``mapbox``).
        bing_maps_api_key: Bing Maps key (empty when not configured).
        mapbox_access_token: Mapbox token (empty when not configured).
        http_timeout_s: Timeout applied to each provider HTTP call.
        working_max_width_px: Decoder resize bound (0 disables resizing).
        working_max_height_px: Decoder resize bound (0 disables resizing).
        classifier_workers: Row-band workers for the vegetation scan.
        hue_min: Lowest vegetation hue in degrees (inclusive).
        hue_max: Highest vegetation hue in degrees (inclusive).
        saturation_min: Saturation percentage a pixel must exceed.
        value_min: Value percentage a pixel must exceed.
        value_max: Value percentage a pixel must stay below.
        green_dominance: Green must exceed this fraction of red and blue.
    """

    imagery_provider: str = "bing"
    geocoder_provider: str = "bing"
    bing_maps_api_key: str = ""
    mapbox_access_token: str = ""
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    working_max_width_px: int = 0
    working_max_height_px: int = 0
    classifier_workers: int = 1
    hue_min: float = 40.0
    hue_max: float = 200.0
    saturation_min: float = 5.0
    value_min: float = 5.0
    value_max: float = 90.0
    green_dominance: float = 0.9

    @classmethod
    def from_env(cls) -> EstimatorConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a numeric value cannot be parsed
                (e.g. ``HTTP_TIMEOUT_S=abc``) or is out of range, or a
                required string value is empty.
        """
        config = cls(
            imagery_provider=os.getenv("IMAGERY_PROVIDER", "bing"),
            geocoder_provider=os.getenv("GEOCODER_PROVIDER", "bing"),
            bing_maps_api_key=os.getenv("BING_MAPS_API_KEY", ""),
            mapbox_access_token=os.getenv("MAPBOX_ACCESS_TOKEN", ""),
            http_timeout_s=_env_float("HTTP_TIMEOUT_S", DEFAULT_HTTP_TIMEOUT_S),
            working_max_width_px=_env_int("WORKING_MAX_WIDTH_PX", 0),
            working_max_height_px=_env_int("WORKING_MAX_HEIGHT_PX", 0),
            classifier_workers=_env_int("CLASSIFIER_WORKERS", 1),
            hue_min=_env_float("VEGETATION_HUE_MIN", 40.0),
            hue_max=_env_float("VEGETATION_HUE_MAX", 200.0),
            saturation_min=_env_float("VEGETATION_SATURATION_MIN", 5.0),
            value_min=_env_float("VEGETATION_VALUE_MIN", 5.0),
            value_max=_env_float("VEGETATION_VALUE_MAX", 90.0),
            green_dominance=_env_float("VEGETATION_GREEN_DOMINANCE", 0.9),
        )
        _validate(config)
        return config

    def credential_for(self, provider_name: str) -> str:
        """Return the configured credential for *provider_name* (may be empty)."""
        if provider_name == "bing":
            return self.bing_maps_api_key
        if provider_name == "mapbox":
            return self.mapbox_access_token
        return ""


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigValidationError(key, raw, "must be a number") from None
    if not math.isfinite(value):
        raise ConfigValidationError(key, raw, "must be a finite number")
    return value


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigValidationError(key, raw, "must be an integer") from None


def _validate(config: EstimatorConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.imagery_provider:
        raise ConfigValidationError(
            "IMAGERY_PROVIDER", config.imagery_provider, "must not be empty"
        )

    if not config.geocoder_provider:
        raise ConfigValidationError(
            "GEOCODER_PROVIDER", config.geocoder_provider, "must not be empty"
        )

    if config.http_timeout_s <= 0:
        raise ConfigValidationError(
            "HTTP_TIMEOUT_S", config.http_timeout_s, "must be > 0 (seconds)"
        )

    if config.working_max_width_px < 0:
        raise ConfigValidationError(
            "WORKING_MAX_WIDTH_PX",
            config.working_max_width_px,
            "must be >= 0 (0 disables resizing)",
        )

    if config.working_max_height_px < 0:
        raise ConfigValidationError(
            "WORKING_MAX_HEIGHT_PX",
            config.working_max_height_px,
            "must be >= 0 (0 disables resizing)",
        )

    if config.classifier_workers < 1:
        raise ConfigValidationError(
            "CLASSIFIER_WORKERS", config.classifier_workers, "must be >= 1"
        )

    for key, value in (
        ("VEGETATION_HUE_MIN", config.hue_min),
        ("VEGETATION_HUE_MAX", config.hue_max),
    ):
        if not 0.0 <= value <= 360.0:
            raise ConfigValidationError(key, value, "must be between 0 and 360 (degrees)")

    if config.hue_min > config.hue_max:
        raise ConfigValidationError(
            "VEGETATION_HUE_MIN",
            config.hue_min,
            f"must be <= VEGETATION_HUE_MAX ({config.hue_max})",
        )

    for key, value in (
        ("VEGETATION_SATURATION_MIN", config.saturation_min),
        ("VEGETATION_VALUE_MIN", config.value_min),
        ("VEGETATION_VALUE_MAX", config.value_max),
    ):
        if not 0.0 <= value <= 100.0:
            raise ConfigValidationError(key, value, "must be between 0 and 100 (percentage)")

    if config.value_min >= config.value_max:
        raise ConfigValidationError(
            "VEGETATION_VALUE_MIN",
            config.value_min,
            f"must be < VEGETATION_VALUE_MAX ({config.value_max})",
        )

    if config.green_dominance <= 0:
        raise ConfigValidationError(
            "VEGETATION_GREEN_DOMINANCE", config.green_dominance, "must be > 0"
        )
