"""Shared pipeline constants — single source of truth.

Unit conversions, Web Mercator scale parameters, and request defaults
used by the scale resolver, the area estimator, and the request
contract.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Web Mercator scale
# ---------------------------------------------------------------------------

BASE_METERS_PER_PIXEL_AT_ZOOM_18: float = 0.596
"""Ground size of one 256 px tile pixel at zoom 18 on the equator."""

REFERENCE_ZOOM: int = 18

MIN_ZOOM: int = 1
MAX_ZOOM: int = 21

POLE_LATITUDE: float = 90.0
"""``cos(latitude)`` vanishes here, so point-zoom scale is undefined."""

# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------

SQ_FEET_PER_SQ_METER: float = 10.764

SQ_METERS_PER_SQ_FOOT: float = 0.092903
"""Kept as its own constant rather than ``1 / SQ_FEET_PER_SQ_METER``."""

# ---------------------------------------------------------------------------
# Request defaults
# ---------------------------------------------------------------------------

DEFAULT_ZOOM: int = 18
DEFAULT_MAP_WIDTH_PX: int = 600
DEFAULT_MAP_HEIGHT_PX: int = 400

DEFAULT_HTTP_TIMEOUT_S: float = 30.0

IMAGE_FORMAT_PNG: str = "png"

REDACTED: str = "***"
