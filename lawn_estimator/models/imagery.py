"""Typed models for the imagery side of the pipeline.

Defines the data structures exchanged between the scale resolver,
provider adapters, the raster decoder, and the area estimator:

- ``ImageryRequest``: Resolved, provider-agnostic imagery descriptor
- ``ScaleModel``: Ground metres per pixel for one request
- ``ImageryPayload``: Compressed image bytes returned by a provider
- ``RasterImage``: Decoded, channel-interleaved pixel buffer
- ``ProviderConfig``: Configuration for a specific imagery provider or geocoder

Design notes:
- All models are frozen dataclasses for immutability.
- Explicit units on every numeric field (``_px``, ``_m``, ``_s``).
- ``ImageryRequest`` and ``ScaleModel`` both record the ``ViewportMode``
  they were built from so a point-zoom scale can never be paired with a
  bounding-box request.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from lawn_estimator.core.constants import IMAGE_FORMAT_PNG
from lawn_estimator.models.geo import BoundingBox, GeoPoint, ViewportMode
from lawn_estimator.models.validation import (
    ModelValidationError,
    check_finite,
    check_min,
    check_non_empty,
)

# ---------------------------------------------------------------------------
# Resolved viewport
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImageryRequest:
    """Provider-agnostic description of the image to fetch.

    Attributes:
        mode: Which of the two viewport modes this request uses.
        width_px: Image width in pixels.
        height_px: Image height in pixels.
        center: Centre point (``POINT_ZOOM`` only).
        zoom: Integer zoom level, already clamped (``POINT_ZOOM`` only).
        bounding_box: Box to render (``BOUNDING_BOX`` only).
        image_format: Requested encoding (``"png"``).
    """

    mode: ViewportMode
    width_px: int
    height_px: int
    center: GeoPoint | None = None
    zoom: int | None = None
    bounding_box: BoundingBox | None = None
    image_format: str = IMAGE_FORMAT_PNG

    def __post_init__(self) -> None:
        check_min("ImageryRequest", "width_px", self.width_px, 1)
        check_min("ImageryRequest", "height_px", self.height_px, 1)
        if self.mode is ViewportMode.POINT_ZOOM:
            if self.center is None or self.zoom is None:
                raise ModelValidationError(
                    "ImageryRequest", "center", self.center, "point-zoom mode needs center and zoom"
                )
            if self.bounding_box is not None:
                raise ModelValidationError(
                    "ImageryRequest",
                    "bounding_box",
                    self.bounding_box,
                    "must be None in point-zoom mode",
                )
        elif self.bounding_box is None or self.center is not None or self.zoom is not None:
            raise ModelValidationError(
                "ImageryRequest",
                "bounding_box",
                self.bounding_box,
                "bounding-box mode needs a bounding_box and no center/zoom",
            )


@dataclass(frozen=True, slots=True)
class ScaleModel:
    """Ground size of one pixel of the requested image.

    Attributes:
        meters_per_pixel: Ground metres spanned by one pixel edge (> 0).
        latitude_corrected: Whether the Mercator secant correction was applied.
        mode: The viewport mode the scale was derived from.
    """

    meters_per_pixel: float
    latitude_corrected: bool
    mode: ViewportMode

    def __post_init__(self) -> None:
        check_finite("ScaleModel", "meters_per_pixel", self.meters_per_pixel)
        if self.meters_per_pixel <= 0:
            raise ModelValidationError(
                "ScaleModel", "meters_per_pixel", self.meters_per_pixel, "must be > 0"
            )

    def rescaled(
        self,
        from_size: tuple[int, int],
        to_size: tuple[int, int],
    ) -> ScaleModel:
        """Return the scale for the same ground area sampled at *to_size*.

        The ground area ``w * h * mpp**2`` is preserved, so a raster that
        was resized (or delivered at a different size than requested) is
        still measured against the area the request covered.

        Args:
            from_size: ``(width_px, height_px)`` the scale was derived for.
            to_size: ``(width_px, height_px)`` of the raster actually scanned.
        """
        if from_size == to_size:
            return self
        from_w, from_h = from_size
        to_w, to_h = to_size
        factor = math.sqrt((from_w * from_h) / (to_w * to_h))
        return ScaleModel(
            meters_per_pixel=self.meters_per_pixel * factor,
            latitude_corrected=self.latitude_corrected,
            mode=self.mode,
        )


# ---------------------------------------------------------------------------
# Fetched and decoded imagery
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImageryPayload:
    """Compressed image bytes returned by an imagery provider.

    Attributes:
        content: Raw response body.
        content_type: MIME type reported by the provider.
        image_reference: Request URL with credentials redacted.
    """

    content: bytes
    content_type: str = ""
    image_reference: str = ""

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class RasterImage:
    """A decoded, row-major, channel-interleaved 8-bit pixel buffer.

    ``pixels`` is an immutable ``bytes`` object of length
    ``width_px * height_px * channel_count``.  ``source_width_px`` /
    ``source_height_px`` record the size the image had before any
    working-resolution resize (equal to the buffer size when none was
    applied).

    Attributes:
        width_px: Buffer width in pixels.
        height_px: Buffer height in pixels.
        channel_count: Interleaved channels per pixel (3 = RGB, 4 = RGBA).
        pixels: The pixel bytes.
        source_width_px: Decoded width before resizing (0 = same as buffer).
        source_height_px: Decoded height before resizing (0 = same as buffer).
    """

    width_px: int
    height_px: int
    channel_count: int
    pixels: bytes = field(repr=False)
    source_width_px: int = 0
    source_height_px: int = 0

    def __post_init__(self) -> None:
        check_min("RasterImage", "width_px", self.width_px, 0)
        check_min("RasterImage", "height_px", self.height_px, 0)
        check_min("RasterImage", "channel_count", self.channel_count, 1)
        expected = self.width_px * self.height_px * self.channel_count
        if len(self.pixels) != expected:
            raise ModelValidationError(
                "RasterImage",
                "pixels",
                f"<{len(self.pixels)} bytes>",
                f"must hold exactly {expected} bytes",
            )
        if not self.source_width_px:
            object.__setattr__(self, "source_width_px", self.width_px)
        if not self.source_height_px:
            object.__setattr__(self, "source_height_px", self.height_px)

    @property
    def pixel_count(self) -> int:
        return self.width_px * self.height_px

    @property
    def size(self) -> tuple[int, int]:
        return (self.width_px, self.height_px)

    def as_array(self) -> np.ndarray:
        """Return a read-only ``(height, width, channels)`` uint8 view."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(
            self.height_px, self.width_px, self.channel_count
        )

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        *,
        source_size: tuple[int, int] | None = None,
    ) -> RasterImage:
        """Build a raster from an ``(height, width, channels)`` uint8 array."""
        if array.ndim != 3:
            raise ModelValidationError(
                "RasterImage", "pixels", f"<ndim={array.ndim}>", "array must be (H, W, C)"
            )
        height, width, channels = array.shape
        source_w, source_h = source_size or (width, height)
        return cls(
            width_px=int(width),
            height_px=int(height),
            channel_count=int(channels),
            pixels=np.ascontiguousarray(array, dtype=np.uint8).tobytes(),
            source_width_px=int(source_w),
            source_height_px=int(source_h),
        )


# ---------------------------------------------------------------------------
# Provider configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Configuration for a specific imagery provider or geocoder.

    Attributes:
        name: Provider identifier (must match the registry key).
        api_key: Credential sent with each request (empty when unset).
        api_base_url: Base URL override for the provider's API.
        timeout_s: Default HTTP timeout for each call.
    """

    name: str
    api_key: str = field(default="", repr=False)
    api_base_url: str = ""
    timeout_s: float = 30.0

    def __post_init__(self) -> None:
        check_non_empty("ProviderConfig", "name", self.name)
        if self.timeout_s <= 0:
            raise ModelValidationError("ProviderConfig", "timeout_s", self.timeout_s, "must be > 0")

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())
