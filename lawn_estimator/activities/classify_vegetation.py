"""Classify vegetation activity — single-pass HSV colour threshold scan.

Every pixel is converted to HSV (hue in degrees, saturation and value in
percent) and counted as vegetation when **all** of these hold:

- ``hue_min <= hue <= hue_max``              (default 40-200°)
- ``saturation > saturation_min``            (default 5 %)
- ``value_min < value < value_max``          (default 5-90 %)
- ``g > green_dominance * r`` and ``g > green_dominance * b`` on the raw
  0-255 channels (default 0.9)

The thresholds separate turf and foliage from pavement, roofing, and
shadow.  They are tuned, not derived, and live in ``VegetationThresholds``
so deployments can adjust them through configuration.

The scan is vectorised with numpy and can be split into row bands run
on a thread pool; band results are concatenated in band order, so the
detected pixel list is always in row-major scan order and identical
input bytes always give identical output.
"""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from lawn_estimator.core.exceptions import ClassificationError
from lawn_estimator.models.estimate import ClassificationResult, NormalizedPixel

if TYPE_CHECKING:
    from collections.abc import Iterator

    from lawn_estimator.core.config import EstimatorConfig
    from lawn_estimator.models.imagery import RasterImage

logger = logging.getLogger("lawn_estimator.activities.classify_vegetation")

MIN_CHANNELS = 3


@dataclass(frozen=True, slots=True)
class VegetationThresholds:
    """Colour thresholds for the vegetation rule (see module docstring)."""

    hue_min: float = 40.0
    hue_max: float = 200.0
    saturation_min: float = 5.0
    value_min: float = 5.0
    value_max: float = 90.0
    green_dominance: float = 0.9

    @classmethod
    def from_config(cls, config: EstimatorConfig) -> VegetationThresholds:
        return cls(
            hue_min=config.hue_min,
            hue_max=config.hue_max,
            saturation_min=config.saturation_min,
            value_min=config.value_min,
            value_max=config.value_max,
            green_dominance=config.green_dominance,
        )


DEFAULT_THRESHOLDS = VegetationThresholds()


# ---------------------------------------------------------------------------
# Scalar reference implementation
# ---------------------------------------------------------------------------


def rgb_to_hsv(r: int, g: int, b: int) -> tuple[float, float, float]:
    """Convert 0-255 RGB to ``(hue°, saturation %, value %)``.

    The red-sector hue uses a truncated remainder (``math.fmod``); a
    negative hue is then moved into range by adding 360.
    """
    rp, gp, bp = r / 255, g / 255, b / 255
    c_max = max(rp, gp, bp)
    c_min = min(rp, gp, bp)
    delta = c_max - c_min

    hue = 0.0
    if delta != 0:
        if c_max == rp:
            hue = 60 * math.fmod((gp - bp) / delta, 6)
        elif c_max == gp:
            hue = 60 * ((bp - rp) / delta + 2)
        else:
            hue = 60 * ((rp - gp) / delta + 4)
    if hue < 0:
        hue += 360

    saturation = 0.0 if c_max == 0 else (delta / c_max) * 100
    value = c_max * 100
    return hue, saturation, value


def is_vegetation(
    r: int,
    g: int,
    b: int,
    thresholds: VegetationThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Apply the vegetation rule to a single pixel."""
    hue, saturation, value = rgb_to_hsv(r, g, b)
    return (
        thresholds.hue_min <= hue <= thresholds.hue_max
        and saturation > thresholds.saturation_min
        and thresholds.value_min < value < thresholds.value_max
        and g > r * thresholds.green_dominance
        and g > b * thresholds.green_dominance
    )


# ---------------------------------------------------------------------------
# Vectorised implementation
# ---------------------------------------------------------------------------


def rgb_to_hsv_array(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorised ``rgb_to_hsv`` over an ``(..., 3+)`` uint8 array.

    Returns float64 ``(hue, saturation, value)`` arrays shaped like
    ``rgb[..., 0]``.
    """
    channels = rgb[..., :MIN_CHANNELS].astype(np.float64) / 255
    rp, gp, bp = channels[..., 0], channels[..., 1], channels[..., 2]
    c_max = np.maximum(np.maximum(rp, gp), bp)
    c_min = np.minimum(np.minimum(rp, gp), bp)
    delta = c_max - c_min

    chromatic = delta != 0
    safe_delta = np.where(chromatic, delta, 1.0)
    red_max = chromatic & (c_max == rp)
    green_max = chromatic & ~red_max & (c_max == gp)
    blue_max = chromatic & ~red_max & ~green_max

    hue = np.zeros_like(c_max)
    hue = np.where(red_max, 60 * np.fmod((gp - bp) / safe_delta, 6), hue)
    hue = np.where(green_max, 60 * ((bp - rp) / safe_delta + 2), hue)
    hue = np.where(blue_max, 60 * ((rp - gp) / safe_delta + 4), hue)
    hue = np.where(hue < 0, hue + 360, hue)

    saturation = np.where(c_max == 0, 0.0, (delta / np.where(c_max == 0, 1.0, c_max)) * 100)
    value = c_max * 100
    return hue, saturation, value


def vegetation_mask(
    rgb: np.ndarray,
    thresholds: VegetationThresholds = DEFAULT_THRESHOLDS,
) -> np.ndarray:
    """Return a boolean mask (shaped like ``rgb[..., 0]``) of vegetation pixels."""
    hue, saturation, value = rgb_to_hsv_array(rgb)
    raw = rgb[..., :MIN_CHANNELS].astype(np.float64)
    r, g, b = raw[..., 0], raw[..., 1], raw[..., 2]
    return (
        (hue >= thresholds.hue_min)
        & (hue <= thresholds.hue_max)
        & (saturation > thresholds.saturation_min)
        & (value > thresholds.value_min)
        & (value < thresholds.value_max)
        & (g > r * thresholds.green_dominance)
        & (g > b * thresholds.green_dominance)
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify_vegetation(
    raster: RasterImage,
    thresholds: VegetationThresholds = DEFAULT_THRESHOLDS,
    *,
    workers: int = 1,
) -> ClassificationResult:
    """Scan every pixel of *raster* and collect the vegetation pixels.

    Args:
        raster: Decoded image with at least three channels (R, G, B first).
        thresholds: Colour thresholds for the vegetation rule.
        workers: Number of row bands scanned concurrently (>= 1).

    Returns:
        Classified and total pixel counts plus the normalised positions
        of classified pixels in row-major order.

    Raises:
        ClassificationError: If the raster has fewer than three channels
            or *workers* is not positive.
    """
    _check_scannable(raster)
    if workers < 1:
        msg = f"workers must be >= 1, got {workers}"
        raise ClassificationError(msg)

    logger.info(
        "classify_vegetation started | raster=%dx%d | channels=%d | workers=%d",
        raster.width_px,
        raster.height_px,
        raster.channel_count,
        workers,
    )
    start = time.monotonic()

    indices = _classified_indices(raster, thresholds, workers)
    pixels = _normalise(indices, raster.width_px, raster.height_px)
    result = ClassificationResult(
        classified_count=len(pixels),
        total_count=raster.pixel_count,
        pixels=pixels,
    )

    logger.info(
        "classify_vegetation completed | classified=%d | total=%d | duration=%.3fs",
        result.classified_count,
        result.total_count,
        time.monotonic() - start,
    )
    return result


def iter_vegetation_pixels(
    raster: RasterImage,
    thresholds: VegetationThresholds = DEFAULT_THRESHOLDS,
    *,
    rows_per_band: int = 64,
) -> Iterator[NormalizedPixel]:
    """Lazily yield classified pixel positions in row-major order.

    Only one band of ``rows_per_band`` rows is materialised at a time.
    Calling it again restarts the scan from the first row.

    Raises:
        ClassificationError: If the raster has fewer than three channels
            or *rows_per_band* is not positive.
    """
    _check_scannable(raster)
    if rows_per_band < 1:
        msg = f"rows_per_band must be >= 1, got {rows_per_band}"
        raise ClassificationError(msg)
    if raster.pixel_count == 0:
        return iter(())
    return _scan_bands(raster, thresholds, rows_per_band)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _scan_bands(
    raster: RasterImage,
    thresholds: VegetationThresholds,
    rows_per_band: int,
) -> Iterator[NormalizedPixel]:
    array = raster.as_array()
    width, height = raster.width_px, raster.height_px
    for top in range(0, height, rows_per_band):
        band = array[top : top + rows_per_band]
        flat = np.flatnonzero(vegetation_mask(band, thresholds)) + top * width
        yield from _normalise(flat, width, height)


def _check_scannable(raster: RasterImage) -> None:
    if raster.channel_count < MIN_CHANNELS:
        msg = (
            f"Raster needs at least {MIN_CHANNELS} channels (R, G, B), "
            f"got {raster.channel_count}"
        )
        raise ClassificationError(msg)


def _classified_indices(
    raster: RasterImage,
    thresholds: VegetationThresholds,
    workers: int,
) -> np.ndarray:
    """Return flat row-major indices of vegetation pixels."""
    if raster.pixel_count == 0:
        return np.empty(0, dtype=np.intp)
    array = raster.as_array()
    height, width = raster.height_px, raster.width_px

    bands = [b for b in np.array_split(np.arange(height), min(workers, height)) if b.size]

    def scan(rows: np.ndarray) -> np.ndarray:
        top = int(rows[0])
        band = array[top : int(rows[-1]) + 1]
        return np.flatnonzero(vegetation_mask(band, thresholds)) + top * width

    if len(bands) == 1:
        return scan(bands[0])

    with ThreadPoolExecutor(max_workers=len(bands)) as pool:
        parts = list(pool.map(scan, bands))
    for rows, part in zip(bands, parts, strict=True):
        logger.debug(
            "Band scanned | rows=%d-%d | classified=%d",
            int(rows[0]),
            int(rows[-1]),
            part.size,
        )
    return np.concatenate(parts)


def _normalise(indices: np.ndarray, width: int, height: int) -> tuple[NormalizedPixel, ...]:
    if indices.size == 0:
        return ()
    xs = (indices % width) / width
    ys = (indices // width) / height
    return tuple(NormalizedPixel(x, y) for x, y in zip(xs.tolist(), ys.tolist(), strict=True))
