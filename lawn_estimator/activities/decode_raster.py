"""Decode raster activity — compressed image bytes to an RGB pixel buffer.

Pillow decodes PNG/JPEG (and anything else it recognises).  Palette,
greyscale, and alpha images are converted to 3-channel RGB; alpha is
dropped.  When a working resolution is configured, the image is shrunk
(never enlarged) to fit inside it with its aspect ratio preserved, and
the returned ``RasterImage`` records the pre-resize size so the
orchestrator can rescale the ``ScaleModel`` to the buffer actually
classified.
"""

from __future__ import annotations

import io
import logging
import time

import numpy as np
from PIL import Image, UnidentifiedImageError

from lawn_estimator.core.exceptions import ImageDecodeError
from lawn_estimator.models.imagery import RasterImage

logger = logging.getLogger("lawn_estimator.activities.decode_raster")

RGB_CHANNELS = 3


def decode_raster(
    data: bytes,
    *,
    max_width_px: int = 0,
    max_height_px: int = 0,
) -> RasterImage:
    """Decode *data* into an RGB ``RasterImage``.

    Args:
        data: Compressed image bytes.
        max_width_px: Working-resolution width bound (0 = unbounded).
        max_height_px: Working-resolution height bound (0 = unbounded).

    Raises:
        ImageDecodeError: If *data* is empty, not an image, truncated,
            or decodes to zero pixels.
    """
    if not data:
        msg = "Image payload is empty"
        raise ImageDecodeError(msg)

    start = time.monotonic()
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            source_size = image.size
            rgb = image.convert("RGB")
    except (
        UnidentifiedImageError,
        OSError,
        SyntaxError,
        ValueError,
        Image.DecompressionBombError,
    ) as exc:
        msg = f"Could not decode image ({len(data)} bytes): {exc}"
        raise ImageDecodeError(msg) from exc

    width, height = source_size
    if width == 0 or height == 0:
        msg = f"Decoded image has no pixels ({width}x{height})"
        raise ImageDecodeError(msg)

    target = working_size(source_size, max_width_px, max_height_px)
    if target != source_size:
        rgb = rgb.resize(target, Image.Resampling.BILINEAR)
        logger.debug("Raster resized | from=%dx%d | to=%dx%d", width, height, *target)

    raster = RasterImage.from_array(np.asarray(rgb, dtype=np.uint8), source_size=source_size)
    logger.info(
        "decode_raster completed | bytes=%d | source=%dx%d | raster=%dx%d"
        " | channels=%d | elapsed=%.3fs",
        len(data),
        width,
        height,
        raster.width_px,
        raster.height_px,
        raster.channel_count,
        time.monotonic() - start,
    )
    return raster


def working_size(
    size: tuple[int, int],
    max_width_px: int = 0,
    max_height_px: int = 0,
) -> tuple[int, int]:
    """Return *size* shrunk to fit ``max_width_px`` x ``max_height_px``.

    A bound of 0 leaves that axis unconstrained.  The aspect ratio is
    preserved and neither axis drops below one pixel.
    """
    width, height = size
    ratios = []
    if max_width_px and width > max_width_px:
        ratios.append(max_width_px / width)
    if max_height_px and height > max_height_px:
        ratios.append(max_height_px / height)
    if not ratios:
        return size
    ratio = min(ratios)
    return max(1, round(width * ratio)), max(1, round(height * ratio))
