"""Fetch imagery activity — one provider call per pipeline run.

Builds the provider URL from the resolved ``ImageryRequest`` and issues
a single GET.  No retry happens here; a caller that wants retries or a
tighter deadline wraps this call (``timeout_s`` is passed straight
through to the HTTP client).
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from lawn_estimator.providers.base import ProviderError

if TYPE_CHECKING:
    from lawn_estimator.models.imagery import ImageryPayload, ImageryRequest
    from lawn_estimator.providers.base import ImageryProvider

logger = logging.getLogger("lawn_estimator.activities.fetch_imagery")


def fetch_imagery(
    request: ImageryRequest,
    provider: ImageryProvider,
    *,
    timeout_s: float | None = None,
) -> ImageryPayload:
    """Download the image for *request* from *provider*.

    Args:
        request: Resolved imagery request.
        provider: The configured imagery provider adapter.
        timeout_s: Optional per-call timeout override in seconds.

    Returns:
        The compressed image payload.

    Raises:
        UpstreamFetchError: Any provider failure; ``reason`` tells a
            misconfiguration apart from an outage.
    """
    logger.info(
        "fetch_imagery started | provider=%s | mode=%s | size=%dx%d",
        provider.name,
        request.mode.value,
        request.width_px,
        request.height_px,
    )
    start = time.monotonic()

    try:
        payload = provider.fetch(request, timeout_s=timeout_s)
    except ProviderError as exc:
        logger.warning(
            "fetch_imagery failed | provider=%s | reason=%s | retryable=%s | error=%s",
            provider.name,
            exc.reason,
            exc.retryable,
            exc,
        )
        raise

    logger.info(
        "fetch_imagery completed | provider=%s | bytes=%d | duration=%.2fs",
        provider.name,
        payload.size_bytes,
        time.monotonic() - start,
    )
    return payload
