"""ImageryProvider abstract base class.

Defines the contract that every static-imagery provider adapter must
implement.  The orchestrator interacts exclusively with this interface
and never knows which concrete provider is behind it.

Lifecycle:
    1. ``build_request_url(request)`` — pure, deterministic mapping from
       an ``ImageryRequest`` to the provider URL.
    2. ``fetch(request)`` — one HTTP GET; returns an ``ImageryPayload``.

There is no retry at this layer.  Credential presence is checked before
any network call so a misconfigured deployment never reaches the
provider.
"""

from __future__ import annotations

import abc
import logging
import time
from typing import TYPE_CHECKING

import httpx

from lawn_estimator.core.constants import REDACTED
from lawn_estimator.core.exceptions import (
    REASON_MISCONFIGURED,
    REASON_REJECTED,
    REASON_TIMEOUT,
    REASON_UNAVAILABLE,
    ContractError,
    UpstreamFetchError,
)
from lawn_estimator.models.imagery import ImageryPayload

if TYPE_CHECKING:
    from lawn_estimator.models.imagery import ImageryRequest, ProviderConfig

logger = logging.getLogger(__name__)

_AUTH_STATUS_CODES = frozenset({401, 403})


class ImageryProvider(abc.ABC):
    """Abstract base class for static-imagery provider adapters.

    Concrete implementations override ``build_request_url`` and name the
    query parameter that carries the credential.  The constructor
    receives a ``ProviderConfig`` with the credential already resolved.

    Example usage::

        provider = get_provider("bing", ProviderConfig(name="bing", api_key=key))
        payload = provider.fetch(request, timeout_s=10)
    """

    #: Query parameter that carries the credential (redacted in references).
    credential_param: str = "key"

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        """Return the provider name from configuration."""
        return self._config.name

    @property
    def config(self) -> ProviderConfig:
        """Return the provider configuration (read-only)."""
        return self._config

    @abc.abstractmethod
    def build_request_url(self, request: ImageryRequest) -> str:
        """Return the full provider URL (credential included) for *request*.

        Must be a pure function of *request* and the adapter config.
        """

    def fetch(self, request: ImageryRequest, *, timeout_s: float | None = None) -> ImageryPayload:
        """Download the image described by *request*.

        Args:
            request: The resolved imagery request.
            timeout_s: Overrides ``ProviderConfig.timeout_s`` for this call.

        Returns:
            An ``ImageryPayload`` with the response body and a
            credential-free image reference.

        Raises:
            ProviderAuthError: Credentials are missing or were rejected.
            ProviderUnavailableError: Timeout, transport failure, or a
                non-success response.
            ProviderContractError: The response declares a non-image
                content type (an error page or JSON body).
        """
        if not self._config.has_credentials:
            msg = "No API credential configured for imagery provider"
            raise ProviderAuthError(provider=self.name, message=msg)

        url = self.build_request_url(request)
        reference = redact_url(url, self.credential_param)
        timeout = timeout_s if timeout_s is not None else self._config.timeout_s

        logger.debug("Fetching imagery | provider=%s | url=%s", self.name, reference)
        start = time.monotonic()
        try:
            with httpx.Client(timeout=timeout, follow_redirects=True) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            msg = f"Imagery request timed out after {timeout:.1f}s"
            raise ProviderUnavailableError(
                provider=self.name, message=msg, reason=REASON_TIMEOUT
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise _status_error(self.name, exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            msg = f"Imagery request failed: {exc}"
            raise ProviderUnavailableError(provider=self.name, message=msg) from exc

        content_type = response.headers.get("content-type", "")
        if content_type and not content_type.lower().startswith("image/"):
            msg = f"Provider answered with {content_type!r} instead of an image"
            raise ProviderContractError(self.name, msg)

        payload = ImageryPayload(
            content=response.content,
            content_type=content_type,
            image_reference=reference,
        )
        logger.info(
            "Imagery fetched | provider=%s | bytes=%d | content_type=%s | duration=%.2fs",
            self.name,
            payload.size_bytes,
            payload.content_type,
            time.monotonic() - start,
        )
        return payload


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------


def redact_url(url: str, param: str) -> str:
    """Return *url* with the value of query parameter *param* masked."""
    parsed = httpx.URL(url)
    if param not in parsed.params:
        return url
    return str(parsed.copy_set_param(param, REDACTED))


# ---------------------------------------------------------------------------
# Provider exceptions
# ---------------------------------------------------------------------------


class ProviderError(UpstreamFetchError):
    """Base exception for imagery provider adapter errors.

    Attributes:
        provider: Name of the provider that raised the error.
        message: Human-readable error description.
        reason: Why the upstream call failed (see ``UpstreamFetchError``).
    """

    default_code = "PROVIDER_ERROR"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        reason: str = REASON_REJECTED,
        stage: str = "",
    ) -> None:
        self.provider = provider
        super().__init__(message, reason=reason, stage=stage, code=self.default_code)

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"


class ProviderAuthError(ProviderError):
    """Credentials are missing or the provider rejected them."""

    default_code = "PROVIDER_AUTH_FAILED"

    def __init__(self, provider: str, message: str, *, stage: str = "") -> None:
        super().__init__(provider, message, reason=REASON_MISCONFIGURED, stage=stage)


class ProviderUnavailableError(ProviderError):
    """The provider could not be reached or answered with a failure."""

    default_code = "PROVIDER_UNAVAILABLE"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        reason: str = REASON_UNAVAILABLE,
        stage: str = "",
    ) -> None:
        super().__init__(provider, message, reason=reason, stage=stage)


class ProviderContractError(ProviderError, ContractError):
    """The provider answered 2xx with a body that is not an image."""

    default_code = "PROVIDER_CONTRACT_VIOLATION"


def _status_error(provider: str, status_code: int) -> ProviderError:
    """Map a non-success HTTP status to the matching provider error."""
    if status_code in _AUTH_STATUS_CODES:
        msg = f"Provider rejected the configured credential (HTTP {status_code})"
        return ProviderAuthError(provider, msg)
    if status_code >= 500 or status_code == 429:
        msg = f"Provider unavailable (HTTP {status_code})"
        return ProviderUnavailableError(provider, msg)
    msg = f"Provider rejected the request (HTTP {status_code})"
    return ProviderError(provider, msg, reason=REASON_REJECTED)
