"""Geocoder abstract base class.

Geocoding is an external collaborator: it turns a free-text address into
a ``GeoPoint`` and a formatted address.  Adapters share one JSON GET
helper and differ only in URL construction and response parsing.

Failure modes:
    - ``GeocodeNotFoundError``: the service answered but found nothing.
    - ``GeocodeServiceError``: the service could not be used (missing
      credential, timeout, non-success response, unreadable body).
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from lawn_estimator.core.exceptions import (
    REASON_MISCONFIGURED,
    REASON_REJECTED,
    REASON_TIMEOUT,
    REASON_UNAVAILABLE,
    InvalidInputError,
    PermanentError,
    UpstreamFetchError,
)

if TYPE_CHECKING:
    from lawn_estimator.models.geo import GeoPoint
    from lawn_estimator.models.imagery import ProviderConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    """A geocoded address."""

    point: GeoPoint
    formatted_address: str


class GeocodeNotFoundError(PermanentError):
    """The geocoder returned no match for the address."""

    default_stage = "geocode"
    default_code = "GEOCODE_NOT_FOUND"


class GeocodeServiceError(UpstreamFetchError):
    """The geocoding service failed or is not configured."""

    default_stage = "geocode"
    default_code = "GEOCODE_SERVICE_FAILED"


class Geocoder(abc.ABC):
    """Abstract base class for geocoder adapters."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @abc.abstractmethod
    def build_query(self, address: str) -> tuple[str, dict[str, str]]:
        """Return ``(url, query_params)`` for *address*, credential included."""

    @abc.abstractmethod
    def parse_response(self, data: Any, address: str) -> GeocodeResult:
        """Extract the best match from the decoded JSON body.

        Raises:
            GeocodeNotFoundError: If the body holds no usable match.
        """

    def geocode(self, address: str) -> GeocodeResult:
        """Resolve *address* to a point and formatted address.

        Raises:
            InvalidInputError: If *address* is blank.
            GeocodeNotFoundError: If nothing matched.
            GeocodeServiceError: On credential, transport, or HTTP failure.
        """
        address = address.strip() if address else ""
        if not address:
            msg = "Address is required"
            raise InvalidInputError(msg, stage="geocode")

        if not self._config.has_credentials:
            msg = f"[{self.name}] No API credential configured for geocoder"
            raise GeocodeServiceError(msg, reason=REASON_MISCONFIGURED)

        url, params = self.build_query(address)
        try:
            with httpx.Client(timeout=self._config.timeout_s, follow_redirects=True) as client:
                response = client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            msg = f"[{self.name}] Geocoding request timed out"
            raise GeocodeServiceError(msg, reason=REASON_TIMEOUT) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status in (401, 403):
                reason = REASON_MISCONFIGURED
            elif status >= 500 or status == 429:
                reason = REASON_UNAVAILABLE
            else:
                reason = REASON_REJECTED
            msg = f"[{self.name}] Geocoding request failed (HTTP {status})"
            raise GeocodeServiceError(msg, reason=reason) from exc
        except httpx.HTTPError as exc:
            msg = f"[{self.name}] Geocoding request failed: {exc}"
            raise GeocodeServiceError(msg) from exc
        except ValueError as exc:
            msg = f"[{self.name}] Geocoding response was not valid JSON"
            raise GeocodeServiceError(msg, reason=REASON_REJECTED) from exc

        result = self.parse_response(data, address)
        logger.info(
            "Address geocoded | geocoder=%s | lat=%.6f | lng=%.6f | formatted=%s",
            self.name,
            result.point.latitude,
            result.point.longitude,
            result.formatted_address,
        )
        return result


def not_found(geocoder: str, address: str) -> GeocodeNotFoundError:
    return GeocodeNotFoundError(f"[{geocoder}] No results found for address {address!r}")
