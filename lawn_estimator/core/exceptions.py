"""Unified pipeline exception taxonomy.

Every domain exception inherits from ``PipelineError`` and carries
structured context fields so the caller can tell the failure kinds
apart and report them differently.

Taxonomy categories
-------------------
- ``ValidationError``   — input/contract violations, never retryable.
- ``PermanentError``    — unrecoverable domain failures, not retryable.
- ``ContractError``     — a collaborator answered with the wrong kind of
  payload, never retryable.

Any other error is categorised ``transient`` when retryable and
``permanent`` otherwise.

Pipeline error kinds
--------------------
- ``InvalidInputError``    — missing/malformed address or coordinates.
- ``InvalidViewportError`` — degenerate bounding box, non-positive dimensions.
- ``UpstreamFetchError``   — imagery/geocoding provider failure or missing
  credentials (``reason`` keeps the two apart).
- ``ImageDecodeError``     — malformed image bytes.
- ``ClassificationError``  — classifier fed something it cannot scan.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and transport.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"resolve_scale"``, ``"fetch_imagery"``).
        code: Machine-readable error code (e.g. ``"INVALID_VIEWPORT"``).
        retryable: Whether the caller may retry the operation.
        correlation_id: Request correlation identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(PipelineError):
    """Input or domain-model validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(PipelineError):
    """Unrecoverable domain failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(PipelineError):
    """A collaborator answered with the wrong kind of payload. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Pipeline error kinds
# ---------------------------------------------------------------------------


class InvalidInputError(ValidationError):
    """Missing or malformed address, coordinates, or request payload."""

    default_stage = "input"
    default_code = "INVALID_INPUT"


class InvalidViewportError(InvalidInputError):
    """Viewport cannot be resolved to a positive, finite ground scale."""

    default_stage = "resolve_scale"
    default_code = "INVALID_VIEWPORT"


#: ``UpstreamFetchError.reason`` values.
REASON_UNAVAILABLE = "unavailable"
REASON_TIMEOUT = "timeout"
REASON_MISCONFIGURED = "misconfigured"
REASON_REJECTED = "rejected"

_RETRYABLE_REASONS = frozenset({REASON_UNAVAILABLE, REASON_TIMEOUT})


class UpstreamFetchError(PipelineError):
    """An external provider call failed or could not be attempted.

    ``reason`` separates a service that is down (``"unavailable"``,
    ``"timeout"``) from a deployment that is misconfigured
    (``"misconfigured"``: missing or rejected credentials) and from a
    request the provider refused (``"rejected"``).
    """

    default_stage = "fetch_imagery"
    default_code = "UPSTREAM_FETCH_FAILED"

    def __init__(
        self,
        message: str = "",
        *,
        reason: str = REASON_UNAVAILABLE,
        **kwargs: object,
    ) -> None:
        self.reason = reason
        kwargs.setdefault("retryable", reason in _RETRYABLE_REASONS)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]

    @property
    def is_configuration_error(self) -> bool:
        """True when the failure is a deployment problem, not an outage."""
        return self.reason == REASON_MISCONFIGURED

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["reason"] = self.reason
        return payload


class ImageDecodeError(PermanentError):
    """Image bytes are empty, truncated, or not a supported format."""

    default_stage = "decode_raster"
    default_code = "IMAGE_DECODE_FAILED"


class ClassificationError(PermanentError):
    """The classifier could not scan a raster it was given."""

    default_stage = "classify_vegetation"
    default_code = "CLASSIFICATION_FAILED"
