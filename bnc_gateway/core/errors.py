"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    http_status: int
    upstream_status: int
    upstream_code: int
    upstream_message: str
    retry_after: float
    endpoint: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class UpstreamAppError(AppError):
    """Raised when the remote API answers with something we cannot use."""


class UnexpectedStatusError(UpstreamAppError):
    """Non-200 status that is neither a rate limit nor an edge rejection."""

    def __init__(self, status_code: int, body: bytes) -> None:
        self.status_code = status_code
        self.body = body
        text = body.decode("utf-8", errors="replace")
        super().__init__(
            code="upstream_unexpected_status",
            message=f"Status code {status_code} received. Raw body: {text}",
            details={"upstream_status": status_code},
        )


class BinanceAPIError(UpstreamAppError):
    """Structured {code, msg} error envelope returned by the API."""

    def __init__(self, api_code: int, api_message: str) -> None:
        self.api_code = api_code
        self.api_message = api_message
        super().__init__(
            code="upstream_api_error",
            message=(
                "An error occurred while requesting the API. "
                f"Error code: {api_code}, message: {api_message}"
            ),
            details={"upstream_code": api_code, "upstream_message": api_message},
        )


class ResponseParseError(UpstreamAppError):
    """Body matched neither the expected shape nor the error envelope."""


class UpstreamBackoffError(AppError):
    """Raised at the HTTP surface when a call ended in a retry warning."""

    def __init__(self, retry_after_seconds: float, reason: str) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            code="upstream_backoff",
            message=f"Market data temporarily unavailable: {reason}",
            details={"retry_after": retry_after_seconds},
        )


class TransportError(Exception):
    """Raised by transports when the request never produced a response."""
