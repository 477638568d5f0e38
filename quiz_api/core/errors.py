"""Application-level exception types.

This module defines the errors raised by the HTTP handlers so that a single
set of exception handlers can render them. Every user-facing error carries a
stable ``code`` which is sent to clients as ``messageKey`` for localization.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Fields are optional; only ``extra`` is ever rendered into a response body.
    """

    address: str
    quality: str
    retry_after: int
    original_message: str
    extra: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code (the client ``messageKey``).
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)

    def response_extra(self) -> dict[str, Any]:
        """Extra top-level fields to merge into the response body."""

        if self.details and "extra" in self.details:
            return dict(self.details["extra"])
        return {}

    def response_headers(self) -> dict[str, str] | None:
        return None


class ValidationAppError(AppError):
    """Raised when request input fails validation (HTTP 400)."""


class RateLimitAppError(AppError):
    """Raised when a client exhausted its render budget (HTTP 429)."""

    status_code = 429

    @property
    def retry_after(self) -> int:
        return int((self.details or {}).get("retry_after", 0))

    def response_extra(self) -> dict[str, Any]:
        return {"retryAfter": self.retry_after}

    def response_headers(self) -> dict[str, str] | None:
        return {"Retry-After": str(self.retry_after)}


class RenderTimeoutAppError(AppError):
    """Raised when the render collaborator timed out (HTTP 408)."""

    status_code = 408


class RenderFailedAppError(AppError):
    """Raised when the render collaborator failed internally (HTTP 500).

    ``details["extra"]["details"]`` must already be sanitized.
    """

    status_code = 500
