"""Application-level exception types and envelope status codes.

Domain errors carry the envelope ``code`` they map to, so the exception
handlers can render a consistent ``ApiResponse`` without knowing where the
error came from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


# Envelope status codes
CODE_OK = "00000"
CODE_INTERNAL_ERROR = "10000"
CODE_MISSING_DOMAIN = "11001"
CODE_RESOLUTION_FAILED = "11002"


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Details are logged, never rendered to clients.
    """

    domain: str
    error_type: str
    strategy: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Envelope status code (see the CODE_* constants).
        message: Human-readable message, rendered as the envelope ``msg``.
        details: Optional structured details for logs.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input is missing or malformed."""


class ResolutionAppError(AppError):
    """Raised when the resolver reports a failure for a lookup."""
