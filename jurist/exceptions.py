"""Typed errors raised by the core and mapped to HTTP responses at the edge."""

from __future__ import annotations

from typing import Any, Optional


class MarketplaceError(Exception):
    """Base class for all domain errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional error context (e.g. {"field": "reason"})
        status_code: HTTP status the transport layer should answer with
    """

    status_code: int = 400
    code: str = "ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationError(MarketplaceError):
    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, **details: Any):
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFound(MarketplaceError):
    status_code = 404
    code = "NOT_FOUND"


class Conflict(MarketplaceError):
    status_code = 409
    code = "CONFLICT"


class Forbidden(MarketplaceError):
    status_code = 403
    code = "FORBIDDEN"


class Unauthorized(MarketplaceError):
    status_code = 401
    code = "UNAUTHORIZED"


class RateLimited(MarketplaceError):
    status_code = 429
    code = "RATE_LIMITED"


class DependencyFailure(MarketplaceError):
    status_code = 502
    code = "DEPENDENCY_FAILURE"
