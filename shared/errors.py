"""
Shared error handling for the Heritage Console.
"""

from enum import Enum
from typing import Dict, Any, List, Optional, Type
from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Failure classes distinguished by the request client."""
    NETWORK_UNREACHABLE = "network_unreachable"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    UNKNOWN = "unknown"


def error_text(value: Any) -> str:
    """Text of a raised value for logs; falls back to the type name when ``str`` fails."""
    try:
        return str(value)
    except Exception:
        return type(value).__name__


class NormalizedError(BaseModel):
    """Canonical error shape handed to every caller."""

    message: str
    status: int
    error: str = "Unknown Error"
    details: List[Any] = Field(default_factory=list)
    timestamp: str
    path: str = ""
    kind: ErrorKind = ErrorKind.UNKNOWN
    # Raw backend or transport text; logged, never shown to users
    server_message: Optional[str] = None


class ConsoleError(Exception):
    """Base exception for the console data-access layer."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain error payload."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


class ApiRequestError(ConsoleError):
    """A failed backend call, carrying its normalized error."""

    code = "API_REQUEST_ERROR"

    def __init__(self, normalized_error: NormalizedError, method: Optional[str] = None):
        self.normalized_error = normalized_error
        self.method = method
        super().__init__(
            type(self).code,
            normalized_error.message,
            {"status": normalized_error.status, "path": normalized_error.path}
        )

    @property
    def status(self) -> int:
        return self.normalized_error.status

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["error"] = self.normalized_error.model_dump(mode="json")
        return payload


class ValidationError(ApiRequestError):
    """Rejected input (400, 422)."""
    code = "VALIDATION_ERROR"


class AuthenticationError(ApiRequestError):
    """Expired or missing session (401)."""
    code = "AUTHENTICATION_ERROR"


class AuthorizationError(ApiRequestError):
    """Forbidden action (403)."""
    code = "AUTHORIZATION_ERROR"


class NotFoundError(ApiRequestError):
    """Missing resource (404)."""
    code = "NOT_FOUND"


class ConflictError(ApiRequestError):
    """Duplicate resource (409)."""
    code = "CONFLICT"


class RateLimitError(ApiRequestError):
    """Rate limiting errors (429)."""
    code = "RATE_LIMIT_ERROR"


class ServiceError(ApiRequestError):
    """Backend failures (5xx)."""
    code = "SERVICE_ERROR"


class ConnectivityError(ApiRequestError):
    """Unreachable backend or timed-out call."""
    code = "CONNECTIVITY_ERROR"


_STATUS_ERRORS: Dict[int, Type[ApiRequestError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitError,
}


def error_class_for(normalized_error: NormalizedError) -> Type[ApiRequestError]:
    """Pick the exception class matching a normalized error."""
    if normalized_error.kind in (ErrorKind.NETWORK_UNREACHABLE, ErrorKind.TIMEOUT):
        return ConnectivityError
    if normalized_error.kind == ErrorKind.HTTP_STATUS:
        if normalized_error.status in _STATUS_ERRORS:
            return _STATUS_ERRORS[normalized_error.status]
        if normalized_error.status >= 500:
            return ServiceError
    return ApiRequestError
