"""
Failure classification and user-facing error messages.
"""

from typing import Any, Dict, Optional, Union

import httpx

from shared.errors import ApiRequestError, ErrorKind


# Only these texts are ever shown to users; raw backend text is logged.
ERROR_MESSAGES: Dict[Union[int, str], str] = {
    400: "Invalid request. Please check your input and try again.",
    401: "Your session has expired. Please log in again.",
    403: "Access denied. You don't have permission for this action.",
    404: "The requested resource was not found.",
    409: "This resource already exists. Please use a different value.",
    422: "Please check your input and try again.",
    429: "Too many requests. Please wait a moment before trying again.",
    500: "Server is temporarily unavailable. Please try again in a few minutes.",
    502: "Service is temporarily unavailable. Please try again later.",
    503: "Service is temporarily unavailable. Please try again later.",
    504: "Request timed out. Please check your connection and try again.",
    "NETWORK_ERROR": "Unable to connect to the server. Please check your internet connection and try again.",
    "TIMEOUT_ERROR": "Request timed out. Please try again.",
    "SERVER_DOWN": "Server is currently unavailable. Please try again later.",
    "LOGIN_FAILED": "Invalid username or password. Please check your credentials and try again.",
    "AUTH_FAILED": "Authentication failed. Please check your input and try again.",
    "UNKNOWN_ERROR": "Something went wrong. Please try again or contact support if the problem persists.",
}

LOGIN_PATH = "/api/auth/login"
AUTH_PREFIX = "/api/auth/"


def request_of(error: Any) -> Optional[httpx.Request]:
    """The request attached to an httpx error, if one was set."""
    if not isinstance(error, (httpx.HTTPStatusError, httpx.RequestError)):
        return None
    try:
        return error.request
    except RuntimeError:
        # httpx raises when the error was built without a request
        return None


def response_text(response: httpx.Response) -> str:
    """Body text of a response, empty when it was never read or cannot be decoded."""
    try:
        return response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError, LookupError):
        return ""


def classify_error(error: Any) -> ErrorKind:
    """Map a raw failure to its error kind."""
    if isinstance(error, ApiRequestError):
        return error.normalized_error.kind
    if isinstance(error, httpx.TimeoutException):
        return ErrorKind.TIMEOUT
    if isinstance(error, httpx.TransportError):
        return ErrorKind.NETWORK_UNREACHABLE
    if isinstance(error, httpx.HTTPStatusError):
        return ErrorKind.HTTP_STATUS
    return ErrorKind.UNKNOWN


def status_message(status: int,
                   body: Optional[str] = None,
                   path: str = "",
                   method: Optional[str] = None) -> str:
    """User-facing message for an HTTP failure status."""
    if status == 401:
        if path.startswith(LOGIN_PATH):
            return ERROR_MESSAGES["LOGIN_FAILED"]
        if method and method.upper() == "POST" and path.startswith(AUTH_PREFIX):
            return ERROR_MESSAGES["AUTH_FAILED"]
        return ERROR_MESSAGES[401]

    if status == 500:
        # An empty or generic body means the backend itself is down
        if not body or "Internal Server Error" in body:
            return ERROR_MESSAGES["SERVER_DOWN"]
        return ERROR_MESSAGES[500]

    return ERROR_MESSAGES.get(status, ERROR_MESSAGES["UNKNOWN_ERROR"])


def user_message(error: Any) -> str:
    """User-facing message for any raw failure."""
    kind = classify_error(error)

    if isinstance(error, ApiRequestError):
        return error.normalized_error.message
    if kind == ErrorKind.TIMEOUT:
        return ERROR_MESSAGES["TIMEOUT_ERROR"]
    if kind == ErrorKind.NETWORK_UNREACHABLE:
        return ERROR_MESSAGES["NETWORK_ERROR"]
    if kind == ErrorKind.HTTP_STATUS:
        request = request_of(error)
        return status_message(
            error.response.status_code,
            body=response_text(error.response),
            path=request.url.path if request is not None else "",
            method=request.method if request is not None else None
        )
    return ERROR_MESSAGES["UNKNOWN_ERROR"]
