"""
Response normalization for the console client.

The backend answers list endpoints with one of two pagination envelopes
(``{"content": [...]}`` from newer endpoints, ``{"items": [...]}`` from
older ones) or with a bare JSON array. Screens were written against both
envelopes, so every normalized page carries both keys.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from shared.errors import ApiRequestError, NormalizedError, error_text
from .classifier import classify_error, request_of, response_text, user_message


DEFAULT_STATUS = 500
DEFAULT_ERROR = "Unknown Error"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_page(data: Any) -> Any:
    """Return ``data`` in the canonical page shape.

    Args:
        data: A decoded response payload.

    Returns:
        A new dict with both ``content`` and ``items`` for paginated
        envelopes and bare lists; any other payload unchanged. Applying
        the function to its own output returns an equal value.
    """
    if isinstance(data, dict):
        if "content" in data:
            return {**data, "items": data["content"]}
        if "items" in data:
            return {**data, "content": data["items"]}
        return data

    if isinstance(data, (list, tuple)):
        items = list(data)
        return {
            "content": items,
            "items": items,
            "page": 0,
            "size": len(items),
            "totalElements": len(items),
            "totalPages": 1,
            "first": True,
            "last": True,
            "empty": len(items) == 0,
            "numberOfElements": len(items),
        }

    return data


def is_paginated_response(data: Any) -> bool:
    """Check whether a payload looks like a pagination envelope."""
    if not isinstance(data, dict):
        return False
    return (
        "content" in data
        or "items" in data
        or ("page" in data and "totalElements" in data)
    )


def extract_content(data: Any) -> Any:
    """Main content of a payload: the item list for pages, the payload otherwise."""
    if not data:
        return data
    if is_paginated_response(data):
        return data.get("content") or data.get("items") or []
    return data


def _body_of(response: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError, httpx.ResponseNotRead):
        return None
    return body if isinstance(body, dict) else None


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return default


def _as_details(value: Any) -> List[Any]:
    if not value:
        return []
    if isinstance(value, list):
        return value
    return [value]


def normalize_error(error: Any, path: Optional[str] = None) -> NormalizedError:
    """Build the canonical error for any raised value.

    The backend's own ``message`` is kept as ``server_message`` for logs;
    ``message`` is always the fixed user-facing text for the failure class.
    Never raises, whatever ``error`` is.
    """
    if isinstance(error, ApiRequestError):
        return error.normalized_error

    kind = classify_error(error)
    request = request_of(error)
    request_path = path or (request.url.path if request is not None else "")

    status = DEFAULT_STATUS
    error_name = DEFAULT_ERROR
    details: List[Any] = []
    server_message = error_text(error) if error is not None else None

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        status = response.status_code
        body = _body_of(response)
        if body is not None:
            status = _as_int(body.get("status"), status)
            error_name = str(body.get("error") or DEFAULT_ERROR)
            details = _as_details(body.get("details") or body.get("fieldErrors"))
            if body.get("message"):
                server_message = str(body["message"])
            request_path = request_path or str(body.get("path") or "")
        else:
            server_message = response_text(response) or server_message

    return NormalizedError(
        message=user_message(error),
        status=status,
        error=error_name,
        details=details,
        timestamp=_now(),
        path=request_path,
        kind=kind,
        server_message=server_message,
    )


def create_success_response(data: Any, message: str = "Success") -> Dict[str, Any]:
    """Wrap data in a success envelope."""
    return {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": _now(),
    }


def create_error_response(message: str, error: Any = None) -> Dict[str, Any]:
    """Wrap a failure in an error envelope."""
    return {
        "success": False,
        "message": message,
        "error": normalize_error(error).model_dump(mode="json") if error is not None else None,
        "timestamp": _now(),
    }
