"""
Normalization package.

Pure functions that turn the backend's varying payload and failure shapes
into the canonical page and error shapes every caller relies on.
"""

from .responses import (
    normalize_page,
    normalize_error,
    is_paginated_response,
    extract_content,
    create_success_response,
    create_error_response,
)
from .classifier import ERROR_MESSAGES, classify_error, user_message

__all__ = [
    "normalize_page",
    "normalize_error",
    "is_paginated_response",
    "extract_content",
    "create_success_response",
    "create_error_response",
    "ERROR_MESSAGES",
    "classify_error",
    "user_message",
]
