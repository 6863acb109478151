"""
Console caching package.

Holds the short-lived response cache for public reads and the table of
in-flight GET requests used for deduplication. Both are plain in-process
structures owned by a single request client.
"""

from .response_cache import CacheEntry, ResponseCache, make_cache_key
from .inflight import InFlightTable

__all__ = [
    "CacheEntry",
    "ResponseCache",
    "InFlightTable",
    "make_cache_key",
]
