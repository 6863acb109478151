"""
Short-lived response cache for public reads.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from shared.logging import get_logger


CacheKey = Tuple[str, str, str]

DEFAULT_TTL = 5.0


def make_cache_key(method: str, url: str, params: Optional[Mapping[str, Any]] = None) -> CacheKey:
    """Key identifying a read: method, URL and serialized query parameters."""
    serialized = json.dumps(dict(params or {}), sort_keys=True, default=str)
    return (method.upper(), url, serialized)


@dataclass
class CacheEntry:
    """A stored response and the clock reading when it was stored."""
    value: Any
    stored_at: float


class ResponseCache:
    """In-memory TTL cache with lazy expiry.

    Entries older than ``ttl`` are never returned, but they are only
    replaced by the next successful store, never swept. ``max_entries``
    bounds the map by evicting the oldest store; ``None`` leaves it
    unbounded.
    """

    def __init__(self,
                 ttl: float = DEFAULT_TTL,
                 max_entries: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.max_entries = max_entries
        self.clock = clock
        self.logger = get_logger("console.cache")
        self._entries: Dict[CacheKey, CacheEntry] = {}

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Fresh entry for ``key``, or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.stored_at >= self.ttl:
            return None
        return entry

    def set(self, key: CacheKey, value: Any) -> CacheEntry:
        entry = CacheEntry(value=value, stored_at=self.clock())
        # Re-insert so insertion order tracks store time
        self._entries.pop(key, None)
        self._entries[key] = entry

        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                self.logger.debug("Evicted cache entry", key=oldest)

        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries
