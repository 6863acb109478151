"""
Table of in-flight GET requests.
"""

import asyncio
from typing import Any, Awaitable, Dict, Optional

from .response_cache import CacheKey


class InFlightTable:
    """At most one pending request task per cache key.

    ``start`` registers the task before returning, and the task removes
    itself as its last step, before any awaiting caller resumes. Callers
    should await the task through ``asyncio.shield`` so that one
    cancelled caller does not cancel the request for the others.
    """

    def __init__(self):
        self._requests: Dict[CacheKey, "asyncio.Task[Any]"] = {}

    def get(self, key: CacheKey) -> Optional["asyncio.Task[Any]"]:
        return self._requests.get(key)

    def start(self, key: CacheKey, operation: Awaitable[Any]) -> "asyncio.Task[Any]":
        if key in self._requests:
            raise RuntimeError(f"Request already in flight for {key!r}")

        task = asyncio.ensure_future(self._run(key, operation))
        self._requests[key] = task
        task.add_done_callback(lambda done: self._settle(key, done))
        return task

    async def _run(self, key: CacheKey, operation: Awaitable[Any]) -> Any:
        try:
            return await operation
        finally:
            self._discard(key, asyncio.current_task())

    def _settle(self, key: CacheKey, task: "asyncio.Task[Any]") -> None:
        if not task.cancelled():
            # Marks a failure as retrieved even when every waiter was cancelled
            task.exception()
        # Covers a task cancelled before its first step
        self._discard(key, task)

    def _discard(self, key: CacheKey, task: Optional["asyncio.Task[Any]"]) -> None:
        if task is not None and self._requests.get(key) is task:
            del self._requests[key]

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._requests
