"""
Retry policy for resilient backend calls.
"""

import asyncio
import functools
from typing import Any, Awaitable, Callable, FrozenSet, Optional

import httpx

from shared.errors import error_text
from shared.logging import get_logger

# A request that fails with one of these will not succeed without
# re-authentication, so it is never re-attempted.
NON_RETRYABLE_STATUSES: FrozenSet[int] = frozenset({401, 403})

logger = get_logger("console.retry")


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self, attempts: int = 2, base_delay: float = 1.0):
        # attempts counts re-attempts after the initial call
        self.attempts = attempts
        self.base_delay = base_delay


def failure_status(error: BaseException) -> Optional[int]:
    """HTTP status carried by a failure, if any."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status = getattr(error, "status", None)
    return status if isinstance(status, int) else None


def is_retryable(error: BaseException) -> bool:
    """Whether a failed call may be attempted again."""
    if isinstance(error, asyncio.CancelledError):
        return False
    return failure_status(error) not in NON_RETRYABLE_STATUSES


async def _backoff(delay: float) -> None:
    await asyncio.sleep(delay)


async def retry(operation: Callable[[], Awaitable[Any]],
                attempts_remaining: int = 2,
                delay: float = 1.0,
                on_retry: Optional[Callable[[Exception, float], None]] = None) -> Any:
    """Run ``operation``, re-attempting transient failures with doubling delays.

    With the defaults this makes at most three attempts, waiting one second
    and then two seconds between them. Failures that are not retryable, or
    that arrive when no attempts remain, propagate unchanged and without
    waiting. Cancellation is never caught.
    """
    try:
        return await operation()
    except Exception as e:
        if attempts_remaining <= 0 or not is_retryable(e):
            raise

        logger.warning(
            "Retry attempt failed, waiting before next attempt",
            attempts_remaining=attempts_remaining,
            delay=delay,
            status=failure_status(e),
            error=error_text(e)
        )
        if on_retry is not None:
            on_retry(e, delay)

        await _backoff(delay)
        return await retry(operation, attempts_remaining - 1, delay * 2, on_retry)


def retry_on_exception(config: Optional[RetryConfig] = None) -> Callable:
    """Decorator applying the retry policy to an async function."""

    if config is None:
        config = RetryConfig()

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            return await retry(
                lambda: func(*args, **kwargs),
                attempts_remaining=config.attempts,
                delay=config.base_delay
            )

        return wrapper

    return decorator
