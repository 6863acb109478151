"""
Unit tests for the retry policy.
"""

import asyncio
import pytest
import httpx
from unittest.mock import AsyncMock, call, patch

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.retry import RetryConfig, is_retryable, retry, retry_on_exception


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "http://console.test/api/heritage-sites")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(f"status {status_code}", request=request, response=response)


class TestRetryPolicy:
    """Test cases for retry()."""

    @pytest.mark.asyncio
    async def test_success_returns_immediately(self):
        """A successful call is made once and never waits."""
        operation = AsyncMock(return_value="ok")

        with patch("shared.retry._backoff", new_callable=AsyncMock) as mock_backoff:
            result = await retry(operation)

        assert result == "ok"
        assert operation.await_count == 1
        mock_backoff.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt_after_doubling_waits(self):
        """Two transient failures are retried after 1s then 2s."""
        operation = AsyncMock(side_effect=[_status_error(503), _status_error(500), "recovered"])

        with patch("shared.retry._backoff", new_callable=AsyncMock) as mock_backoff:
            result = await retry(operation)

        assert result == "recovered"
        assert operation.await_count == 3
        assert mock_backoff.await_args_list == [call(1.0), call(2.0)]

    @pytest.mark.asyncio
    async def test_always_failing_call_gives_up_after_three_attempts(self):
        """The last failure propagates once attempts are exhausted."""
        failure = httpx.ConnectError("Connection refused")
        operation = AsyncMock(side_effect=failure)

        with patch("shared.retry._backoff", new_callable=AsyncMock) as mock_backoff:
            with pytest.raises(httpx.ConnectError) as exc_info:
                await retry(operation)

        assert exc_info.value is failure
        assert operation.await_count == 3
        assert mock_backoff.await_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_auth_failures_are_not_retried(self, status_code):
        """401 and 403 fail at once with no waiting."""
        operation = AsyncMock(side_effect=_status_error(status_code))

        with patch("shared.retry._backoff", new_callable=AsyncMock) as mock_backoff:
            with pytest.raises(httpx.HTTPStatusError):
                await retry(operation)

        assert operation.await_count == 1
        mock_backoff.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancellation_is_not_retried(self):
        """Cancellation propagates on the first attempt."""
        operation = AsyncMock(side_effect=asyncio.CancelledError())

        with patch("shared.retry._backoff", new_callable=AsyncMock) as mock_backoff:
            with pytest.raises(asyncio.CancelledError):
                await retry(operation)

        assert operation.await_count == 1
        mock_backoff.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_attempts_remaining_fails_without_waiting(self):
        """With no retries left the first failure propagates."""
        operation = AsyncMock(side_effect=_status_error(500))

        with patch("shared.retry._backoff", new_callable=AsyncMock) as mock_backoff:
            with pytest.raises(httpx.HTTPStatusError):
                await retry(operation, attempts_remaining=0)

        assert operation.await_count == 1
        mock_backoff.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_on_retry_hook_sees_each_wait(self):
        """The hook is told about each failure and its delay."""
        seen = []
        operation = AsyncMock(side_effect=[_status_error(502), "ok"])

        with patch("shared.retry._backoff", new_callable=AsyncMock):
            await retry(operation, delay=0.5, on_retry=lambda e, d: seen.append(d))

        assert seen == [0.5]

    def test_is_retryable_classification(self):
        """Only auth failures and cancellation are final."""
        assert is_retryable(_status_error(500)) is True
        assert is_retryable(_status_error(404)) is True
        assert is_retryable(httpx.ReadTimeout("timed out")) is True
        assert is_retryable(_status_error(401)) is False
        assert is_retryable(_status_error(403)) is False
        assert is_retryable(asyncio.CancelledError()) is False


class TestRetryDecorator:
    """Test cases for retry_on_exception()."""

    @pytest.mark.asyncio
    async def test_decorator_applies_config(self):
        """The decorated coroutine is retried per its config."""
        attempts = []

        @retry_on_exception(RetryConfig(attempts=1, base_delay=0.25))
        async def flaky(value):
            attempts.append(value)
            if len(attempts) == 1:
                raise httpx.ConnectError("Connection refused")
            return value * 2

        with patch("shared.retry._backoff", new_callable=AsyncMock) as mock_backoff:
            result = await flaky(21)

        assert result == 42
        assert attempts == [21, 21]
        mock_backoff.assert_awaited_once_with(0.25)
