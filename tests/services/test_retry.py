"""
Tests for retry_with_backoff.
"""

import pytest
from unittest.mock import AsyncMock, patch

from finance_tracker.utils.retry import retry_with_backoff


class TestRetryWithBackoff:

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self):
        operation = AsyncMock(return_value=42)

        with patch("finance_tracker.utils.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await retry_with_backoff(operation)

        assert result.success is True
        assert result.data == 42
        assert result.error is None
        operation.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        operation = AsyncMock(side_effect=[RuntimeError("flaky"), RuntimeError("flaky"), "ok"])

        with patch("finance_tracker.utils.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await retry_with_backoff(operation)

        assert result.success is True
        assert result.data == "ok"
        assert operation.await_count == 3
        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.1, 0.2]

    @pytest.mark.asyncio
    async def test_returns_last_error_instead_of_raising(self):
        errors = [RuntimeError("one"), RuntimeError("two"), RuntimeError("three")]
        operation = AsyncMock(side_effect=errors)

        with patch("finance_tracker.utils.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await retry_with_backoff(operation)

        assert result.success is False
        assert result.data is None
        assert result.error is errors[2]
        # no sleep after the final attempt
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_longer_retry_budget_keeps_doubling(self):
        operation = AsyncMock(side_effect=RuntimeError("down"))

        with patch("finance_tracker.utils.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await retry_with_backoff(operation, max_retries=5)

        assert result.success is False
        assert operation.await_count == 5
        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.1, 0.2, 0.4, 0.8]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_retries", [0, -1])
    async def test_no_attempts_allowed(self, max_retries):
        operation = AsyncMock(return_value="never")

        with patch("finance_tracker.utils.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await retry_with_backoff(operation, max_retries=max_retries)

        assert result.success is False
        assert result.data is None
        assert str(result.error) == "Max retries exceeded"
        operation.assert_not_awaited()
        mock_sleep.assert_not_awaited()
