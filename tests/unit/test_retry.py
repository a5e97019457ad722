"""
Unit Tests for the retry policy

Tests for:
- Backoff delays
- The retryable error allow-list
- execute_with_retry attempt counting
"""

import pytest
from unittest.mock import AsyncMock, patch
from botocore.exceptions import ClientError

from product_catalog.core.retry import (
    RETRYABLE_ERROR_CODES,
    RetryConfig,
    execute_with_retry,
    get_error_code,
    is_retryable_error,
)


def client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "Query")


class TestRetryConfig:
    """Tests for RetryConfig.get_delay"""

    def test_exponential_backoff_without_jitter(self):
        config = RetryConfig(max_attempts=3, base_delay=0.1)

        assert config.get_delay(1) == pytest.approx(0.1)
        assert config.get_delay(2) == pytest.approx(0.2)
        assert config.get_delay(3) == pytest.approx(0.4)

    def test_delay_is_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=2.0)
        assert config.get_delay(5) == 2.0


class TestRetryableErrors:
    """Tests for the store error allow-list"""

    @pytest.mark.parametrize("code", sorted(RETRYABLE_ERROR_CODES))
    def test_transient_codes_are_retryable(self, code):
        assert is_retryable_error(client_error(code)) is True

    @pytest.mark.parametrize("code", [
        "ValidationException",
        "ConditionalCheckFailedException",
        "ResourceNotFoundException",
    ])
    def test_other_codes_are_not(self, code):
        assert is_retryable_error(client_error(code)) is False

    def test_plain_exceptions_are_not_retryable(self):
        assert get_error_code(ValueError("boom")) is None
        assert is_retryable_error(ValueError("boom")) is False


class TestExecuteWithRetry:
    """Tests for execute_with_retry()"""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self):
        operation = AsyncMock(return_value="ok")

        result = await execute_with_retry(operation, RetryConfig(base_delay=0))

        assert result == "ok"
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_sleeps_between_attempts(self):
        operation = AsyncMock(side_effect=[client_error("RequestTimeout"), client_error("RequestTimeout"), "ok"])

        with patch("product_catalog.core.retry.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            result = await execute_with_retry(operation, RetryConfig(max_attempts=3, base_delay=0.1))

        assert result == "ok"
        delays = [call.args[0] for call in mock_sleep.await_args_list]
        assert delays == [pytest.approx(0.1), pytest.approx(0.2)]

    @pytest.mark.asyncio
    async def test_raises_last_error_when_exhausted(self):
        operation = AsyncMock(side_effect=client_error("InternalServerError"))

        with pytest.raises(ClientError):
            await execute_with_retry(operation, RetryConfig(max_attempts=3, base_delay=0))

        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_is_not_retried(self):
        operation = AsyncMock(side_effect=KeyError("id"))

        with pytest.raises(KeyError):
            await execute_with_retry(operation, RetryConfig(base_delay=0))

        assert operation.await_count == 1
