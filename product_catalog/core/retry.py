"""
Retry Configuration for DynamoDB Calls

Provides:
- Configurable retry logic with exponential backoff
- The allow-list of transient DynamoDB error codes worth retrying

Only throttling / availability errors are retried; everything else
(validation errors, conditional check failures, missing tables) surfaces on
the first attempt.

Usage:
    from product_catalog.core.retry import execute_with_retry, RetryConfig

    result = await execute_with_retry(
        lambda: asyncio.to_thread(table.get_item, Key=key),
        RetryConfig(max_attempts=3, base_delay=0.1),
        description="get_item Products",
    )
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "RetryConfig",
    "RETRYABLE_ERROR_CODES",
    "get_error_code",
    "is_retryable_error",
    "execute_with_retry",
    "STORE_RETRY_CONFIG",
]

T = TypeVar("T")

RETRYABLE_ERROR_CODES = frozenset((
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
    "ServiceUnavailable",
    "InternalServerError",
    "RequestTimeout",
))


def get_error_code(error: BaseException) -> Optional[str]:
    """Error kind reported by the store, or None for non-store errors"""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return getattr(error, "code", None)


def is_retryable_error(error: BaseException) -> bool:
    """Check if an error is a transient store error"""
    return get_error_code(error) in RETRYABLE_ERROR_CODES


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""

    max_attempts: int = 3
    base_delay: float = 0.1  # seconds
    max_delay: float = 5.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = False
    retryable: Callable[[BaseException], bool] = is_retryable_error

    def get_delay(self, attempt: int) -> float:
        """Calculate delay after a failed attempt (1-indexed)"""
        delay = min(
            self.base_delay * (self.exponential_base ** (attempt - 1)),
            self.max_delay
        )
        if self.jitter:
            delay *= (0.5 + random.random())
        return delay


# DynamoDB policy: 3 attempts, 100ms then 200ms, no jitter
STORE_RETRY_CONFIG = RetryConfig(max_attempts=3, base_delay=0.1)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    description: str = "operation",
) -> T:
    """
    Await ``operation`` until it succeeds, a non-retryable error is raised,
    or ``config.max_attempts`` attempts have been made.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        config: Retry configuration (uses STORE_RETRY_CONFIG if not provided)
        description: Label used in log messages

    Returns:
        The operation result
    """
    if config is None:
        config = STORE_RETRY_CONFIG

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if not config.retryable(e):
                raise

            if attempt >= config.max_attempts:
                logger.error(
                    f"All {config.max_attempts} attempts failed for {description}: {e}"
                )
                raise

            delay = config.get_delay(attempt)
            logger.warning(
                f"Attempt {attempt}/{config.max_attempts} failed for {description}: {e}. "
                f"Retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)
            attempt += 1
