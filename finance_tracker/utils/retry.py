"""
Retry helper for flaky remote calls (Supabase RPCs over the network).
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Delay before each retry, in seconds
BACKOFF_DELAYS = (0.1, 0.2, 0.4)


@dataclass
class RetryResult(Generic[T]):
    """
    Outcome of retry_with_backoff.

    Attributes:
        success: True if one of the attempts returned normally
        data: Value returned by the successful attempt
        error: Last error raised when every attempt failed
    """
    success: bool
    data: Optional[T] = None
    error: Optional[Exception] = None


def _backoff_delay(attempt: int) -> float:
    if attempt < len(BACKOFF_DELAYS):
        return BACKOFF_DELAYS[attempt]
    return BACKOFF_DELAYS[-1] * (2 ** (attempt - len(BACKOFF_DELAYS) + 1))


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
) -> RetryResult[T]:
    """
    Run an async operation, retrying with exponential backoff.

    Waits 100ms, 200ms and 400ms between attempts. The last error is returned
    in the result instead of being raised, so callers decide how to surface it.

    Args:
        operation: Zero-argument coroutine function to call
        max_retries: Total number of attempts (default 3)

    Returns:
        RetryResult with success flag, data or error
    """
    for attempt in range(max_retries):
        try:
            data = await operation()
            return RetryResult(success=True, data=data)
        except Exception as e:
            if attempt == max_retries - 1:
                logger.warning(f"Operation failed after {max_retries} attempts: {e}")
                return RetryResult(success=False, error=e)

            delay = _backoff_delay(attempt)
            logger.debug(f"Attempt {attempt + 1} failed, retrying in {delay:.1f}s")
            await asyncio.sleep(delay)

    return RetryResult(success=False, error=Exception("Max retries exceeded"))
