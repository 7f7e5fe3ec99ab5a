"""
Retry handling utilities for monday.com API calls.

Provides a pure wait policy (attempt number -> delay) and an async wrapper
that re-runs a call while it keeps failing with a transient rate-limit error.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryExhaustedError(Exception):
    """Raised when all retry attempts have been exhausted."""

    def __init__(self, message: str, last_error: Optional[Exception] = None):
        super().__init__(message)
        self.last_error = last_error


class RetryStrategy:
    """
    Wait policy for rate-limited API calls.

    - Server-supplied delay (Retry-After, retry_in_seconds): used as-is
    - Otherwise: exponential backoff from base_delay, capped at max_delay
    """

    def __init__(
        self,
        max_retries: Optional[int] = 10,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
    ):
        """
        Initialize retry strategy.

        Args:
            max_retries: Maximum number of retries after the first attempt.
                None retries forever.
            base_delay: Initial delay in seconds
            max_delay: Maximum delay in seconds (backoff only)
            exponential_base: Base for exponential backoff
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    def get_delay(
        self,
        attempt: int,
        retry_after: Optional[float] = None,
    ) -> float:
        """
        Calculate delay for a given attempt.

        Args:
            attempt: Current retry number (0-indexed)
            retry_after: Delay requested by the server, if any

        Returns:
            Delay in seconds
        """
        if retry_after is not None and retry_after >= 0:
            return float(retry_after)

        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)

    def should_retry(self, attempt: int) -> bool:
        """Check if another retry should be attempted."""
        if self.max_retries is None:
            return True
        return attempt < self.max_retries


default_strategy = RetryStrategy(
    max_retries=10,
    base_delay=1.0,
    max_delay=30.0,
)


async def retry_while_transient(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    is_transient: Callable[[Exception], bool],
    strategy: RetryStrategy = default_strategy,
    get_retry_after: Optional[Callable[[Exception], Optional[float]]] = None,
    sleep: Sleep = asyncio.sleep,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
    **kwargs: Any,
) -> T:
    """
    Execute an async function, retrying while it fails transiently.

    Non-transient exceptions propagate immediately.

    Args:
        func: Async function to execute
        *args: Positional arguments for the function
        is_transient: Predicate deciding whether an exception is retryable
        strategy: Wait policy and retry budget
        get_retry_after: Extracts a server-supplied delay from an exception
        sleep: Awaitable sleep, injectable for tests
        on_retry: Optional callback (attempt, exception, delay)
        **kwargs: Keyword arguments for the function

    Returns:
        Result from the function

    Raises:
        RetryExhaustedError: When the retry budget is spent
    """
    attempt = 0

    while True:
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if not is_transient(e):
                raise

            if not strategy.should_retry(attempt):
                raise RetryExhaustedError(
                    f"Failed after {attempt + 1} attempts", last_error=e
                ) from e

            retry_after = get_retry_after(e) if get_retry_after else None
            delay = strategy.get_delay(attempt, retry_after=retry_after)

            if on_retry:
                on_retry(attempt + 1, e, delay)
            else:
                logger.warning(
                    f"Attempt {attempt + 1} rate limited: {e}. "
                    f"Retrying in {delay:.1f}s..."
                )

            await sleep(delay)
            attempt += 1
