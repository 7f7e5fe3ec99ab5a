"""API clients for external services."""

from .monday import (
    MondayClient,
    MondayError,
    MondayRateLimitError,
    get_monday_client,
)
from .retry_handler import (
    RetryExhaustedError,
    RetryStrategy,
    default_strategy,
    retry_while_transient,
)

__all__ = [
    # Monday.com client
    "MondayClient",
    "MondayError",
    "MondayRateLimitError",
    "get_monday_client",
    # Retry utilities
    "retry_while_transient",
    "RetryStrategy",
    "RetryExhaustedError",
    "default_strategy",
]
