"""
Monday.com API Client for board reporting.

Handles the read-only GraphQL operations the report needs: first-page and
next-page item id queries, and batched item detail queries. Rate-limit
responses are classified here and retried with the configured strategy.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import httpx

from ..utils.config import ConfigurationError, Settings
from .retry_handler import RetryStrategy, Sleep, default_strategy, retry_while_transient

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

# Default API URL
API_URL = "https://api.monday.com/v2"
API_VERSION = "2024-10"

# items_page accepts at most 500 items per page
DEFAULT_PAGE_LIMIT = 500

# Keeps a details query under the complexity ceiling
DEFAULT_BATCH_SIZE = 100

RATE_LIMIT_CODES = {
    "ComplexityException",
    "COMPLEXITY_BUDGET_EXHAUSTED",
    "RATE_LIMIT_EXCEEDED",
    "DAILY_LIMIT_EXCEEDED",
    "FIELD_MINUTE_RATE_LIMIT_EXCEEDED",
    "FIELD_LIMIT_EXCEEDED",
    "IP_RATE_LIMIT_EXCEEDED",
    "maxConcurrencyExceeded",
}

_RESET_IN_RE = re.compile(r"reset in (\d+(?:\.\d+)?) seconds?", re.IGNORECASE)


# =============================================================================
# QUERIES
# =============================================================================

ITEMS_PAGE_QUERY = """
query ($boardId: [ID!], $limit: Int!, $queryParams: ItemsQuery) {
    boards(ids: $boardId) {
        items_page(limit: $limit, query_params: $queryParams) {
            cursor
            items {
                id
            }
        }
    }
}
"""

NEXT_ITEMS_PAGE_QUERY = """
query ($cursor: String!, $limit: Int!) {
    next_items_page(limit: $limit, cursor: $cursor) {
        cursor
        items {
            id
        }
    }
}
"""

COLUMN_VALUE_FIELDS = """
            id
            type
            text
            ... on FormulaValue {
                display_value
            }
            ... on StatusValue {
                label
            }
            ... on DateValue {
                date
            }
            ... on NumbersValue {
                number
            }
            ... on DropdownValue {
                values {
                    label
                }
            }
"""


def build_items_query(include_subitems: bool = False) -> str:
    """Build the batch item-details query, optionally selecting sub-items."""
    subitems = ""
    if include_subitems:
        subitems = f"""
        subitems {{
            id
            name
            column_values(ids: $columns) {{{COLUMN_VALUE_FIELDS}            }}
        }}"""

    return f"""
query ($ids: [ID!], $columns: [String!], $limit: Int) {{
    items(ids: $ids, limit: $limit) {{
        id
        name
        column_values(ids: $columns) {{{COLUMN_VALUE_FIELDS}        }}{subitems}
    }}
}}
"""


# =============================================================================
# ERRORS
# =============================================================================

@dataclass
class MondayError(Exception):
    """Exception for Monday.com API errors."""
    message: str
    status_code: Optional[int] = None
    errors: Optional[list] = None

    def __str__(self) -> str:
        return f"MondayError: {self.message}"


@dataclass
class MondayRateLimitError(MondayError):
    """Transient rate-limit or complexity error; safe to retry."""
    retry_after: Optional[float] = None

    def __str__(self) -> str:
        return f"MondayRateLimitError: {self.message}"


def is_rate_limited(error: Exception) -> bool:
    """Retry predicate for the retry handler."""
    return isinstance(error, MondayRateLimitError)


def retry_after_of(error: Exception) -> Optional[float]:
    """Server-supplied delay carried by a rate-limit error, if any."""
    return getattr(error, "retry_after", None)


def _parse_seconds(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def _error_code(error: dict) -> str:
    extensions = error.get("extensions") or {}
    return str(extensions.get("code") or error.get("error_code") or "")


def is_rate_limit_error(error: dict) -> bool:
    """Check whether a single GraphQL error entry is a transient limit."""
    code = _error_code(error)
    if code in RATE_LIMIT_CODES:
        return True

    lowered = code.lower().replace(" ", "_")
    return "complexity" in lowered or "rate_limit" in lowered or "ratelimit" in lowered


def rate_limit_delay(error: dict) -> Optional[float]:
    """
    Extract the server-supplied wait from a GraphQL error entry.

    Looks at extensions.retry_in_seconds first, then a
    "reset in N seconds" phrase in the message.
    """
    extensions = error.get("extensions") or {}
    delay = _parse_seconds(extensions.get("retry_in_seconds"))
    if delay is not None:
        return delay

    message = str(error.get("message") or error.get("error_message") or "")
    match = _RESET_IN_RE.search(message)
    if match:
        return float(match.group(1))

    return None


def _collect_errors(result: dict) -> list[dict]:
    """Normalize current and legacy error payloads into a list of dicts."""
    errors = list(result.get("errors") or [])
    if result.get("error_code") or result.get("error_message"):
        errors.append({
            "message": result.get("error_message", ""),
            "error_code": result.get("error_code"),
        })
    return errors


# =============================================================================
# MONDAY CLIENT
# =============================================================================

class MondayClient:
    """
    Client for Monday.com GraphQL API.

    Features:
    - Cursor pagination over items_page / next_items_page
    - Batched item detail queries by id
    - Retry on 429 and GraphQL rate-limit errors
    - Async operations with httpx
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = API_URL,
        api_version: str = API_VERSION,
        timeout: float = 30.0,
        retry_strategy: RetryStrategy = default_strategy,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize Monday.com client.

        Args:
            api_key: Monday.com API key (JWT token).
            api_url: API endpoint URL.
            api_version: Value of the API-Version header.
            timeout: Request timeout in seconds.
            retry_strategy: Wait policy for rate-limited calls.
            transport: Optional httpx transport (tests plug a mock here).
            sleep: Awaitable sleep used between retries.
        """
        if not api_key:
            raise ConfigurationError("MONDAY_API_KEY missing")

        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.retry_strategy = retry_strategy
        self.transport = transport
        self.sleep = sleep

        self.headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
            "API-Version": api_version,
        }

    # -------------------------------------------------------------------------
    # Low-level API methods
    # -------------------------------------------------------------------------

    async def _post(self, payload: dict) -> dict:
        """Send one GraphQL request and classify its failure, if any."""
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            response = await client.post(
                self.api_url,
                headers=self.headers,
                json=payload,
            )

        if response.status_code == 429:
            raise MondayRateLimitError(
                message="HTTP 429: rate limit exceeded",
                status_code=429,
                retry_after=_parse_seconds(response.headers.get("Retry-After")),
            )

        try:
            result = response.json()
        except ValueError:
            raise MondayError(
                message=f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        errors = _collect_errors(result) if isinstance(result, dict) else []

        if errors:
            limited = [e for e in errors if is_rate_limit_error(e)]
            if limited:
                delays = [d for d in map(rate_limit_delay, limited) if d is not None]
                raise MondayRateLimitError(
                    message=str(limited),
                    status_code=response.status_code,
                    errors=errors,
                    retry_after=max(delays) if delays else None,
                )
            raise MondayError(
                message=str(errors),
                status_code=response.status_code,
                errors=errors,
            )

        if response.status_code != 200:
            raise MondayError(
                message=f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        return result

    def _log_retry(self, attempt: int, error: Exception, delay: float) -> None:
        logger.warning(f"Monday rate limit (retry {attempt}): {error}. Waiting {delay:.1f}s")

    async def execute(self, query: str, variables: Optional[dict] = None) -> dict:
        """
        Execute a GraphQL query, retrying while rate limited.

        Returns:
            The "data" member of the GraphQL response.
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        result = await retry_while_transient(
            self._post,
            payload,
            is_transient=is_rate_limited,
            strategy=self.retry_strategy,
            get_retry_after=retry_after_of,
            sleep=self.sleep,
            on_retry=self._log_retry,
        )
        return result.get("data") or {}

    # -------------------------------------------------------------------------
    # Item pagination
    # -------------------------------------------------------------------------

    async def get_items_page(
        self,
        board_id: int,
        query_params: Optional[dict] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> tuple[list[str], Optional[str]]:
        """
        Fetch the first filtered page of item ids for a board.

        Returns:
            Tuple of (item_ids, cursor); cursor is None on the last page
        """
        data = await self.execute(
            ITEMS_PAGE_QUERY,
            {"boardId": [str(board_id)], "limit": limit, "queryParams": query_params},
        )
        boards = data.get("boards") or []
        if not boards:
            raise MondayError(f"Board {board_id} not found or not accessible")

        items_page = boards[0].get("items_page") or {}
        ids = [str(item["id"]) for item in items_page.get("items") or []]
        return ids, items_page.get("cursor")

    async def get_next_items_page(
        self,
        cursor: str,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> tuple[list[str], Optional[str]]:
        """Follow a cursor; filters from the first page are implied by it."""
        data = await self.execute(
            NEXT_ITEMS_PAGE_QUERY,
            {"cursor": cursor, "limit": limit},
        )
        items_page = data.get("next_items_page") or {}
        ids = [str(item["id"]) for item in items_page.get("items") or []]
        return ids, items_page.get("cursor")

    # -------------------------------------------------------------------------
    # Item details
    # -------------------------------------------------------------------------

    async def get_items(
        self,
        item_ids: Sequence[str],
        column_ids: Sequence[str],
        include_subitems: bool = False,
    ) -> list[dict]:
        """
        Fetch id, name and the given column values for a list of item ids.

        Args:
            item_ids: Item ids (at most one batch)
            column_ids: Column ids to select
            include_subitems: Also select sub-items with the same columns

        Returns:
            Raw item dictionaries as returned by the API
        """
        if not item_ids:
            return []

        data = await self.execute(
            build_items_query(include_subitems),
            {
                "ids": [str(i) for i in item_ids],
                "columns": list(column_ids),
                "limit": len(item_ids),
            },
        )
        return data.get("items") or []


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def get_monday_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleep = asyncio.sleep,
) -> MondayClient:
    """
    Factory function to get a MondayClient configured from settings.

    Raises:
        ConfigurationError: If MONDAY_API_KEY is not configured.
    """
    return MondayClient(
        api_key=settings.monday_api_key,
        api_url=settings.monday_api_url,
        api_version=settings.monday_api_version,
        timeout=settings.monday_timeout,
        retry_strategy=RetryStrategy(max_retries=settings.monday_max_retries),
        transport=transport,
        sleep=sleep,
    )
