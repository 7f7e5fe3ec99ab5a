"""
Board report pipeline.

Orchestrates one report run:
Item filter → ID collection → Batch hydration → Classification/totals

Nothing is kept between runs; a run either returns every bucket or raises.
"""

import asyncio
import datetime as dt
import logging
from typing import Optional, Sequence

import httpx

from .clients.monday import MondayClient, get_monday_client
from .clients.retry_handler import Sleep
from .models.column_values import ItemRecord
from .models.report import ReportResponse
from .utils.aggregator import aggregate
from .utils.collector import IdCollector, ItemFilter, filters_for
from .utils.config import DEFAULT_BOARD_CONFIG, BoardConfig, Settings
from .utils.hydrator import DEFAULT_MAX_CONCURRENT, BatchHydrator

logger = logging.getLogger(__name__)


class MondayBoardAggregator:
    """
    Builds a classified, totaled report for one board configuration.

    Example:
        ```python
        aggregator = MondayBoardAggregator(client, DEFAULT_BOARD_CONFIG)
        response = await aggregator.run()
        print(response.to_payload()["b2c"]["meta"])
        ```
    """

    def __init__(
        self,
        client: MondayClient,
        config: BoardConfig = DEFAULT_BOARD_CONFIG,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ):
        self.client = client
        self.config = config
        self.collector = IdCollector(client, config.board_id, page_limit=config.page_limit)
        self.hydrator = BatchHydrator(
            client,
            batch_size=config.batch_size,
            max_concurrent=max_concurrent,
            include_subitems=config.include_subitems,
        )

    async def collect(self, filters: Optional[Sequence[ItemFilter]] = None) -> list[str]:
        """Phase 1: every item id matching the configured filters."""
        return await self.collector.collect(
            filters if filters is not None else filters_for(self.config)
        )

    async def hydrate(self, ids: Sequence[str]) -> list[ItemRecord]:
        """Phase 2: decoded records for the configured columns."""
        return await self.hydrator.hydrate(ids, self.config.columns.column_ids())

    async def run(self, filters: Optional[Sequence[ItemFilter]] = None) -> ReportResponse:
        """Run all three phases and return the report."""
        ids = await self.collect(filters)
        records = await self.hydrate(ids)
        reports = aggregate(records, self.config.columns, self.config.accepted_types)

        for bucket_type, report in reports.items():
            logger.info(
                f"{bucket_type}: {report.meta.total_items} items, "
                f"{report.meta.total_sum_eur:.2f} EUR"
            )

        return ReportResponse(
            fetched_at=dt.datetime.now(dt.timezone.utc),
            reports=reports,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def get_aggregator(
    settings: Settings,
    config: BoardConfig = DEFAULT_BOARD_CONFIG,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleep = asyncio.sleep,
) -> MondayBoardAggregator:
    """
    Build an aggregator from settings.

    Raises:
        ConfigurationError: If MONDAY_API_KEY is not configured
    """
    client = get_monday_client(settings, transport=transport, sleep=sleep)
    return MondayBoardAggregator(
        client,
        config,
        max_concurrent=settings.monday_max_concurrent,
    )


async def build_report(
    settings: Settings,
    config: BoardConfig = DEFAULT_BOARD_CONFIG,
) -> ReportResponse:
    """Run one report with a client built from settings."""
    return await get_aggregator(settings, config).run()


def build_report_sync(
    settings: Settings,
    config: BoardConfig = DEFAULT_BOARD_CONFIG,
) -> ReportResponse:
    """Synchronous wrapper for build_report."""
    return asyncio.run(build_report(settings, config))
