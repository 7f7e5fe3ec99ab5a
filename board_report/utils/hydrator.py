"""
Batch hydration of item ids into decoded item records.

Ids are split into fixed-size batches; each batch is one details query.
Batches run with semaphore-controlled concurrency and results keep batch
order, so output is reproducible regardless of completion order.
"""

import asyncio
import logging
from typing import Awaitable, Sequence, TypeVar

from ..clients.monday import DEFAULT_BATCH_SIZE, MondayClient
from ..models.column_values import ItemRecord, decode_item

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 4

T = TypeVar("T")


async def gather_or_cancel(*aws: Awaitable[T]) -> list[T]:
    """
    Await all awaitables concurrently; results keep argument order.

    On the first failure the remaining tasks are cancelled and awaited
    before the error is re-raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def chunk_ids(ids: Sequence[str], size: int) -> list[list[str]]:
    """Split ids into consecutive chunks of at most `size`."""
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(ids[i:i + size]) for i in range(0, len(ids), size)]


def flatten_items(raw_items: list[dict]) -> list[ItemRecord]:
    """Decode items, placing each item's sub-items right after it."""
    records = []
    for raw in raw_items:
        parent = decode_item(raw)
        records.append(parent)
        for raw_subitem in raw.get("subitems") or []:
            records.append(decode_item(raw_subitem, parent_id=parent.id))
    return records


class BatchHydrator:
    """Fetches column data for item ids in bounded-parallel batches."""

    def __init__(
        self,
        client: MondayClient,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        include_subitems: bool = False,
    ):
        self.client = client
        self.batch_size = batch_size
        self.max_concurrent = max_concurrent
        self.include_subitems = include_subitems

    async def hydrate_batch(
        self,
        batch: list[str],
        column_ids: Sequence[str],
        semaphore: asyncio.Semaphore,
        index: int = 0,
        total: int = 0,
    ) -> list[ItemRecord]:
        async with semaphore:
            raw_items = await self.client.get_items(
                batch, column_ids, include_subitems=self.include_subitems
            )
            records = flatten_items(raw_items)
            logger.debug(f"Batch {index + 1}/{total}: {len(records)} records")
            return records

    async def hydrate(
        self,
        ids: Sequence[str],
        column_ids: Sequence[str],
    ) -> list[ItemRecord]:
        """
        Hydrate all ids.

        Args:
            ids: Item ids to fetch
            column_ids: Column ids to select for every item

        Returns:
            Decoded records in batch order; sub-items follow their parent

        Raises:
            MondayError: If any batch fails (no partial result is returned)
        """
        if not ids:
            return []

        batches = chunk_ids(ids, self.batch_size)
        semaphore = asyncio.Semaphore(self.max_concurrent)

        tasks = [
            self.hydrate_batch(batch, column_ids, semaphore, i, len(batches))
            for i, batch in enumerate(batches)
        ]
        results = await gather_or_cancel(*tasks)

        records = [record for batch_records in results for record in batch_records]
        logger.info(
            f"Hydrated {len(ids)} ids in {len(batches)} batch(es): {len(records)} records"
        )
        return records
