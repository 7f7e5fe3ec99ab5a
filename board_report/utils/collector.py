"""
Item id collection with cursor pagination.

The first page of a board query carries the filter (query_params); every
following page is fetched with next_items_page and the cursor alone, since
monday.com does not accept filters on cursor pages.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..clients.monday import DEFAULT_PAGE_LIMIT, MondayClient
from .config import BoardConfig
from .hydrator import gather_or_cancel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemFilter:
    """
    Filter for one items_page query.

    Either group ids (items in any of the groups) or column rules
    (column id -> accepted values, all rules must match).
    """
    group_ids: tuple[str, ...] = ()
    column_rules: tuple[tuple[str, tuple[str, ...]], ...] = ()

    def to_query_params(self) -> Optional[dict]:
        """Render as an ItemsQuery input object, or None for no filter."""
        rules = []
        if self.group_ids:
            rules.append({
                "column_id": "group",
                "compare_value": list(self.group_ids),
                "operator": "any_of",
            })
        for column_id, accepted in self.column_rules:
            rules.append({
                "column_id": column_id,
                "compare_value": list(accepted),
                "operator": "any_of",
            })
        return {"rules": rules} if rules else None


def filters_for(config: BoardConfig) -> list[ItemFilter]:
    """
    Build the filters a board configuration asks for.

    Groups go into a single filter; each column rule becomes its own filter
    so their matches are merged (union) rather than intersected.
    """
    filters = []
    if config.group_ids:
        filters.append(ItemFilter(group_ids=tuple(config.group_ids)))
    for column_id, accepted in config.column_rules:
        filters.append(ItemFilter(column_rules=((column_id, tuple(accepted)),)))
    if not filters:
        filters.append(ItemFilter())
    return filters


class IdCollector:
    """Resolves every item id matching a set of filters on one board."""

    def __init__(
        self,
        client: MondayClient,
        board_id: int,
        page_limit: int = DEFAULT_PAGE_LIMIT,
    ):
        self.client = client
        self.board_id = board_id
        self.page_limit = page_limit

    async def collect_one(self, item_filter: ItemFilter) -> list[str]:
        """Follow one filter's cursor chain to the end."""
        ids, cursor = await self.client.get_items_page(
            self.board_id,
            item_filter.to_query_params(),
            limit=self.page_limit,
        )
        if not ids:
            return []

        pages = 1
        while cursor:
            page_ids, cursor = await self.client.get_next_items_page(
                cursor, limit=self.page_limit
            )
            if not page_ids:
                break
            ids.extend(page_ids)
            pages += 1

        logger.info(f"Board {self.board_id}: {len(ids)} item ids over {pages} page(s)")
        return ids

    async def collect(self, filters: Sequence[ItemFilter]) -> list[str]:
        """
        Collect ids for all filters concurrently and merge them.

        Returns:
            Deduplicated ids in first-seen order (filter order, then page order)
        """
        results = await gather_or_cancel(*(self.collect_one(f) for f in filters))

        merged: dict[str, None] = {}
        for ids in results:
            for item_id in ids:
                merged.setdefault(item_id, None)
        return list(merged)


async def collect_item_ids(
    client: MondayClient,
    config: BoardConfig,
    filters: Optional[Sequence[ItemFilter]] = None,
) -> list[str]:
    """Collect every item id for a board configuration."""
    collector = IdCollector(client, config.board_id, page_limit=config.page_limit)
    return await collector.collect(filters if filters is not None else filters_for(config))
