"""Read-only proverb catalogue, most liked first."""

import random
from typing import List, Optional, Tuple

from quotely.exceptions import NotFoundError
from quotely.store import AnyOf, Eq, ILike, OrderBy, Row, StoreAdapter, page_offset, validate_page


class ProverbService:
    def __init__(self, store: StoreAdapter):
        self.store = store

    async def list_proverbs(
        self,
        category: Optional[str] = None,
        origin: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Row], int]:
        validate_page(page, limit)
        filters = []
        if category:
            filters.append(Eq("category", category))
        if origin:
            filters.append(Eq("origin", origin))
        if search:
            filters.append(
                AnyOf(ILike("content", search), ILike("meaning", search), ILike("origin", search))
            )

        result = await self.store.find(
            "proverbs",
            filters=filters,
            order_by=[OrderBy("likes_count", descending=True), OrderBy("created_at", descending=True)],
            offset=page_offset(page, limit),
            limit=limit,
            count=True,
        )
        return result.rows, result.total or 0

    async def random_proverb(self) -> Row:
        total = await self.store.count("proverbs")
        if total == 0:
            raise NotFoundError(resource="proverb")

        page = await self.store.find(
            "proverbs",
            order_by=[OrderBy("created_at", descending=True)],
            offset=random.randrange(total),
            limit=1,
        )
        if not page.rows:
            raise NotFoundError(resource="proverb")
        return page.rows[0]
