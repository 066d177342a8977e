"""
Quotely API — Favorites Service
================================

What:  Per-user saved quotes and proverbs.
How:   Plain StoreAdapter calls; no transactions. The unique constraint on
       (user_id, item_id, item_type) is the final word on duplicates.
Who:   /api/favorites routes.

Idempotency:
    add_favorite     check → target lookup → insert; a duplicate key on insert
                     (two requests racing past the check) is reported the same
                     way as a positive check: created=False,
                     reason=ALREADY_FAVORITED. A missing target, or a quote
                     still pending moderation, is NotFoundError.
    remove_favorite  deleting nothing is a normal outcome (removed=False)

Listing:
    ┌──────────────────────┐     ┌──────────────────────────┐
    │ favorites page+count │ ──▶ │ quotes In(ids)           │  concurrent
    │ (concurrent)         │     │ proverbs In(ids)         │
    └──────────────────────┘     └──────────────────────────┘
    Each favorite gets `item` attached; a target that no longer exists
    leaves item=None instead of dropping the favorite.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from quotely.exceptions import ConstraintViolationError, NoRowsError, NotFoundError, ValidationError
from quotely.models.favorite import ITEM_TYPES
from quotely.store import Eq, In, OrderBy, Row, StoreAdapter, page_offset, validate_page

logger = logging.getLogger(__name__)

ALREADY_FAVORITED = "already_favorited"

# item_type → entity holding the favorited rows
ITEM_ENTITIES = {"quote": "quotes", "proverb": "proverbs"}

# Extra filters a target must pass to be favorited
ITEM_VISIBILITY = {"quote": [Eq("approved", True)], "proverb": []}


@dataclass
class AddFavoriteResult:
    created: bool
    favorite: Optional[Row] = None
    reason: Optional[str] = None


@dataclass
class RemoveFavoriteResult:
    removed: bool


def validate_item_type(item_type: str) -> str:
    if item_type not in ITEM_TYPES:
        raise ValidationError(
            message=f"item_type must be one of: {', '.join(ITEM_TYPES)}",
            field="item_type",
        )
    return item_type


class FavoritesService:
    """Favorites operations scoped to one store handle."""

    def __init__(self, store: StoreAdapter):
        self.store = store

    @staticmethod
    def _key(user_id: UUID, item_id: UUID, item_type: str) -> List[Eq]:
        return [
            Eq("user_id", user_id),
            Eq("item_id", item_id),
            Eq("item_type", item_type),
        ]

    async def is_favorited(self, user_id: UUID, item_id: UUID, item_type: str = "quote") -> bool:
        validate_item_type(item_type)
        try:
            await self.store.find_one("favorites", self._key(user_id, item_id, item_type))
        except NoRowsError:
            return False
        return True

    async def _require_item(self, item_id: UUID, item_type: str) -> None:
        """Raises NotFoundError unless the target exists and is publicly visible."""
        try:
            await self.store.find_one(
                ITEM_ENTITIES[item_type], [Eq("id", item_id), *ITEM_VISIBILITY[item_type]]
            )
        except NoRowsError:
            raise NotFoundError(resource=item_type, resource_id=str(item_id))

    async def add_favorite(
        self,
        user_id: UUID,
        item_id: UUID,
        item_type: str = "quote",
    ) -> AddFavoriteResult:
        validate_item_type(item_type)

        if await self.is_favorited(user_id, item_id, item_type):
            return AddFavoriteResult(created=False, reason=ALREADY_FAVORITED)

        await self._require_item(item_id, item_type)

        try:
            row = await self.store.insert(
                "favorites",
                {
                    "user_id": user_id,
                    "item_id": item_id,
                    "item_type": item_type,
                    "created_at": datetime.now(timezone.utc),
                },
            )
        except ConstraintViolationError as exc:
            if exc.is_duplicate_key:
                logger.info(
                    "Favorite %s/%s for user %s inserted concurrently", item_type, item_id, user_id
                )
                return AddFavoriteResult(created=False, reason=ALREADY_FAVORITED)
            raise

        logger.info("User %s favorited %s %s", user_id, item_type, item_id)
        return AddFavoriteResult(created=True, favorite=row)

    async def remove_favorite(
        self,
        user_id: UUID,
        item_id: UUID,
        item_type: str = "quote",
    ) -> RemoveFavoriteResult:
        validate_item_type(item_type)
        deleted = await self.store.delete("favorites", self._key(user_id, item_id, item_type))
        if deleted:
            logger.info("User %s unfavorited %s %s", user_id, item_type, item_id)
        return RemoveFavoriteResult(removed=deleted > 0)

    async def toggle_favorite(self, user_id: UUID, item_id: UUID, item_type: str = "quote") -> str:
        """Remove the favorite if present, otherwise add it. Returns "added" or "removed"."""
        removed = await self.remove_favorite(user_id, item_id, item_type)
        if removed.removed:
            return "removed"
        await self.add_favorite(user_id, item_id, item_type)
        return "added"

    async def list_favorites(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 20,
        item_type: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        One page of the user's favorites, newest first, with the exact total.

        Raises:
            ValidationError: page/limit below 1 or unknown item_type
        """
        validate_page(page, limit)
        filters = [Eq("user_id", user_id)]
        if item_type is not None:
            filters.append(Eq("item_type", validate_item_type(item_type)))

        result = await self.store.find(
            "favorites",
            filters=filters,
            order_by=[OrderBy("created_at", descending=True)],
            offset=page_offset(page, limit),
            limit=limit,
            count=True,
        )

        items = await self._attach_items(result.rows)
        return items, result.total or 0

    async def _attach_items(self, favorites: List[Row]) -> List[Dict[str, Any]]:
        ids_by_type: Dict[str, List[Any]] = {t: [] for t in ITEM_TYPES}
        for fav in favorites:
            ids_by_type.setdefault(fav["item_type"], []).append(fav["item_id"])

        types = [t for t, ids in ids_by_type.items() if ids and t in ITEM_ENTITIES]
        fetched = await asyncio.gather(
            *(self.store.find(ITEM_ENTITIES[t], filters=[In("id", ids_by_type[t])]) for t in types)
        )

        # Keyed by str() so UUID and string ids from different backends match
        lookup: Dict[Tuple[str, str], Row] = {}
        for item_type, page in zip(types, fetched):
            for row in page.rows:
                lookup[(item_type, str(row["id"]))] = row

        return [
            {**fav, "item": lookup.get((fav["item_type"], str(fav["item_id"])))}
            for fav in favorites
        ]
