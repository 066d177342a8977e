"""
Quotely API — Like Service
===========================

Quote likes live in `quote_likes`, one row per (user_id, quote_id).
Like counts are always derived from that table; nothing is denormalized
onto the quote row.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from quotely.exceptions import ConstraintViolationError, NoRowsError, NotFoundError
from quotely.store import Eq, StoreAdapter

logger = logging.getLogger(__name__)


@dataclass
class LikeToggleResult:
    action: str  # "added" | "removed"
    like_count: int


class LikeService:
    def __init__(self, store: StoreAdapter):
        self.store = store

    async def like_count(self, quote_id: UUID) -> int:
        return await self.store.count("quote_likes", [Eq("quote_id", quote_id)])

    async def toggle_like(self, user_id: UUID, quote_id: UUID) -> LikeToggleResult:
        """
        Unlike if liked, like otherwise; returns the action and the new count.

        Raises:
            NotFoundError: quote does not exist or is still pending
        """
        try:
            await self.store.find_one("quotes", [Eq("id", quote_id), Eq("approved", True)])
        except NoRowsError:
            raise NotFoundError(resource="quote", resource_id=str(quote_id))

        deleted = await self.store.delete(
            "quote_likes", [Eq("user_id", user_id), Eq("quote_id", quote_id)]
        )
        if deleted:
            action = "removed"
        else:
            action = "added"
            try:
                await self.store.insert(
                    "quote_likes",
                    {
                        "user_id": user_id,
                        "quote_id": quote_id,
                        "created_at": datetime.now(timezone.utc),
                    },
                )
            except ConstraintViolationError as exc:
                # Another request liked it first; the end state is the same
                if not exc.is_duplicate_key:
                    raise

        logger.info("User %s %s like on quote %s", user_id, action, quote_id)
        return LikeToggleResult(action=action, like_count=await self.like_count(quote_id))
