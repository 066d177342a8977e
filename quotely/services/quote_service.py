"""
Quotely API — Quote Service
============================

What:  Public quote catalogue (list/search, random, detail) and submissions.
Who:   /api/quotes routes.

Moderation:
    Submitted quotes are stored with approved=False (the "moderation
    queue"). Approval happens outside this API. Every public read filters
    approved=True, so a pending quote is invisible until approved.
"""

import logging
import random
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from quotely.exceptions import ConstraintViolationError, NoRowsError, NotFoundError, ValidationError
from quotely.store import AnyOf, Eq, ILike, OrderBy, Row, StoreAdapter, page_offset, validate_page

logger = logging.getLogger(__name__)

APPROVED = Eq("approved", True)
NEWEST_FIRST = OrderBy("created_at", descending=True)


class QuoteService:
    def __init__(self, store: StoreAdapter):
        self.store = store

    async def list_quotes(
        self,
        category: Optional[str] = None,
        author: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Row], int]:
        """
        Approved quotes, newest first, with the exact total.

        Filters:
            category  exact match
            author    case-insensitive substring
            search    substring of text OR author
        """
        validate_page(page, limit)
        filters = [APPROVED]
        if category:
            filters.append(Eq("category", category))
        if author:
            filters.append(ILike("author", author))
        if search:
            filters.append(AnyOf(ILike("text", search), ILike("author", search)))

        result = await self.store.find(
            "quotes",
            filters=filters,
            order_by=[NEWEST_FIRST],
            offset=page_offset(page, limit),
            limit=limit,
            count=True,
        )
        return result.rows, result.total or 0

    async def get_quote(self, quote_id: UUID) -> Row:
        try:
            return await self.store.find_one("quotes", [Eq("id", quote_id), APPROVED])
        except NoRowsError:
            raise NotFoundError(resource="quote", resource_id=str(quote_id))

    async def random_quote(self) -> Row:
        """Uniformly random approved quote: count, then read one row at a random offset."""
        total = await self.store.count("quotes", [APPROVED])
        if total == 0:
            raise NotFoundError(resource="quote")

        page = await self.store.find(
            "quotes",
            filters=[APPROVED],
            order_by=[NEWEST_FIRST],
            offset=random.randrange(total),
            limit=1,
        )
        if not page.rows:
            # Quotes were removed between the count and the read
            raise NotFoundError(resource="quote")
        return page.rows[0]

    async def submit_quote(
        self,
        text: str,
        author: str,
        category: str,
        user_id: UUID,
        source: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Row:
        """
        Queue a quote for moderation. Always stored with approved=False.

        Raises:
            ValidationError: submitting user does not exist
        """
        try:
            row = await self.store.insert(
                "quotes",
                {
                    "text": text,
                    "author": author,
                    "category": category,
                    "source": source or None,
                    "tags": list(tags or []),
                    "submitted_by": user_id,
                    "approved": False,
                    "created_at": datetime.now(timezone.utc),
                },
            )
        except ConstraintViolationError as exc:
            if exc.is_foreign_key:
                raise ValidationError(message="Unknown user", field="userId")
            raise

        logger.info("Quote %s submitted by %s (pending approval)", row.get("id"), user_id)
        return row
