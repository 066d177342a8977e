"""
Quotely API — Aggregation Service (Dashboard & Trending)
=========================================================

What:  Site-wide counts, per-user stats, recent quotes and the trending list.
How:   Independent reads are issued together with asyncio.gather and fail
       fast: if any one of them raises, the whole call raises and no
       partially filled result is returned. A zero in a count always means
       zero rows, never "that query failed".
Who:   /api/dashboard routes.

Trending:
    1. Take the newest `window` approved quotes (the candidate window)
    2. Count likes per candidate with one grouped query (missing → 0)
    3. Stable sort by like_count desc, so ties keep newest-first order
    4. Keep the top `limit`

    The window is clamped to at least `limit`, otherwise the ranking could
    never fill the requested number of slots.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import UUID

from quotely.config import Settings, settings as default_settings
from quotely.store import Eq, In, OrderBy, Row, StoreAdapter

logger = logging.getLogger(__name__)

# Submitter fields safe to expose alongside a quote
SUBMITTER_FIELDS = ("username", "avatar_url")


@dataclass
class DashboardCounts:
    total_quotes: int
    total_users: int
    total_favorites: int
    total_likes: int


@dataclass
class UserStats:
    favorites_count: int
    submitted_quotes_count: int


@dataclass
class Dashboard:
    counts: DashboardCounts
    user_stats: UserStats
    recent_quotes: List[Row] = field(default_factory=list)


class AggregationService:
    def __init__(self, store: StoreAdapter, config: Optional[Settings] = None):
        self.store = store
        self.config = config or default_settings

    async def dashboard_counts(self) -> DashboardCounts:
        total_quotes, total_users, total_favorites, total_likes = await asyncio.gather(
            self.store.count("quotes", [Eq("approved", True)]),
            self.store.count("users"),
            self.store.count("favorites"),
            self.store.count("quote_likes"),
        )
        return DashboardCounts(
            total_quotes=total_quotes,
            total_users=total_users,
            total_favorites=total_favorites,
            total_likes=total_likes,
        )

    async def user_stats(self, user_id: UUID) -> UserStats:
        favorites_count, submitted = await asyncio.gather(
            self.store.count("favorites", [Eq("user_id", user_id)]),
            self.store.count("quotes", [Eq("submitted_by", user_id)]),
        )
        return UserStats(favorites_count=favorites_count, submitted_quotes_count=submitted)

    async def recent_quotes(self, limit: int = 10) -> List[Row]:
        page = await self.store.find(
            "quotes",
            filters=[Eq("approved", True)],
            order_by=[OrderBy("created_at", descending=True)],
            limit=limit,
        )
        return page.rows

    async def dashboard(self, user_id: UUID, recent_limit: int = 10) -> Dashboard:
        """Everything GET /api/dashboard shows, fetched concurrently."""
        counts, stats, recent = await asyncio.gather(
            self.dashboard_counts(),
            self.user_stats(user_id),
            self.recent_quotes(recent_limit),
        )
        return Dashboard(counts=counts, user_stats=stats, recent_quotes=recent)

    async def trending(self, limit: Optional[int] = None, window: Optional[int] = None) -> List[Dict[str, Any]]:
        limit = limit or self.config.trending_limit
        window = max(window or self.config.trending_window, limit)

        candidates = await self.recent_quotes(window)
        if not candidates:
            return []

        quote_ids = [q["id"] for q in candidates]
        submitter_ids = list({q["submitted_by"] for q in candidates if q.get("submitted_by")})

        like_counts, submitters = await asyncio.gather(
            self.store.count_by("quote_likes", "quote_id", [In("quote_id", quote_ids)]),
            self._submitters(submitter_ids),
        )
        counts_by_id = {str(k): v for k, v in like_counts.items()}

        ranked = [
            {
                **quote,
                "like_count": counts_by_id.get(str(quote["id"]), 0),
                "submitter": submitters.get(str(quote.get("submitted_by"))),
            }
            for quote in candidates
        ]
        # sorted() is stable: equal like counts stay newest-first
        ranked = sorted(ranked, key=lambda q: -q["like_count"])
        return ranked[:limit]

    async def _submitters(self, user_ids: List[Any]) -> Dict[str, Dict[str, Any]]:
        if not user_ids:
            return {}
        page = await self.store.find("users", filters=[In("id", user_ids)])
        return {
            str(user["id"]): {name: user.get(name) for name in SUBMITTER_FIELDS}
            for user in page.rows
        }
