"""
Quotely API — Favorite Model
=============================

What:  A saved association between a user and a quote or proverb.

Invariant:
    At most one row per (user_id, item_id, item_type). The unique constraint
    below enforces it; FavoritesService pre-checks before inserting but
    relies on the constraint when two requests race past the pre-check.

item_id has no foreign key:
    item_id points at either quotes.id or proverbs.id depending on
    item_type, so it cannot reference a single table. Favorites whose
    target disappeared are listed with item = null.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from quotely.database import Base

ITEM_TYPES = ("quote", "proverb")


class Favorite(Base):
    __tablename__ = "favorites"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    item_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    item_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="quote", server_default=text("'quote'")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "item_id", "item_type", name="uq_favorites_user_item"),
        CheckConstraint("item_type IN ('quote', 'proverb')", name="ck_favorites_item_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<Favorite(user_id={self.user_id}, item_id={self.item_id}, "
            f"item_type='{self.item_type}')>"
        )


# "My favorites, newest first"
Index("idx_favorites_user_created_at", Favorite.user_id, Favorite.created_at.desc())
