"""
Quotely API — Quote & QuoteLike Models
=======================================

What:  ORM models for the `quotes` table and the `quote_likes` association.

Quote Lifecycle (moderation):
    Pending (approved = false) --(external moderation)--> Approved (approved = true)

    Submissions always start Pending. Moderation happens outside this API;
    every public read path filters on approved = true.

Likes:
    One row per (user_id, quote_id). The unique constraint is the only
    de-duplication mechanism: LikeService treats a unique violation on
    insert as "already liked". Like counts are always derived by counting
    rows, never stored on the quote.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from quotely.database import Base


class Quote(Base):
    __tablename__ = "quotes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    source: Mapped[str | None] = mapped_column(String(300), nullable=True)

    # Attribution only; quotes stay system-owned
    submitted_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=sql_text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (Index("idx_quotes_submitted_by", "submitted_by"),)

    def __repr__(self) -> str:
        return f"<Quote(id={self.id}, author='{self.author}', approved={self.approved})>"


# Public listing: WHERE approved = true ORDER BY created_at DESC
Index("idx_quotes_approved_created_at", Quote.approved, Quote.created_at.desc())


class QuoteLike(Base):
    __tablename__ = "quote_likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    quote_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "quote_id", name="uq_quote_likes_user_quote"),
        # Trending groups likes by quote_id
        Index("idx_quote_likes_quote_id", "quote_id"),
    )
