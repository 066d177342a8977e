"""
Quotely API — User Model
=========================

What:  ORM model for the `users` table (account + public profile fields).
How:   Created at signup; mutated via profile update; never hard-deleted.
       `password_hash` is never exposed through any response schema.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from quotely.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Login identity. Stored lower-cased by AuthService.
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)

    # bcrypt hash ($2b$...)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    # ── Profile ───────────────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    username: Mapped[str] = mapped_column(String(60), nullable=False, unique=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
