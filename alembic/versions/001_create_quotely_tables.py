"""Create quotely tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: users, quotes, quote_likes, proverbs, favorites,
       contact_submissions, newsletter_subscribers.
How:   PostgreSQL UUID primary keys defaulting to gen_random_uuid() and
       TIMESTAMP WITH TIME ZONE defaulting to now().

Constraints the services depend on:
    users.email / users.username unique       → signup duplicate detection
    favorites (user_id, item_id, item_type)   → idempotent add_favorite
    quote_likes (user_id, quote_id)           → like de-duplication
    newsletter_subscribers.email unique       → "Already subscribed"

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(128), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("username", sa.String(60), nullable=False),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "quotes",
        _id(),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("author", sa.String(200), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("source", sa.String(300), nullable=True),
        sa.Column("submitted_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_quotes"),
        sa.ForeignKeyConstraint(
            ["submitted_by"], ["users.id"], name="fk_quotes_submitted_by", ondelete="SET NULL"
        ),
    )
    op.create_index("idx_quotes_submitted_by", "quotes", ["submitted_by"])
    op.create_index(
        "idx_quotes_approved_created_at",
        "quotes",
        ["approved", sa.text("created_at DESC")],
    )

    op.create_table(
        "quote_likes",
        _id(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("quote_id", postgresql.UUID(as_uuid=True), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_quote_likes"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["quote_id"], ["quotes.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "quote_id", name="uq_quote_likes_user_quote"),
    )
    op.create_index("idx_quote_likes_quote_id", "quote_likes", ["quote_id"])

    op.create_table(
        "proverbs",
        _id(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("origin", sa.String(120), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("meaning", sa.Text(), nullable=True),
        sa.Column("translation", sa.Text(), nullable=True),
        sa.Column("likes_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_proverbs"),
    )
    op.create_index("idx_proverbs_likes_count", "proverbs", [sa.text("likes_count DESC")])

    op.create_table(
        "favorites",
        _id(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("item_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("item_type", sa.String(20), nullable=False, server_default=sa.text("'quote'")),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_favorites"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "item_id", "item_type", name="uq_favorites_user_item"),
        sa.CheckConstraint("item_type IN ('quote', 'proverb')", name="ck_favorites_item_type"),
    )
    op.create_index(
        "idx_favorites_user_created_at",
        "favorites",
        ["user_id", sa.text("created_at DESC")],
    )

    op.create_table(
        "contact_submissions",
        _id(),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column(
            "subject", sa.String(200), nullable=False, server_default=sa.text("'General Inquiry'")
        ),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_contact_submissions"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
    )

    op.create_table(
        "newsletter_subscribers",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(120), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_newsletter_subscribers"),
        sa.UniqueConstraint("email", name="uq_newsletter_subscribers_email"),
    )


def downgrade() -> None:
    op.drop_table("newsletter_subscribers")
    op.drop_table("contact_submissions")
    op.drop_index("idx_favorites_user_created_at", table_name="favorites")
    op.drop_table("favorites")
    op.drop_index("idx_proverbs_likes_count", table_name="proverbs")
    op.drop_table("proverbs")
    op.drop_index("idx_quote_likes_quote_id", table_name="quote_likes")
    op.drop_table("quote_likes")
    op.drop_index("idx_quotes_approved_created_at", table_name="quotes")
    op.drop_index("idx_quotes_submitted_by", table_name="quotes")
    op.drop_table("quotes")
    op.drop_table("users")
