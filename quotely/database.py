"""
Quotely API — Database Engine & ORM Base
=========================================

What:  Declarative base for the ORM models plus an async engine factory.
How:   `create_engine()` builds an async SQLAlchemy engine with connection
       pooling; `create_schema()` creates every table registered on Base.
Who:   Used by SQLAlchemyStore (engine), Alembic (metadata) and tests.
When:  The engine is created once in the application lifespan and disposed
       on shutdown; nothing here is created at import time.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests, local development) skip pool sizing; the dialect
    picks its own pool.
"""

from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from quotely.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers every model on a single metadata object, which Alembic reads
    for migrations and SQLAlchemyStore reads to resolve entity names to tables.
    """
    pass


def create_engine(
    url: Optional[str] = None,
    config: Optional[Settings] = None,
) -> AsyncEngine:
    """
    Build an async engine for `url` (defaults to settings.database_url).

    Args:
        url: SQLAlchemy async URL, e.g. postgresql+asyncpg://... or sqlite+aiosqlite:///...
        config: Settings to read pool options from (defaults to the global settings)
    """
    config = config or default_settings
    url = url or config.database_url
    kwargs = {"echo": config.log_level == "DEBUG"}

    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    if not is_sqlite:
        kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )

    engine = create_async_engine(url, **kwargs)

    if is_sqlite:
        # SQLite ships with foreign keys off; ON DELETE CASCADE and
        # submitted_by checks need them on for every connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


async def create_schema(engine: AsyncEngine) -> None:
    """
    Create all tables known to Base.metadata (no-op for existing tables).

    Production schemas are managed by Alembic; this is for tests and
    local SQLite databases.
    """
    # Register the models on Base.metadata before creating tables
    import quotely.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

