"""
Alembic Migration Environment
==============================

What:  Configures Alembic for the async SQLAlchemy engine.
How:   The URL comes from quotely.config (DATABASE_URL), not alembic.ini,
       and target_metadata is Base.metadata with every model registered.
Who:   `alembic upgrade head` / `alembic revision --autogenerate`.

Only relevant for STORE_BACKEND=sql. A PostgREST/Supabase project gets
the same schema by running `alembic upgrade head --sql` and applying the
emitted SQL in the project's SQL editor.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

import quotely.models  # noqa: F401  registers every table on Base.metadata
from quotely.config import settings
from quotely.database import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting (alembic upgrade --sql)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
