"""
Quotely API — Store Adapter Package
====================================

Uniform row-store access for the services layer:

    StoreAdapter (abstract)   store/base.py
    ├── SQLAlchemyStore       store/sql_store.py       STORE_BACKEND=sql
    └── PostgrestStore        store/postgrest_store.py STORE_BACKEND=postgrest

`create_store()` is called once from the application lifespan; the handle
is kept on app.state and injected into services per request.
"""

import logging
from typing import Optional

from quotely.config import Settings, settings as default_settings
from quotely.store.base import (
    AnyOf,
    Eq,
    ILike,
    In,
    OrderBy,
    Page,
    Predicate,
    Row,
    StoreAdapter,
    page_offset,
    total_pages,
    validate_page,
)

logger = logging.getLogger(__name__)

__all__ = [
    "AnyOf",
    "Eq",
    "ILike",
    "In",
    "OrderBy",
    "Page",
    "Predicate",
    "Row",
    "StoreAdapter",
    "create_store",
    "page_offset",
    "total_pages",
    "validate_page",
]


def create_store(config: Optional[Settings] = None) -> StoreAdapter:
    """Build the backend selected by STORE_BACKEND."""
    config = config or default_settings

    if config.store_backend == "postgrest":
        from quotely.store.postgrest_store import PostgrestStore

        logger.info("Using PostgREST store at %s", config.supabase_url)
        return PostgrestStore(
            base_url=config.supabase_url,
            api_key=config.supabase_service_key,
            timeout=config.store_timeout_seconds,
        )

    from quotely.database import create_engine
    from quotely.store.sql_store import SQLAlchemyStore

    logger.info("Using SQLAlchemy store (%s)", config.database_url.split("://", 1)[0])
    return SQLAlchemyStore(create_engine(config=config))
