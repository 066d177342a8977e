"""
Quotely API — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── store:            real SQLAlchemyStore over a temp-file SQLite database
    ├── mock_store:       AsyncMock StoreAdapter for failure injection
    ├── make_user / make_quote / make_proverb: row factories on `store`
    ├── auth_headers:     builds a Bearer header for a user id
    └── client:           httpx AsyncClient over create_app(store=store)

A temp file (not :memory:) backs the SQLite store because every store
operation checks out its own connection, and concurrent reads under
asyncio.gather must all see the same database.
"""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any quotely imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./quotely_test.db"
os.environ["STORE_BACKEND"] = "sql"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-use-0123456789"
os.environ["LOG_LEVEL"] = "WARNING"

from quotely.database import create_engine, create_schema  # noqa: E402
from quotely.security import issue_token  # noqa: E402
from quotely.store import StoreAdapter  # noqa: E402
from quotely.store.sql_store import SQLAlchemyStore  # noqa: E402

BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Stores
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def store(tmp_path):
    """Real SQLAlchemyStore with the full schema on a fresh SQLite file."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'quotely_test.db'}")
    await create_schema(engine)
    sql_store = SQLAlchemyStore(engine)
    yield sql_store
    await sql_store.close()


@pytest.fixture
def mock_store():
    """
    StoreAdapter whose every method is an AsyncMock.

    Usage:
        mock_store.count.side_effect = StoreUnavailableError()
    """
    return AsyncMock(spec=StoreAdapter)


# ══════════════════════════════════════════════════════════════════════════
# Row Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(store):
    counter = {"n": 0}

    async def _make_user(email=None, username=None, name="Test User", password_hash="not-a-real-hash"):
        counter["n"] += 1
        n = counter["n"]
        return await store.insert(
            "users",
            {
                "email": email or f"user{n}@example.com",
                "username": username or f"user{n}",
                "name": name,
                "password_hash": password_hash,
            },
        )

    return _make_user


@pytest.fixture
def make_quote(store):
    """
    Inserts quotes with strictly increasing created_at (minute by minute),
    so "newest first" order is the reverse of creation order.
    """
    counter = {"n": 0}

    async def _make_quote(text=None, author="Anonymous", category="wisdom", approved=True, **extra):
        counter["n"] += 1
        n = counter["n"]
        record = {
            "text": text or f"Quote number {n}",
            "author": author,
            "category": category,
            "tags": [],
            "approved": approved,
            "created_at": BASE_TIME + timedelta(minutes=n),
        }
        record.update(extra)
        return await store.insert("quotes", record)

    return _make_quote


@pytest.fixture
def make_proverb(store):
    counter = {"n": 0}

    async def _make_proverb(content=None, origin="African", likes_count=0, **extra):
        counter["n"] += 1
        n = counter["n"]
        record = {
            "content": content or f"Proverb number {n}",
            "origin": origin,
            "likes_count": likes_count,
            "created_at": BASE_TIME + timedelta(minutes=n),
        }
        record.update(extra)
        return await store.insert("proverbs", record)

    return _make_proverb


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_headers():
    def _auth_headers(user_id: UUID) -> dict:
        return {"Authorization": f"Bearer {issue_token(user_id)}"}

    return _auth_headers


@pytest_asyncio.fixture
async def client(store):
    """
    HTTPX AsyncClient talking to an app wired to the SQLite `store`.

    ASGITransport does not run the lifespan; the store is injected directly.
    """
    from quotely.main import create_app

    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
