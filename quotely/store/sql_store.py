"""
Quotely API — SQLAlchemy Store Backend
=======================================

What:  StoreAdapter implementation over an async SQLAlchemy engine
       (PostgreSQL via asyncpg in production, SQLite via aiosqlite in tests).
How:   Entity names resolve to tables on Base.metadata; predicates compile
       to SQLAlchemy Core expressions. Every operation checks out its own
       connection from the pool, so independent reads can run concurrently
       with asyncio.gather (a single AsyncSession cannot).
Who:   Built by create_store() when STORE_BACKEND=sql.

Transactions:
    Reads use engine.connect(); each write runs in its own engine.begin()
    block and commits on exit. There are no multi-statement transactions:
    composite operations (check-then-insert) rely on table constraints.

Error Translation:
    IntegrityError                        → ConstraintViolationError(code=SQLSTATE)
    OperationalError / InterfaceError /
    OSError / TimeoutError                → StoreUnavailableError
    any other SQLAlchemyError             → StoreError
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from sqlalchemy import MetaData, Table, and_, delete, func, insert, or_, select, text, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from quotely.database import Base
from quotely.exceptions import (
    FOREIGN_KEY_VIOLATION,
    INTEGRITY_VIOLATION,
    UNIQUE_VIOLATION,
    ConstraintViolationError,
    StoreError,
    StoreUnavailableError,
)
from quotely.store.base import AnyOf, Eq, ILike, In, OrderBy, Predicate, Row, StoreAdapter

logger = logging.getLogger(__name__)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text is matched literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def sqlstate_of(exc: IntegrityError) -> str:
    """
    Best-effort SQLSTATE for an IntegrityError.

    asyncpg exposes it as `sqlstate`/`pgcode`; SQLite has none, so the
    message is inspected instead.
    """
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if isinstance(code, str) and code:
            return code

    message = str(orig).lower()
    if "unique" in message or "duplicate" in message:
        return UNIQUE_VIOLATION
    if "foreign key" in message:
        return FOREIGN_KEY_VIOLATION
    return INTEGRITY_VIOLATION


class SQLAlchemyStore(StoreAdapter):
    """StoreAdapter backed by an AsyncEngine; owns the engine and disposes it on close()."""

    def __init__(self, engine: AsyncEngine, metadata: Optional[MetaData] = None):
        self.engine = engine
        self.metadata = metadata if metadata is not None else Base.metadata
        if metadata is None:
            # Make sure every model is registered on Base.metadata
            import quotely.models  # noqa: F401

    # ── Query Building ────────────────────────────────────────────────────

    def _table(self, entity: str) -> Table:
        try:
            return self.metadata.tables[entity]
        except KeyError:
            raise StoreError(context={"entity": entity, "reason": "unknown entity"})

    def _column(self, table: Table, name: str):
        try:
            return table.c[name]
        except KeyError:
            raise StoreError(
                context={"entity": table.name, "column": name, "reason": "unknown column"}
            )

    def _clause(self, table: Table, predicate: Predicate):
        if isinstance(predicate, Eq):
            column = self._column(table, predicate.column)
            if predicate.value is None:
                return column.is_(None)
            return column == predicate.value
        if isinstance(predicate, ILike):
            column = self._column(table, predicate.column)
            return column.ilike(f"%{escape_like(predicate.text)}%", escape="\\")
        if isinstance(predicate, In):
            return self._column(table, predicate.column).in_(predicate.values)
        if isinstance(predicate, AnyOf):
            return or_(*(self._clause(table, p) for p in predicate.predicates))
        raise StoreError(context={"reason": f"unsupported predicate {type(predicate).__name__}"})

    def _where(self, table: Table, filters: Sequence[Predicate]):
        clauses = [self._clause(table, p) for p in filters]
        return and_(*clauses) if clauses else None

    @staticmethod
    def _apply_where(stmt, where):
        return stmt.where(where) if where is not None else stmt

    # ── Error Translation ─────────────────────────────────────────────────

    @asynccontextmanager
    async def _guard(self, operation: str, entity: str) -> AsyncIterator[None]:
        try:
            yield
        except IntegrityError as exc:
            code = sqlstate_of(exc)
            logger.info("Constraint violation on %s %s (code=%s)", operation, entity, code)
            raise ConstraintViolationError(
                code=code,
                context={"operation": operation, "entity": entity},
            ) from exc
        except (OperationalError, InterfaceError, OSError, asyncio.TimeoutError) as exc:
            logger.error("Store unavailable during %s %s: %s", operation, entity, exc)
            raise StoreUnavailableError(
                context={"operation": operation, "entity": entity, "error_type": type(exc).__name__},
            ) from exc
        except SQLAlchemyError as exc:
            logger.error("Store error during %s %s: %s", operation, entity, exc)
            raise StoreError(
                context={"operation": operation, "entity": entity, "error_type": type(exc).__name__},
            ) from exc

    # ── StoreAdapter ──────────────────────────────────────────────────────

    async def _select(
        self,
        entity: str,
        filters: Sequence[Predicate],
        order_by: Sequence[OrderBy],
        offset: int,
        limit: Optional[int],
    ) -> List[Row]:
        table = self._table(entity)
        stmt = self._apply_where(select(table), self._where(table, filters))
        for order in order_by:
            column = self._column(table, order.column)
            stmt = stmt.order_by(column.desc() if order.descending else column.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._guard("select", entity):
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                return [dict(row._mapping) for row in result]

    async def count(self, entity: str, filters: Sequence[Predicate] = ()) -> int:
        table = self._table(entity)
        stmt = self._apply_where(
            select(func.count()).select_from(table), self._where(table, filters)
        )
        async with self._guard("count", entity):
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                return int(result.scalar_one())

    async def count_by(
        self,
        entity: str,
        column: str,
        filters: Sequence[Predicate] = (),
    ) -> Dict[Any, int]:
        table = self._table(entity)
        key = self._column(table, column)
        stmt = self._apply_where(select(key, func.count()), self._where(table, filters))
        stmt = stmt.group_by(key)
        async with self._guard("count_by", entity):
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                return {value: int(n) for value, n in result}

    async def insert(self, entity: str, record: Row) -> Row:
        table = self._table(entity)
        stmt = insert(table).values(**record).returning(*table.c)
        async with self._guard("insert", entity):
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
                return dict(result.one()._mapping)

    async def update(
        self,
        entity: str,
        filters: Sequence[Predicate],
        values: Row,
    ) -> List[Row]:
        table = self._table(entity)
        stmt = self._apply_where(update(table), self._where(table, filters))
        stmt = stmt.values(**values).returning(*table.c)
        async with self._guard("update", entity):
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
                return [dict(row._mapping) for row in result]

    async def delete(self, entity: str, filters: Sequence[Predicate]) -> int:
        table = self._table(entity)
        stmt = self._apply_where(delete(table), self._where(table, filters))
        async with self._guard("delete", entity):
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
                return max(result.rowcount or 0, 0)

    async def ping(self) -> None:
        async with self._guard("ping", "-"):
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self.engine.dispose()
