"""
Quotely API — Abstract Store Adapter Interface
===============================================

What:  The contract every row-store backend implements, plus the filter
       predicates and pagination helpers shared by all of them.
How:   Concrete backends (SQLAlchemyStore, PostgrestStore) inherit from
       StoreAdapter and translate predicates into their own query language.
Who:   Called by every service; services never see SQL or HTTP.

Filters:
    A `filters` sequence is a conjunction (AND) of predicates:
        Eq(column, value)        column = value
        ILike(column, text)      column contains text, case-insensitive
        In(column, values)       column IN values
        AnyOf(p1, p2, ...)       p1 OR p2 OR ...   (free-text search)

Pagination:
    Offset-based. Page p (1-indexed) with limit L covers the half-open row
    range [(p-1)*L, p*L). Totals always come from a separate exact count,
    never from the length of the page read.

Errors:
    StoreUnavailableError     backend unreachable / timed out
    ConstraintViolationError  write rejected by a constraint (see .code)
    NoRowsError               find_one matched nothing
    StoreError                anything else the backend rejected
"""

import asyncio
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from quotely.exceptions import NoRowsError, ValidationError

Row = Dict[str, Any]


# ══════════════════════════════════════════════════════════════════════════
# Filter Predicates
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any


@dataclass(frozen=True)
class ILike:
    """Case-insensitive "contains substring". `text` is matched literally."""
    column: str
    text: str


@dataclass(frozen=True)
class In:
    column: str
    values: tuple

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True, init=False)
class AnyOf:
    predicates: tuple

    def __init__(self, *predicates):
        object.__setattr__(self, "predicates", tuple(predicates))


Predicate = Union[Eq, ILike, In, AnyOf]


@dataclass(frozen=True)
class OrderBy:
    column: str
    descending: bool = True


@dataclass
class Page:
    """
    Result of StoreAdapter.find().

    `total` is the exact number of rows matching the filters (ignoring
    offset/limit) when the caller asked for it, otherwise None.
    """
    rows: List[Row] = field(default_factory=list)
    total: Optional[int] = None


# ══════════════════════════════════════════════════════════════════════════
# Pagination Helpers
# ══════════════════════════════════════════════════════════════════════════


def validate_page(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError(message="page must be 1 or greater", field="page")
    if limit < 1:
        raise ValidationError(message="limit must be 1 or greater", field="limit")


def page_offset(page: int, limit: int) -> int:
    """First row index of `page`: page 3 with limit 20 starts at row 40."""
    validate_page(page, limit)
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit); 45 rows at 20 per page is 3 pages, 0 rows is 0 pages."""
    if limit < 1:
        raise ValidationError(message="limit must be 1 or greater", field="limit")
    return math.ceil(total / limit) if total > 0 else 0


# ══════════════════════════════════════════════════════════════════════════
# Adapter Contract
# ══════════════════════════════════════════════════════════════════════════


class StoreAdapter(ABC):
    """
    Uniform interface to a remote row-store.

    Contract:
        - Entities are table names ("quotes", "favorites", ...)
        - Rows are plain dicts keyed by column name
        - Every call is a single attempt; nothing is retried here
        - Backend-specific failures are translated into StoreError subclasses
    """

    @abstractmethod
    async def _select(
        self,
        entity: str,
        filters: Sequence[Predicate],
        order_by: Sequence[OrderBy],
        offset: int,
        limit: Optional[int],
    ) -> List[Row]:
        """Read one window of rows."""
        ...

    @abstractmethod
    async def count(self, entity: str, filters: Sequence[Predicate] = ()) -> int:
        """Exact number of rows matching `filters`."""
        ...

    @abstractmethod
    async def count_by(
        self,
        entity: str,
        column: str,
        filters: Sequence[Predicate] = (),
    ) -> Dict[Any, int]:
        """
        Row counts grouped by `column` among rows matching `filters`.

        Values with no matching rows are absent from the result; callers
        default them to 0.
        """
        ...

    @abstractmethod
    async def insert(self, entity: str, record: Row) -> Row:
        """
        Insert one row and return it as stored (defaults filled in).

        Raises:
            ConstraintViolationError: unique/foreign-key/check violation
        """
        ...

    @abstractmethod
    async def update(
        self,
        entity: str,
        filters: Sequence[Predicate],
        values: Row,
    ) -> List[Row]:
        """Update matching rows and return them as stored."""
        ...

    @abstractmethod
    async def delete(self, entity: str, filters: Sequence[Predicate]) -> int:
        """Delete matching rows; returns how many were deleted (0 is not an error)."""
        ...

    @abstractmethod
    async def ping(self) -> None:
        """Cheap connectivity probe. Raises StoreUnavailableError when unreachable."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the adapter."""
        ...

    async def find(
        self,
        entity: str,
        filters: Sequence[Predicate] = (),
        order_by: Sequence[OrderBy] = (),
        offset: int = 0,
        limit: Optional[int] = None,
        count: bool = False,
    ) -> Page:
        """
        Read rows, optionally with the exact total for pagination.

        With count=True the page read and the count query run concurrently;
        if either fails the whole call fails.
        """
        if not count:
            rows = await self._select(entity, filters, order_by, offset, limit)
            return Page(rows=rows)

        rows, total = await asyncio.gather(
            self._select(entity, filters, order_by, offset, limit),
            self.count(entity, filters),
        )
        return Page(rows=rows, total=total)

    async def find_one(self, entity: str, filters: Sequence[Predicate]) -> Row:
        """
        Single-row lookup.

        Raises:
            NoRowsError: nothing matched (callers decide what "missing" means)
        """
        rows = await self._select(entity, filters, (), 0, 1)
        if not rows:
            raise NoRowsError(entity=entity)
        return rows[0]
