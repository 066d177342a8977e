"""
Quotely API — PostgREST Store Backend (Supabase)
=================================================

What:  StoreAdapter implementation that talks to a hosted PostgREST endpoint
       (the REST layer of a Supabase project) over HTTP.
How:   One httpx.AsyncClient per adapter, created at startup and closed on
       shutdown. Predicates render to PostgREST query-string operators.
Who:   Built by create_store() when STORE_BACKEND=postgrest.

Query rendering:
    Eq(c, v)            c=eq.v            (c=is.null for None)
    ILike(c, t)         c=ilike.*t*           (c=imatch.<escaped t> when t has '*')
    In(c, [a, b])       c=in.(a,b)
    AnyOf(p1, p2)       or=(c1.op.v1,c2.op.v2)
    OrderBy             order=c1.desc,c2.asc
    offset / limit      offset=N&limit=M

Counting:
    HEAD with `Prefer: count=exact`; the total is the part after '/' in the
    Content-Range response header (e.g. "0-19/45" or "*/45").
    count_by with In(column, ids) issues one such HEAD per id, concurrently;
    without it, the key column is paged through with GET and tallied.

Error Translation:
    transport errors / timeouts / 5xx     → StoreUnavailableError
    SQLSTATE 23xxx (or bare 409)          → ConstraintViolationError(code)
    PGRST116                              → NoRowsError
    any other non-2xx                     → StoreError
"""

import asyncio
import logging
import re
import uuid
from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from quotely.exceptions import (
    UNIQUE_VIOLATION,
    ConstraintViolationError,
    NoRowsError,
    StoreError,
    StoreUnavailableError,
)
from quotely.store.base import AnyOf, Eq, ILike, In, OrderBy, Predicate, Row, StoreAdapter

logger = logging.getLogger(__name__)

# Characters with meaning inside PostgREST in.() lists and or=() groups
_RESERVED = set(',.:()"\\ ')

# Rows per GET when paging a key column; at or below the usual db-max-rows
COUNT_BY_PAGE_SIZE = 1000


def format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def quote_value(value: Any) -> str:
    """Double-quote a value when it contains PostgREST reserved characters."""
    text = format_value(value)
    if any(ch in _RESERVED for ch in text):
        return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def jsonable(record: Row) -> Row:
    """Convert UUIDs and datetimes so the record can be sent as JSON."""
    out = {}
    for key, value in record.items():
        if isinstance(value, uuid.UUID):
            out[key] = str(value)
        elif isinstance(value, (datetime, date)):
            out[key] = value.isoformat()
        else:
            out[key] = value
    return out


def render_operator(predicate: Predicate, grouped: bool) -> str:
    """
    Render the `op.value` part of a predicate.

    Inside or=() groups values must be quoted when they contain reserved
    characters; at the top level only in.() lists need quoting.
    """
    if isinstance(predicate, Eq):
        if predicate.value is None:
            return "is.null"
        value = quote_value(predicate.value) if grouped else format_value(predicate.value)
        return f"eq.{value}"
    if isinstance(predicate, ILike):
        # PostgREST turns every `*` in an ilike value into `%`, so a literal
        # asterisk can only be matched through a case-insensitive regex
        if "*" in predicate.text:
            pattern = re.escape(predicate.text)
            return f"imatch.{quote_value(pattern) if grouped else pattern}"
        pattern = f"*{escape_like(predicate.text)}*"
        return f"ilike.{quote_value(pattern) if grouped else pattern}"
    if isinstance(predicate, In):
        return "in.(" + ",".join(quote_value(v) for v in predicate.values) + ")"
    raise StoreError(context={"reason": f"unsupported predicate {type(predicate).__name__}"})


def render_group(predicate: AnyOf) -> str:
    parts = []
    for inner in predicate.predicates:
        if isinstance(inner, AnyOf):
            parts.append("or" + render_group(inner))
        else:
            parts.append(f"{inner.column}.{render_operator(inner, grouped=True)}")
    return "(" + ",".join(parts) + ")"


def render_filters(filters: Sequence[Predicate]) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = []
    for predicate in filters:
        if isinstance(predicate, AnyOf):
            params.append(("or", render_group(predicate)))
        else:
            params.append((predicate.column, render_operator(predicate, grouped=False)))
    return params


def parse_content_range(header: Optional[str]) -> int:
    """'0-19/45' → 45, '*/0' → 0."""
    if not header or "/" not in header:
        raise StoreError(context={"reason": "missing Content-Range total", "header": header})
    total = header.rsplit("/", 1)[1]
    if total == "*":
        raise StoreError(context={"reason": "count not returned", "header": header})
    return int(total)


class PostgrestStore(StoreAdapter):
    """
    StoreAdapter over a PostgREST HTTP API.

    Args:
        base_url: Project URL (https://<ref>.supabase.co); "/rest/v1" is appended
        api_key: Service role key, sent as both `apikey` and bearer token
        timeout: Per-request timeout in seconds (single attempt, no retries)
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    # ── HTTP Plumbing ─────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        entity: str,
        operation: str,
        params: Optional[List[Tuple[str, str]]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        path = f"/{entity}" if entity else "/"
        try:
            response = await self.client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TransportError as exc:
            logger.error("Store unavailable during %s %s: %s", operation, entity, exc)
            raise StoreUnavailableError(
                context={"operation": operation, "entity": entity, "error_type": type(exc).__name__},
            ) from exc

        self._raise_for_status(response, operation, entity)
        return response

    def _raise_for_status(self, response: httpx.Response, operation: str, entity: str) -> None:
        if response.is_success:
            return

        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {}
        code = payload.get("code") if isinstance(payload, dict) else None
        context = {
            "operation": operation,
            "entity": entity,
            "status": response.status_code,
            "code": code,
        }

        if code == "PGRST116":
            raise NoRowsError(entity=entity)
        if isinstance(code, str) and code.startswith("23"):
            logger.info("Constraint violation on %s %s (code=%s)", operation, entity, code)
            raise ConstraintViolationError(code=code, context=context)
        if response.status_code == 409:
            raise ConstraintViolationError(code=UNIQUE_VIOLATION, context=context)
        if response.status_code >= 500:
            logger.error("Store returned %d during %s %s", response.status_code, operation, entity)
            raise StoreUnavailableError(context=context)

        logger.error(
            "Store rejected %s %s: status=%d code=%s message=%s",
            operation, entity, response.status_code, code,
            payload.get("message") if isinstance(payload, dict) else None,
        )
        raise StoreError(context=context)

    # ── StoreAdapter ──────────────────────────────────────────────────────

    async def _select(
        self,
        entity: str,
        filters: Sequence[Predicate],
        order_by: Sequence[OrderBy],
        offset: int,
        limit: Optional[int],
    ) -> List[Row]:
        params = [("select", "*")] + render_filters(filters)
        if order_by:
            params.append(
                ("order", ",".join(f"{o.column}.{'desc' if o.descending else 'asc'}" for o in order_by))
            )
        if offset:
            params.append(("offset", str(offset)))
        if limit is not None:
            params.append(("limit", str(limit)))

        response = await self._request("GET", entity, "select", params=params)
        return response.json()

    async def count(self, entity: str, filters: Sequence[Predicate] = ()) -> int:
        params = [("select", "*")] + render_filters(filters)
        response = await self._request(
            "HEAD", entity, "count", params=params, headers={"Prefer": "count=exact"}
        )
        return parse_content_range(response.headers.get("Content-Range"))

    async def count_by(
        self,
        entity: str,
        column: str,
        filters: Sequence[Predicate] = (),
    ) -> Dict[Any, int]:
        # Aggregate functions are disabled on most PostgREST deployments and a
        # plain GET is truncated at db-max-rows, so count per key server-side
        keys = next((p for p in filters if isinstance(p, In) and p.column == column), None)
        if keys is None:
            return await self._tally_pages(entity, column, filters)

        rest = [p for p in filters if p is not keys]
        values = list(dict.fromkeys(format_value(v) for v in keys.values))
        totals = await asyncio.gather(
            *(self.count(entity, rest + [Eq(column, value)]) for value in values)
        )
        return {value: total for value, total in zip(values, totals) if total}

    async def _tally_pages(
        self,
        entity: str,
        column: str,
        filters: Sequence[Predicate],
    ) -> Dict[Any, int]:
        tally: Counter = Counter()
        offset = 0
        while True:
            params = [("select", column)] + render_filters(filters) + [
                ("order", f"{column}.asc"),
                ("offset", str(offset)),
                ("limit", str(COUNT_BY_PAGE_SIZE)),
            ]
            response = await self._request("GET", entity, "count_by", params=params)
            rows = response.json()
            if not rows:
                return dict(tally)
            tally.update(row[column] for row in rows)
            offset += len(rows)

    async def insert(self, entity: str, record: Row) -> Row:
        response = await self._request(
            "POST",
            entity,
            "insert",
            json=jsonable(record),
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise StoreError(context={"operation": "insert", "entity": entity, "reason": "no row returned"})
        return rows[0]

    async def update(
        self,
        entity: str,
        filters: Sequence[Predicate],
        values: Row,
    ) -> List[Row]:
        response = await self._request(
            "PATCH",
            entity,
            "update",
            params=render_filters(filters),
            json=jsonable(values),
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def delete(self, entity: str, filters: Sequence[Predicate]) -> int:
        response = await self._request(
            "DELETE",
            entity,
            "delete",
            params=render_filters(filters),
            headers={"Prefer": "return=representation"},
        )
        return len(response.json())

    async def ping(self) -> None:
        await self._request("GET", "", "ping")

    async def close(self) -> None:
        await self.client.aclose()
