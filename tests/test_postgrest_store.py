"""
Quotely API — PostgrestStore Tests
===================================

What:  The HTTP row-store backend, driven through httpx.MockTransport so no
       network is touched.

What we test:
    ✅ predicate rendering (eq / is.null / ilike / in / or groups)
    ✅ reads send select, order, offset and limit
    ✅ count reads the total from Content-Range
    ✅ count_by counts each key server-side, so db-max-rows cannot truncate it
    ✅ a literal `*` in a search goes through imatch, not ilike
    ✅ error translation: 23505, 23503, 409, PGRST116, 5xx, transport errors
"""

import json
import uuid

import httpx
import pytest

from quotely.exceptions import (
    FOREIGN_KEY_VIOLATION,
    UNIQUE_VIOLATION,
    ConstraintViolationError,
    NoRowsError,
    StoreError,
    StoreUnavailableError,
)
from quotely.store import AnyOf, Eq, ILike, In, OrderBy
from quotely.store.postgrest_store import (
    PostgrestStore,
    parse_content_range,
    render_filters,
)


def make_store(handler) -> PostgrestStore:
    return PostgrestStore(
        base_url="https://example.supabase.co/",
        api_key="service-key",
        transport=httpx.MockTransport(handler),
    )


class TestRendering:

    def test_eq_and_null(self):
        assert render_filters([Eq("approved", True)]) == [("approved", "eq.true")]
        assert render_filters([Eq("submitted_by", None)]) == [("submitted_by", "is.null")]

    def test_ilike_escapes_wildcards(self):
        assert render_filters([ILike("text", "100%")]) == [("text", "ilike.*100\\%*")]

    def test_asterisk_is_matched_literally(self):
        assert render_filters([ILike("text", "a*b")]) == [("text", "imatch.a\\*b")]

        params = render_filters([AnyOf(ILike("text", "2*3"), Eq("author", "x"))])
        assert params == [("or", '(text.imatch."2\\\\*3",author.eq.x)')]

    def test_in_list_quotes_reserved_characters(self):
        params = render_filters([In("author", ["Twain", "Lao, Tzu"])])
        assert params == [("author", 'in.(Twain,"Lao, Tzu")')]

    def test_any_of_renders_or_group(self):
        params = render_filters([AnyOf(ILike("text", "hope"), ILike("author", "king"))])
        assert params == [("or", "(text.ilike.*hope*,author.ilike.*king*)")]

    def test_any_of_quotes_values_with_commas(self):
        params = render_filters([AnyOf(ILike("text", "a,b"), Eq("author", "x"))])
        assert params == [("or", '(text.ilike."*a,b*",author.eq.x)')]

    @pytest.mark.parametrize("header,total", [("0-19/45", 45), ("*/0", 0), ("*/7", 7)])
    def test_parse_content_range(self, header, total):
        assert parse_content_range(header) == total

    @pytest.mark.parametrize("header", [None, "", "0-19/*"])
    def test_parse_content_range_without_total(self, header):
        with pytest.raises(StoreError):
            parse_content_range(header)


class TestReads:

    @pytest.mark.asyncio
    async def test_find_sends_query_and_counts(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.method == "HEAD":
                return httpx.Response(200, headers={"Content-Range": "40-44/45"})
            return httpx.Response(200, json=[{"id": "q1"}, {"id": "q2"}])

        store = make_store(handler)
        page = await store.find(
            "quotes",
            filters=[Eq("approved", True)],
            order_by=[OrderBy("created_at")],
            offset=40,
            limit=20,
            count=True,
        )
        await store.close()

        assert page.total == 45
        assert [r["id"] for r in page.rows] == ["q1", "q2"]

        get = next(r for r in seen if r.method == "GET")
        assert get.url.path == "/rest/v1/quotes"
        assert get.url.params["approved"] == "eq.true"
        assert get.url.params["order"] == "created_at.desc"
        assert get.url.params["offset"] == "40"
        assert get.url.params["limit"] == "20"
        assert get.headers["apikey"] == "service-key"
        assert get.headers["Authorization"] == "Bearer service-key"

        head = next(r for r in seen if r.method == "HEAD")
        assert head.headers["Prefer"] == "count=exact"

    @pytest.mark.asyncio
    async def test_find_one_empty_raises_no_rows(self):
        store = make_store(lambda request: httpx.Response(200, json=[]))
        with pytest.raises(NoRowsError):
            await store.find_one("users", [Eq("id", "u1")])
        await store.close()

    @pytest.mark.asyncio
    async def test_count_by_counts_each_key(self):
        seen = []

        def handler(request):
            seen.append(request)
            totals = {"eq.a": 2, "eq.b": 1, "eq.c": 0}
            total = totals[request.url.params["quote_id"]]
            return httpx.Response(200, headers={"Content-Range": f"*/{total}"})

        store = make_store(handler)
        counts = await store.count_by("quote_likes", "quote_id", [In("quote_id", ["a", "b", "c", "a"])])
        await store.close()

        assert counts == {"a": 2, "b": 1}
        assert len(seen) == 3
        assert all(r.method == "HEAD" and r.headers["Prefer"] == "count=exact" for r in seen)

    @pytest.mark.asyncio
    async def test_count_by_is_not_capped_by_max_rows(self):
        likes = {"q1": 1500, "q2": 200}
        rows = [{"quote_id": q} for q, n in likes.items() for _ in range(n)]
        max_rows = 1000

        def handler(request):
            params = request.url.params
            keys = params["quote_id"]
            if keys.startswith("eq."):
                matching = [r for r in rows if r["quote_id"] == keys[3:]]
            else:
                matching = [r for r in rows if r["quote_id"] in keys[4:-1].split(",")]
            if request.method == "HEAD":
                return httpx.Response(200, headers={"Content-Range": f"*/{len(matching)}"})
            offset = int(params.get("offset", 0))
            limit = min(int(params.get("limit", max_rows)), max_rows)
            return httpx.Response(200, json=matching[offset:offset + limit])

        store = make_store(handler)
        counts = await store.count_by("quote_likes", "quote_id", [In("quote_id", ["q1", "q2"])])
        await store.close()

        assert counts == likes

    @pytest.mark.asyncio
    async def test_count_by_without_key_list_pages_through(self):
        rows = [{"quote_id": "q1"}] * 1200 + [{"quote_id": "q2"}] * 5

        def handler(request):
            offset = int(request.url.params["offset"])
            limit = int(request.url.params["limit"])
            return httpx.Response(200, json=rows[offset:offset + limit])

        store = make_store(handler)
        counts = await store.count_by("quote_likes", "quote_id")
        await store.close()

        assert counts == {"q1": 1200, "q2": 5}


class TestWrites:

    @pytest.mark.asyncio
    async def test_insert_serializes_uuid_and_returns_row(self):
        user_id = uuid.uuid4()
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            assert request.headers["Prefer"] == "return=representation"
            return httpx.Response(201, json=[{"id": "f1", "user_id": str(user_id)}])

        store = make_store(handler)
        row = await store.insert("favorites", {"user_id": user_id, "item_type": "quote"})
        await store.close()

        assert row == {"id": "f1", "user_id": str(user_id)}
        assert bodies == [{"user_id": str(user_id), "item_type": "quote"}]

    @pytest.mark.asyncio
    async def test_delete_returns_deleted_count(self):
        store = make_store(lambda request: httpx.Response(200, json=[{"id": "1"}, {"id": "2"}]))
        assert await store.delete("favorites", [Eq("user_id", "u1")]) == 2
        await store.close()


class TestErrorTranslation:

    @pytest.mark.asyncio
    async def test_unique_violation(self):
        store = make_store(
            lambda request: httpx.Response(409, json={"code": "23505", "message": "duplicate key"})
        )
        with pytest.raises(ConstraintViolationError) as exc_info:
            await store.insert("favorites", {"item_id": "x"})
        await store.close()
        assert exc_info.value.code == UNIQUE_VIOLATION

    @pytest.mark.asyncio
    async def test_foreign_key_violation(self):
        store = make_store(lambda request: httpx.Response(409, json={"code": "23503"}))
        with pytest.raises(ConstraintViolationError) as exc_info:
            await store.insert("quote_likes", {"quote_id": "x"})
        await store.close()
        assert exc_info.value.code == FOREIGN_KEY_VIOLATION

    @pytest.mark.asyncio
    async def test_bare_conflict_is_duplicate_key(self):
        store = make_store(lambda request: httpx.Response(409))
        with pytest.raises(ConstraintViolationError) as exc_info:
            await store.insert("favorites", {"item_id": "x"})
        await store.close()
        assert exc_info.value.is_duplicate_key

    @pytest.mark.asyncio
    async def test_pgrst116_is_no_rows(self):
        store = make_store(lambda request: httpx.Response(406, json={"code": "PGRST116"}))
        with pytest.raises(NoRowsError):
            await store.find("users")
        await store.close()

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self):
        store = make_store(lambda request: httpx.Response(503, text="upstream down"))
        with pytest.raises(StoreUnavailableError):
            await store.count("quotes")
        await store.close()

    @pytest.mark.asyncio
    async def test_transport_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = make_store(handler)
        with pytest.raises(StoreUnavailableError):
            await store.ping()
        await store.close()

    @pytest.mark.asyncio
    async def test_other_client_error_is_store_error(self):
        store = make_store(lambda request: httpx.Response(400, json={"code": "PGRST100"}))
        with pytest.raises(StoreError) as exc_info:
            await store.find("quotes")
        await store.close()
        assert not isinstance(exc_info.value, (StoreUnavailableError, ConstraintViolationError))
