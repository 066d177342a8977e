"""
Quotely API — Pagination Contract Tests
========================================

What we test:
    ✅ page_offset / total_pages arithmetic
    ✅ page and limit below 1 are rejected
    ✅ find(count=True) returns the exact total independent of the window
    ✅ the last page holds the remainder ([40, 45) for 45 rows at 20 per page)
"""

import pytest

from quotely.exceptions import ValidationError
from quotely.store import Eq, OrderBy, page_offset, total_pages, validate_page


class TestPaginationHelpers:

    def test_page_offset(self):
        assert page_offset(1, 20) == 0
        assert page_offset(2, 20) == 20
        assert page_offset(3, 20) == 40

    def test_total_pages_rounds_up(self):
        assert total_pages(45, 20) == 3
        assert total_pages(40, 20) == 2
        assert total_pages(1, 20) == 1

    def test_total_pages_zero_rows(self):
        assert total_pages(0, 20) == 0

    @pytest.mark.parametrize("page,limit", [(0, 20), (-1, 20), (1, 0), (1, -5)])
    def test_invalid_page_or_limit(self, page, limit):
        with pytest.raises(ValidationError):
            validate_page(page, limit)
        with pytest.raises(ValidationError):
            page_offset(page, limit)


class TestFindWithCount:

    @pytest.mark.asyncio
    async def test_last_page_holds_remainder(self, store, make_quote):
        quotes = [await make_quote() for _ in range(45)]

        page = await store.find(
            "quotes",
            filters=[Eq("approved", True)],
            order_by=[OrderBy("created_at", descending=False)],
            offset=page_offset(3, 20),
            limit=20,
            count=True,
        )

        assert page.total == 45
        assert total_pages(page.total, 20) == 3
        assert len(page.rows) == 5
        assert [r["id"] for r in page.rows] == [q["id"] for q in quotes[40:45]]

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty_but_total_is_exact(self, store, make_quote):
        for _ in range(3):
            await make_quote()

        page = await store.find("quotes", offset=page_offset(5, 20), limit=20, count=True)

        assert page.rows == []
        assert page.total == 3

    @pytest.mark.asyncio
    async def test_total_respects_filters(self, store, make_quote):
        await make_quote(approved=True)
        await make_quote(approved=False)
        await make_quote(approved=True)

        page = await store.find("quotes", filters=[Eq("approved", True)], limit=1, count=True)

        assert len(page.rows) == 1
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_without_count_total_is_none(self, store, make_quote):
        await make_quote()
        page = await store.find("quotes")
        assert page.total is None
        assert len(page.rows) == 1
