"""
Quotely API — Public Endpoint Tests
====================================

What:  HTTP-level tests for the endpoints that need no token: health,
       quotes, proverbs, contact and newsletter.
How:   httpx AsyncClient over ASGITransport (no network, no server).

What we test:
    ✅ banner and health (healthy and store-down)
    ✅ quote listing envelope, pagination fields, approved-only
    ✅ /random vs /{id} routing, 404 envelope for pending quotes
    ✅ random proverb, 404 on an empty catalogue
    ✅ submissions come back approved=false even when the client says true
    ✅ request validation errors use the 400 envelope
    ✅ store errors produce a 500 envelope with the endpoint's own message
    ✅ unknown routes: 404 "Endpoint not found"
    ✅ newsletter: second signup says "Already subscribed"
    ✅ X-Request-ID is echoed
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from quotely.exceptions import StoreUnavailableError
from quotely.main import create_app


@pytest_asyncio.fixture
async def mock_client(mock_store):
    """Client whose app talks to the AsyncMock store."""
    app = create_app(store=mock_store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


class TestHealth:

    @pytest.mark.asyncio
    async def test_banner(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "Quotely API is running"

    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/health")
        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["store"] == "connected"

    @pytest.mark.asyncio
    async def test_store_down(self, mock_client, mock_store):
        mock_store.ping.side_effect = StoreUnavailableError()

        response = await mock_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
        assert response.json()["store"] == "disconnected"


class TestQuotes:

    @pytest.mark.asyncio
    async def test_list_envelope(self, client, make_quote):
        for _ in range(3):
            await make_quote()
        await make_quote(approved=False)

        response = await client.get("/api/quotes", params={"limit": 2, "page": 2})
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["total"] == 3
        assert body["page"] == 2
        assert body["totalPages"] == 2
        assert len(body["quotes"]) == 1

    @pytest.mark.asyncio
    async def test_list_rejects_bad_paging(self, client):
        response = await client.get("/api/quotes", params={"page": 0})
        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_random(self, client, make_quote):
        quote = await make_quote(text="Only one")

        response = await client.get("/api/quotes/random")

        assert response.status_code == 200
        assert response.json()["quote"]["id"] == str(quote["id"])

    @pytest.mark.asyncio
    async def test_random_empty_is_404(self, client):
        response = await client.get("/api/quotes/random")
        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_pending_quote_is_404(self, client, make_quote):
        pending = await make_quote(approved=False)

        response = await client.get(f"/api/quotes/{pending['id']}")
        body = response.json()

        assert response.status_code == 404
        assert body["success"] is False
        assert "was not found" in body["error"]
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client):
        response = await client.get("/api/quotes/not-a-uuid")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_submit_is_pending(self, client, make_user):
        user = await make_user()

        response = await client.post(
            "/api/quotes/submit",
            json={
                "text": "  Well begun is half done  ",
                "author": "Aristotle",
                "category": "wisdom",
                "userId": str(user["id"]),
                "approved": True,
            },
        )
        body = response.json()

        assert response.status_code == 200
        assert body["quote"]["approved"] is False
        assert body["quote"]["text"] == "Well begun is half done"
        assert body["quote"]["submitted_by"] == str(user["id"])

        listing = await client.get("/api/quotes")
        assert listing.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_submit_missing_fields(self, client):
        response = await client.post("/api/quotes/submit", json={"text": "No author"})
        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error"]

    @pytest.mark.asyncio
    async def test_submit_unknown_user(self, client):
        response = await client.post(
            "/api/quotes/submit",
            json={"text": "x", "author": "y", "category": "z", "userId": str(uuid.uuid4())},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Unknown user"

    @pytest.mark.asyncio
    async def test_store_failure_hides_details(self, mock_client, mock_store):
        mock_store.find.side_effect = StoreUnavailableError(
            context={"dsn": "postgresql://secret@db/quotely"}
        )

        response = await mock_client.get("/api/quotes")
        body = response.json()

        assert response.status_code == 500
        assert body["success"] is False
        assert "secret" not in response.text
        assert "postgresql" not in body["error"]
        assert body["error"] == "Failed to fetch quotes"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,path,payload,message",
        [
            ("GET", "/api/proverbs", None, "Failed to fetch proverbs"),
            ("GET", "/api/proverbs/random", None, "Failed to get random proverb"),
            ("GET", "/api/quotes/random", None, "Failed to get random quote"),
            (
                "POST",
                "/api/newsletter/subscribe",
                {"email": "r@example.com"},
                "Failed to subscribe to newsletter",
            ),
        ],
    )
    async def test_store_failure_message_names_the_endpoint(
        self, mock_client, mock_store, method, path, payload, message
    ):
        for operation in (mock_store.find, mock_store.find_one, mock_store.count, mock_store.insert):
            operation.side_effect = StoreUnavailableError()

        response = await mock_client.request(method, path, json=payload)

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["error"] == message


class TestProverbs:

    @pytest.mark.asyncio
    async def test_list(self, client, make_proverb):
        await make_proverb(content="low", likes_count=1)
        await make_proverb(content="high", likes_count=9)

        response = await client.get("/api/proverbs")
        body = response.json()

        assert response.status_code == 200
        assert [p["content"] for p in body["proverbs"]] == ["high", "low"]
        assert body["totalPages"] == 1

    @pytest.mark.asyncio
    async def test_random(self, client, make_proverb):
        proverb = await make_proverb(content="Only one")

        response = await client.get("/api/proverbs/random")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["proverb"]["id"] == str(proverb["id"])

    @pytest.mark.asyncio
    async def test_random_empty_is_404(self, client):
        response = await client.get("/api/proverbs/random")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestContactAndNewsletter:

    @pytest.mark.asyncio
    async def test_contact(self, client):
        response = await client.post(
            "/api/contact",
            json={"name": "Ada", "email": "ada@example.com", "message": "Love the site"},
        )
        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["submission"]["subject"] == "General Inquiry"

    @pytest.mark.asyncio
    async def test_contact_bad_email(self, client):
        response = await client.post(
            "/api/contact", json={"name": "Ada", "email": "nope", "message": "Hi"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_subscribe_twice(self, client):
        first = await client.post("/api/newsletter/subscribe", json={"email": "r@example.com"})
        second = await client.post("/api/newsletter/subscribe", json={"email": "R@example.com"})

        assert first.status_code == 200
        assert first.json()["message"] == "Successfully subscribed to newsletter"
        assert second.status_code == 200
        assert second.json()["message"] == "Already subscribed"


class TestRouting:

    @pytest.mark.asyncio
    async def test_unknown_endpoint(self, client):
        response = await client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "Endpoint not found",
            "request_id": response.headers["X-Request-ID"],
        }

    @pytest.mark.asyncio
    async def test_wrong_method(self, client):
        response = await client.delete("/api/proverbs")
        assert response.status_code == 405
        assert response.json()["error"] == "Method not allowed"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get("/api/proverbs", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"
