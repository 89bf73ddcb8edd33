"""Integration tests for POST /v1/preview."""

import httpx
import pytest
from httpx import AsyncClient

from linkpreview.middleware.request_id import accept_request_id

PAGE_HTML = """
<html><head>
  <title>Example Article</title>
  <meta property="og:image" content="/images/cover.png">
</head><body><p>Short body.</p></body></html>
"""


class TestPreviewEndpoint:
    @pytest.mark.asyncio
    async def test_preview_success(self, client: AsyncClient, fake_web):
        """POST /v1/preview returns the preview in camelCase."""
        fake_web.add_redirect("http://bit.ly/abc", "https://example.com/blog/post")
        fake_web.add_page("https://example.com/blog/post", PAGE_HTML)

        resp = await client.post("/v1/preview", json={"text": "read bit.ly/abc today"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["error"] is None
        data = body["data"]
        assert data["url"] == "http://bit.ly/abc"
        assert data["finalUrl"] == "https://example.com/blog/post"
        assert data["canonicalUrl"] == "example.com/blog"
        assert data["title"] == "Example Article"
        assert data["image"] == "https://example.com/images/cover.png"
        assert data["images"] == ["https://example.com/images/cover.png"]
        assert data["description"] == "Short body."

    @pytest.mark.asyncio
    async def test_no_url_is_422(self, client: AsyncClient):
        resp = await client.post("/v1/preview", json={"text": "just words"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == 1
        assert body["error"]["domain"] == "LinkPreviewDomain"

    @pytest.mark.asyncio
    async def test_unreachable_host_is_502(self, client: AsyncClient, fake_web):
        fake_web.errors["https://down.example.com/"] = httpx.ConnectError("refused")
        resp = await client.post("/v1/preview", json={"text": "https://down.example.com/"})
        assert resp.status_code == 502
        assert resp.json()["error"]["code"] == 3

    @pytest.mark.asyncio
    async def test_missing_text_is_rejected(self, client: AsyncClient):
        resp = await client.post("/v1/preview", json={})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client: AsyncClient):
        resp = await client.post(
            "/v1/preview", json={"text": "just words"}, headers={"X-Request-ID": "req-123"}
        )
        assert resp.headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "inbound",
        ["x" * 65, "has space", "semi;colon", "quote\"d"],
    )
    async def test_unsafe_request_id_is_replaced(self, client: AsyncClient, inbound):
        resp = await client.post(
            "/v1/preview", json={"text": "just words"}, headers={"X-Request-ID": inbound}
        )
        rid = resp.headers["X-Request-ID"]
        assert rid != inbound
        assert len(rid) == 32
        assert all(c in "0123456789abcdef" for c in rid)

    @pytest.mark.asyncio
    async def test_request_id_generated_when_absent(self, client: AsyncClient):
        resp = await client.post("/v1/preview", json={"text": "just words"})
        assert len(resp.headers["X-Request-ID"]) == 32


class TestAcceptRequestId:
    @pytest.mark.parametrize("candidate", ["req-123", "a.b_c-D", "x" * 64])
    def test_safe_ids_are_kept(self, candidate):
        assert accept_request_id(candidate) == candidate

    @pytest.mark.parametrize("candidate", [None, "", "x" * 65, "a b", "id\r\nX-Forged: 1"])
    def test_unsafe_ids_are_replaced(self, candidate):
        new_id = accept_request_id(candidate)
        assert new_id != candidate
        assert len(new_id) == 32
