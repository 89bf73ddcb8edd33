"""Shared fixtures: an in-memory fake web served through httpx.MockTransport."""

import httpx
import pytest
import pytest_asyncio

from linkpreview.core.cache import DisabledCache
from linkpreview.services.preview import LinkPreview

NOT_FOUND_HTML = b"<html><head><title>Not Found</title></head><body></body></html>"


class FakeWeb:
    """Routes httpx requests to canned pages, redirects and failures by URL."""

    def __init__(self):
        self.pages: dict[str, tuple[int, dict, bytes]] = {}
        self.redirects: dict[str, tuple[int, str]] = {}
        self.head_status: dict[str, int] = {}
        self.errors: dict[str, Exception] = {}
        self.requests: list[httpx.Request] = []

    def add_page(
        self,
        url: str,
        body: str | bytes,
        content_type: str | None = "text/html; charset=utf-8",
        status: int = 200,
    ) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        headers = {"Content-Type": content_type} if content_type else {}
        self.pages[url] = (status, headers, body)

    def add_redirect(self, source: str, target: str, status: int = 301) -> None:
        self.redirects[source] = (status, target)

    def requested(self, method: str | None = None) -> list[str]:
        return [
            str(r.url) for r in self.requests if method is None or r.method == method
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url in self.errors:
            raise self.errors[url]
        if request.method == "HEAD" and url in self.head_status:
            return httpx.Response(self.head_status[url])
        if url in self.redirects:
            status, target = self.redirects[url]
            return httpx.Response(status, headers={"Location": target})
        if url in self.pages:
            status, headers, body = self.pages[url]
            if request.method == "HEAD":
                return httpx.Response(status, headers=headers)
            return httpx.Response(status, headers=headers, content=body)
        return httpx.Response(
            404, headers={"Content-Type": "text/html"}, content=NOT_FOUND_HTML
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_web():
    return FakeWeb()


@pytest_asyncio.fixture
async def http_client(fake_web):
    async with fake_web.client() as client:
        yield client


@pytest_asyncio.fixture
async def link_preview(http_client):
    lp = LinkPreview(client=http_client, cache=DisabledCache())
    yield lp
    await lp.aclose()


@pytest_asyncio.fixture
async def client(link_preview):
    """HTTP client for the FastAPI app, wired to the fake web."""
    from linkpreview.main import app

    app.state.link_preview = link_preview
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
