"""Public entry point: text in, link preview out.

Per call the pipeline is

    locate URL -> cache(url) -> resolve redirects -> cache(final url)
      -> fetch -> sanitize -> crawl -> cache(url, final url) -> deliver

Network I/O runs on the event loop that called ``preview()``; sanitizing and
crawling are CPU-bound and run in ``_extraction_executor``. Callbacks are
delivered on ``response_loop`` (the calling loop by default). The shared
Cancellable is checked before every hand-off; a cancelled preview delivers
nothing, neither success nor error.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

import httpx

from linkpreview.config import Settings, settings as default_settings
from linkpreview.core.cache import Cache, build_cache
from linkpreview.core.exceptions import CannotBeOpenedError, NoURLFoundError, PreviewError
from linkpreview.core.logging_config import preview_id_var
from linkpreview.core.metrics import extraction_duration_seconds, preview_requests_total
from linkpreview.schemas.preview import PreviewResult
from linkpreview.services.cancellation import Cancellable
from linkpreview.services.fetcher import fetch
from linkpreview.services.metadata import crawl_page, is_image_url
from linkpreview.services.resolver import resolve
from linkpreview.services.sanitizer import clean_source
from linkpreview.services.url_locator import locate_url

logger = logging.getLogger(__name__)

_extraction_executor = ThreadPoolExecutor(
    max_workers=default_settings.EXTRACTION_WORKERS,
    thread_name_prefix="linkpreview-extract",
)


def extract_preview(html: str, result: PreviewResult) -> PreviewResult:
    """CPU-bound sanitize + crawl. Synchronous, runs in the extraction executor."""
    with extraction_duration_seconds.time():
        return crawl_page(clean_source(html), result)


def build_client(config: Settings | None = None) -> httpx.AsyncClient:
    config = config or default_settings
    return httpx.AsyncClient(
        http2=config.HTTP2,
        timeout=config.REQUEST_TIMEOUT,
        headers={"User-Agent": config.USER_AGENT},
    )


class LinkPreview:
    """Builds link previews from free text.

    Args:
        client: httpx client used for redirect hops and fetches. One is created
            (and closed by :meth:`aclose`) when omitted.
        cache: response cache; built from settings when omitted.
        response_loop: event loop callbacks are delivered on. Defaults to
            the loop ``preview()`` is called from.
        config: settings override.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        cache: Cache | None = None,
        response_loop: asyncio.AbstractEventLoop | None = None,
        config: Settings | None = None,
    ):
        self.settings = config or default_settings
        self._owns_client = client is None
        self._owns_cache = cache is None
        self.client = client if client is not None else build_client(self.settings)
        self.cache = cache if cache is not None else build_cache(self.settings)
        self.response_loop = response_loop

    async def __aenter__(self) -> "LinkPreview":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
        if self._owns_cache and hasattr(self.cache, "close"):
            self.cache.close()

    # ------------------------------------------------------------------
    # Callback API
    # ------------------------------------------------------------------

    def preview(
        self,
        text: str,
        on_success: Callable[[PreviewResult], Any],
        on_error: Callable[[PreviewError], Any],
    ) -> Cancellable:
        """Start a preview and return immediately with its cancellation handle.

        Must be called from a running event loop. Exactly one of the two
        callbacks fires, on ``response_loop``, unless the handle is
        cancelled first.
        """
        cancellable = Cancellable()
        loop = asyncio.get_running_loop()
        response_loop = self.response_loop or loop

        def deliver(callback: Callable[[Any], Any], value: Any) -> None:
            if cancellable.is_cancelled:
                return

            def invoke() -> None:
                if cancellable.is_cancelled:
                    return
                if inspect.iscoroutinefunction(callback):
                    response_loop.create_task(callback(value))
                else:
                    callback(value)

            response_loop.call_soon_threadsafe(invoke)

        url = locate_url(text)
        if url is None:
            preview_requests_total.labels(status="no_url").inc()
            deliver(on_error, NoURLFoundError(text))
            return cancellable

        async def run() -> None:
            try:
                result = await self._execute(url, cancellable)
            except PreviewError as e:
                deliver(on_error, e)
                return
            if result is not None:
                deliver(on_success, result)

        cancellable.attach(loop.create_task(run()))
        return cancellable

    def preview_link(
        self,
        text: str,
        on_success: Callable[[dict], Any],
        on_error: Callable[[dict], Any],
    ) -> Cancellable:
        """Callback API with plain dicts instead of model and exception objects."""
        return self.preview(
            text,
            lambda result: on_success(result.to_dict()),
            lambda error: on_error(error.to_dict()),
        )

    # ------------------------------------------------------------------
    # Coroutine API
    # ------------------------------------------------------------------

    async def get_preview(
        self, text: str, cancellable: Cancellable | None = None
    ) -> PreviewResult | None:
        """Build a preview for the first URL in ``text``.

        Raises PreviewError subclasses on failure. Returns None when
        ``cancellable`` is cancelled before the result is ready.
        """
        url = locate_url(text)
        if url is None:
            preview_requests_total.labels(status="no_url").inc()
            raise NoURLFoundError(text)
        return await self._execute(url, cancellable or Cancellable())

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _execute(self, url: str, cancellable: Cancellable) -> PreviewResult | None:
        token = preview_id_var.set(uuid.uuid4().hex[:12])
        try:
            return await self._observe(url, cancellable)
        finally:
            preview_id_var.reset(token)

    async def _observe(self, url: str, cancellable: Cancellable) -> PreviewResult | None:
        try:
            result = await self._pipeline(url, cancellable)
        except PreviewError as e:
            preview_requests_total.labels(status=e.code.name.lower()).inc()
            logger.warning(f"Preview failed for {url}: {e.description}")
            raise
        except Exception as e:
            preview_requests_total.labels(status="cannot_be_opened").inc()
            logger.exception(f"Unexpected error while previewing {url}")
            raise CannotBeOpenedError(url, str(e) or type(e).__name__) from e

        if result is None:
            preview_requests_total.labels(status="cancelled").inc()
            logger.debug(f"Preview cancelled for {url}")
        else:
            preview_requests_total.labels(status="success").inc()
        return result

    async def _pipeline(self, url: str, cancellable: Cancellable) -> PreviewResult | None:
        if cancellable.is_cancelled:
            return None

        cached = self.cache.get(url)
        if cached is not None:
            return cached

        final_url = await resolve(
            self.client, url, cancellable, max_hops=self.settings.MAX_REDIRECT_HOPS
        )
        if final_url is None or cancellable.is_cancelled:
            return None

        if final_url != url:
            cached = self.cache.get(final_url)
            if cached is not None:
                return cached

        result = PreviewResult(url=url, final_url=final_url)

        if is_image_url(final_url):
            # Direct image link: nothing to crawl
            image = final_url.split("?", 1)[0]
            result.set_field("images", [image])
            result.set_field("image", image)
        else:
            page = await fetch(self.client, final_url)
            if cancellable.is_cancelled:
                return None

            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(
                _extraction_executor, extract_preview, page.text, result
            )
            if cancellable.is_cancelled:
                return None

        self.cache.set(final_url, result)
        self.cache.set(url, result)
        logger.info(
            f"Preview ready for {url} (final={final_url}, "
            f"title={'yes' if result.title else 'no'}, images={len(result.images or [])})"
        )
        return result
