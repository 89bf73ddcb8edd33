"""Redirect resolution ("unshortening").

Follows a redirect chain one hop at a time with header-only requests so that
cancellation can be checked between hops. Redirects are never followed by
httpx itself: each Location is inspected and requested explicitly.
"""

import logging

import httpx

from linkpreview.config import settings
from linkpreview.core.exceptions import CannotBeOpenedError, InvalidURLError
from linkpreview.core.metrics import redirect_hops
from linkpreview.services.cancellation import Cancellable

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")

# Servers that refuse HEAD; the request is repeated as a GET whose body is never read
_HEAD_REJECTED = {405, 501}


async def _request_hop(client: httpx.AsyncClient, url: str) -> httpx.Response:
    """Header-only request that does not follow redirects."""
    response = await client.head(url, follow_redirects=False)
    if response.status_code not in _HEAD_REJECTED:
        return response

    logger.debug(f"HEAD rejected with {response.status_code} for {url}, probing with GET")
    async with client.stream("GET", url, follow_redirects=False) as streamed:
        return streamed


def _next_location(response: httpx.Response) -> str | None:
    """Absolute URL of the redirect target, or None if this is not a redirect."""
    if not response.has_redirect_location:
        return None
    location = response.headers["Location"]
    try:
        return str(response.url.join(location))
    except httpx.InvalidURL:
        logger.debug(f"Ignoring unparsable Location header: {location}")
        return None


async def resolve(
    client: httpx.AsyncClient,
    url: str,
    cancellable: Cancellable,
    max_hops: int | None = None,
) -> str | None:
    """Follow redirects from ``url`` and return the final URL.

    Returns None without side effects when ``cancellable`` is set before a
    hop starts. Raises InvalidURLError for URLs that cannot be requested and
    CannotBeOpenedError on transport failures or when more than ``max_hops``
    redirects are chained.
    """
    max_hops = max_hops if max_hops is not None else settings.MAX_REDIRECT_HOPS
    current = url
    hops = 0

    while True:
        if cancellable.is_cancelled:
            logger.debug(f"Redirect resolution cancelled at {current}")
            return None

        try:
            request_url = httpx.URL(current)
        except httpx.InvalidURL as e:
            raise InvalidURLError(current) from e
        if request_url.scheme not in SUPPORTED_SCHEMES or not request_url.host:
            raise InvalidURLError(current)

        try:
            response = await _request_hop(client, current)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidURLError(current) from e
        except httpx.HTTPError as e:
            raise CannotBeOpenedError(current, str(e) or type(e).__name__) from e

        location = _next_location(response)
        if location is None or location == current:
            redirect_hops.observe(hops)
            if hops:
                logger.debug(f"Resolved {url} -> {current} in {hops} hop(s)")
            return current

        hops += 1
        if hops > max_hops:
            raise CannotBeOpenedError(url, f"too many redirects (more than {max_hops})")

        logger.debug(f"Redirect hop {hops}: {current} -> {location}")
        current = location
