import logging
import time
from dataclasses import dataclass, field

import httpx
from charset_normalizer import from_bytes

from linkpreview.core.exceptions import CannotBeOpenedError, InvalidURLError, ParseError
from linkpreview.core.metrics import fetch_duration_seconds

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml"


@dataclass
class FetchedPage:
    url: str
    text: str
    status_code: int
    encoding: str | None = None
    headers: dict[str, str] = field(default_factory=dict)


def source_url_for(url: str) -> str:
    """Use http(s) URLs as-is and prefix anything else with ``http://``."""
    if url.lower().startswith(("http://", "https://")):
        return url
    return f"http://{url}"


def decode_body(content: bytes, charset: str | None) -> tuple[str, str] | None:
    """Decode a response body to text.

    The server-advertised charset is tried first. Without one, or when it is
    unknown or wrong, the encoding is detected from the bytes. Returns
    (text, encoding) or None when nothing usable comes out.
    """
    if charset:
        try:
            return content.decode(charset), charset
        except (LookupError, UnicodeDecodeError) as e:
            logger.debug(f"Declared charset {charset!r} failed ({e}), detecting encoding")

    if not content:
        return "", charset or "utf-8"

    best = from_bytes(content).best()
    if best is None:
        return None
    return str(best), best.encoding


async def fetch(client: httpx.AsyncClient, url: str) -> FetchedPage:
    """GET ``url`` asking for HTML/XML and return the decoded page.

    Raises InvalidURLError when the URL cannot be requested,
    CannotBeOpenedError on transport failures and ParseError when the body
    cannot be decoded.
    """
    source_url = source_url_for(url)
    try:
        parsed = httpx.URL(source_url)
    except httpx.InvalidURL as e:
        raise InvalidURLError(source_url) from e
    if not parsed.host:
        raise InvalidURLError(source_url)

    start = time.perf_counter()
    try:
        response = await client.get(
            source_url, headers={"Accept": ACCEPT_HEADER}, follow_redirects=True
        )
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
        raise InvalidURLError(source_url) from e
    except httpx.HTTPError as e:
        raise CannotBeOpenedError(source_url, str(e) or type(e).__name__) from e
    finally:
        fetch_duration_seconds.observe(time.perf_counter() - start)

    decoded = decode_body(response.content, response.charset_encoding)
    if decoded is None:
        logger.warning(f"Could not decode {len(response.content)} bytes from {source_url}")
        raise ParseError(source_url)

    text, encoding = decoded
    logger.debug(
        f"Fetched {source_url}: status={response.status_code} "
        f"bytes={len(response.content)} encoding={encoding}"
    )
    return FetchedPage(
        url=str(response.url),
        text=text,
        status_code=response.status_code,
        encoding=encoding,
        headers={k.lower(): v for k, v in response.headers.items()},
    )
