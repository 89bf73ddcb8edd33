"""Regex crawlers that fill a PreviewResult from sanitized page markup.

``crawl_page`` runs the stages in a fixed order:

    icon -> meta tags -> title -> description -> price -> images

Each stage only writes fields that are still unset (PreviewResult.set_field
enforces this), so an earlier stage always wins. Stages that consume markup
return the trimmed HTML for the next one: all ``<link>`` tags are dropped
after the icon crawl, and a paragraph promoted to title is removed before
the description crawl so it is not picked twice.
"""

import html as html_lib
import logging
import re

from linkpreview.schemas.preview import PreviewResult

logger = logging.getLogger(__name__)

TITLE_MINIMUM_RELEVANT = 15
DESCRIPTION_MINIMUM_RELEVANT = 100

_FLAGS = re.IGNORECASE | re.DOTALL

LINK_TAG_PATTERN = re.compile(r"<link\b(.*?)>", _FLAGS)
REL_PATTERN = re.compile(r"""(?<![\w-])rel\s*=\s*(["'])(.*?)\1""", _FLAGS)
HREF_PATTERN = re.compile(r"""(?<![\w-])href\s*=\s*(?:(["'])(.*?)\1|([^\s"'>]+))""", _FLAGS)
META_TAG_PATTERN = re.compile(r"<meta\b(.*?)>", _FLAGS)
META_CONTENT_PATTERN = re.compile(r"""(?<![\w-])content\s*=\s*(["'])(.*?)\1""", _FLAGS)
TITLE_PATTERN = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", _FLAGS)
IMAGE_TAG_PATTERN = re.compile(r"""<img\b[^>]*?\ssrc\s*=\s*(["'])(.*?)\1""", _FLAGS)
RAW_TAG_PATTERN = re.compile(r"<[^>]+>")

IMAGE_EXTENSION_PATTERN = re.compile(r"\.(?:gif|jpe?g|png|bmp|webp)$", re.IGNORECASE)
VIDEO_EXTENSION_PATTERN = re.compile(
    r"\.(?:mp4|m4v|mov|webm|ogv|avi|wmv|flv|mkv)$", re.IGNORECASE
)

# Checked against the rel attribute, highest priority first
ICON_PRIORITY = ("apple-touch", "shortcut", "icon")

META_FIELDS = ("title", "description", "image", "video")


def _meta_name_pattern(tag: str) -> re.Pattern:
    """og:<tag>, twitter:<tag>, plain <tag> or itemprop <tag>, either quote style."""
    tag = re.escape(tag)
    return re.compile(
        rf"""(?<![\w-])(?:property\s*=\s*["']og:|name\s*=\s*["'](?:twitter:)?|itemprop\s*=\s*["']){tag}["']""",
        re.IGNORECASE,
    )


META_NAME_PATTERNS = {tag: _meta_name_pattern(tag) for tag in META_FIELDS}

PRICE_PATTERNS = (
    re.compile(r"""itemprop\s*=\s*["']price["'][^>]*?\scontent\s*=\s*["']([^"']*)["']""", re.IGNORECASE),
    re.compile(r"""\scontent\s*=\s*["']([^"']*)["'][^>]*?\sitemprop\s*=\s*["']price["']""", re.IGNORECASE),
    re.compile(
        r"""(?:property|name)\s*=\s*["'](?:product|og):price:amount["'][^>]*?\scontent\s*=\s*["']([^"']*)["']""",
        re.IGNORECASE,
    ),
    re.compile(r"""itemprop\s*=\s*["']price["'][^>]*>\s*([^<]+?)\s*<""", re.IGNORECASE),
    re.compile(r"""class\s*=\s*["'][^"']*\bprice\b[^"']*["'][^>]*>\s*([^<]+?)\s*<""", re.IGNORECASE),
)

_TAG_PATTERNS = {
    tag: re.compile(rf"<{tag}(?:\s[^>]*)?>(.*?)</{tag}\s*>", _FLAGS)
    for tag in ("p", "div", "span")
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def extended_trim(value: str) -> str:
    """Collapse runs of whitespace and trim both ends."""
    return " ".join(value.split())


def decode_text(value: str) -> str:
    """Decode HTML entities and normalize whitespace."""
    return extended_trim(html_lib.unescape(value))


def strip_tags(value: str) -> str:
    return extended_trim(RAW_TAG_PATTERN.sub("", value))


def _resource_path(url: str) -> str:
    return re.split(r"[?#]", url, maxsplit=1)[0]


def is_image_url(url: str) -> bool:
    return bool(IMAGE_EXTENSION_PATTERN.search(_resource_path(url)))


def is_video_url(url: str) -> bool:
    return bool(VIDEO_EXTENSION_PATTERN.search(_resource_path(url)))


def add_image_prefix(image: str, scheme: str, canonical_host: str) -> str:
    """Make an image/icon URL absolute and drop its query string.

    ``//cdn/x.jpg`` takes the page scheme, ``/x.jpg`` takes
    ``scheme://canonical_host``; anything else is kept as-is.
    """
    if image.startswith("//"):
        image = f"{scheme}:{image}"
    elif image.startswith("/"):
        image = f"{scheme}://{canonical_host}{image}"
    return image.split("?", 1)[0]


def _normalize(image: str, result: PreviewResult) -> str:
    return add_image_prefix(image, result.scheme, result.canonical_host)


# ---------------------------------------------------------------------------
# Body scrape
# ---------------------------------------------------------------------------


def _crawl_code_match(html: str, minimum: int) -> tuple[re.Match | None, str]:
    """Return (element match, tag-stripped text) for the body-scrape heuristic."""
    for tag in ("p", "div", "span"):
        for match in _TAG_PATTERNS[tag].finditer(html):
            text = strip_tags(match.group(1))
            if len(text) >= minimum:
                return match, text

    first = _TAG_PATTERNS["p"].search(html)
    if first is not None:
        return first, strip_tags(first.group(1))
    return None, ""


def crawl_code(html: str, minimum: int) -> str:
    """Best-effort text from the page body.

    First ``<p>``, then ``<div>``, then ``<span>`` whose stripped text is at
    least ``minimum`` characters long. Falls back to the first paragraph
    regardless of length, or ``""`` when the page has none.
    """
    return _crawl_code_match(html, minimum)[1]


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def crawl_icon(html: str, result: PreviewResult) -> tuple[str, PreviewResult]:
    link_tags = LINK_TAG_PATTERN.findall(html)

    if not result.is_set("icon"):
        for marker in ICON_PRIORITY:
            first = None
            for attrs in link_tags:
                rel = REL_PATTERN.search(attrs)
                if rel and marker in rel.group(2).lower():
                    first = attrs
                    break
            if first is None:
                continue
            href = HREF_PATTERN.search(first)
            if href:
                value = (href.group(2) if href.group(1) else href.group(3)).strip()
                if value:
                    result.set_field("icon", _normalize(html_lib.unescape(value), result))
                    break

    return LINK_TAG_PATTERN.sub("", html).strip(), result


def crawl_meta_tags(html: str, result: PreviewResult) -> PreviewResult:
    meta_tags = META_TAG_PATTERN.findall(html)

    for field in META_FIELDS:
        if result.is_set(field):
            continue

        pattern = META_NAME_PATTERNS[field]
        content = None
        for attrs in meta_tags:
            if pattern.search(attrs):
                content = META_CONTENT_PATTERN.search(attrs)
                if content:
                    break
        if not content:
            continue

        value = decode_text(content.group(2))
        if field == "image":
            value = _normalize(value, result)
            if not is_image_url(value):
                logger.debug(f"Discarding meta image without image extension: {value}")
                continue
        elif field == "video":
            value = _normalize(value, result)
            if not is_video_url(value):
                logger.debug(f"Discarding meta video without video extension: {value}")
                continue
        result.set_field(field, value)

    return result


def crawl_title(html: str, result: PreviewResult) -> tuple[str, PreviewResult]:
    if result.is_set("title"):
        return html, result

    match = TITLE_PATTERN.search(html)
    if match is None:
        return html, result

    value = decode_text(strip_tags(match.group(1)))
    if value:
        result.set_field("title", value)
        return html, result

    match, text = _crawl_code_match(html, TITLE_MINIMUM_RELEVANT)
    if text:
        result.set_field("title", decode_text(text))
        start, end = match.span(1)
        html = html[:start] + html[end:]
    return html, result


def crawl_description(html: str, result: PreviewResult) -> tuple[str, PreviewResult]:
    if not result.is_set("description"):
        value = crawl_code(html, DESCRIPTION_MINIMUM_RELEVANT)
        if value:
            result.set_field("description", decode_text(value))
    return html, result


def crawl_price(html: str, result: PreviewResult) -> tuple[str, PreviewResult]:
    if result.is_set("price"):
        return html, result

    for pattern in PRICE_PATTERNS:
        match = pattern.search(html)
        if match:
            value = decode_text(match.group(1))
            if value:
                result.set_field("price", value)
                break
    return html, result


def crawl_images(html: str, result: PreviewResult) -> PreviewResult:
    if result.is_set("image"):
        result.set_field("images", [_normalize(result.image, result)])
        return result

    if not result.is_set("images"):
        images = [
            _normalize(html_lib.unescape(src.strip()), result)
            for _quote, src in IMAGE_TAG_PATTERN.findall(html)
            if src.strip()
        ]
        if images:
            result.set_field("images", images)
            result.set_field("image", images[0])
    return result


def crawl_page(html: str, result: PreviewResult) -> PreviewResult:
    """Run every crawler over sanitized ``html`` and return the filled result."""
    html, result = crawl_icon(html, result)
    result = crawl_meta_tags(html, result)
    html, result = crawl_title(html, result)
    html, result = crawl_description(html, result)
    html, result = crawl_price(html, result)
    return crawl_images(html, result)
