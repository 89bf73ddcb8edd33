"""Strip style, script and comment content before any metadata crawling.

Pages are never parsed into a tree. Markup inside a script body or comment
(``<meta>`` strings in inline JSON, a commented-out ``<title>``) is removed
here so the crawlers only see live tags.
"""

import re

# Order matters: styles, single-line scripts, multi-line scripts, comments.
INLINE_STYLE_ATTR_PATTERN = re.compile(
    r"""\sstyle\s*=\s*(?:"[^"]*"|'[^']*')""", re.IGNORECASE
)
STYLE_BLOCK_PATTERN = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
INLINE_SCRIPT_PATTERN = re.compile(r"<script\b[^>]*>[^\n]*?</script\s*>", re.IGNORECASE)
SCRIPT_BLOCK_PATTERN = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)

CLEANUP_PATTERNS = (
    INLINE_STYLE_ATTR_PATTERN,
    STYLE_BLOCK_PATTERN,
    INLINE_SCRIPT_PATTERN,
    SCRIPT_BLOCK_PATTERN,
    COMMENT_PATTERN,
)


def clean_source(html: str) -> str:
    """Return ``html`` with style, script and comment content removed."""
    for pattern in CLEANUP_PATTERNS:
        html = pattern.sub("", html)
    return html
