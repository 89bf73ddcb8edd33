"""Locate the first URL in free text.

Recognizes three shapes, earliest start offset wins:

- explicit scheme:  http://…, https://…, ftp://…
- www. hosts:       www.example.com/path
- bare domains:     example.co.uk/path (only for TLDs in ``KNOWN_TLDS``)

Scheme-less matches come back with ``http://`` prepended.
"""

import re

KNOWN_TLDS = (
    "com", "org", "net", "edu", "gov", "mil", "int", "info", "biz", "name",
    "pro", "io", "co", "me", "ly", "app", "dev", "ai", "tv", "fm", "gl",
    "gg", "to", "sh", "xyz", "site", "online", "store", "shop", "blog",
    "news", "tech", "cloud", "page", "link", "us", "uk", "ca", "au", "de",
    "fr", "it", "es", "nl", "be", "ch", "at", "se", "no", "dk", "fi", "pl",
    "pt", "br", "ar", "mx", "jp", "cn", "kr", "in", "ru", "ua", "cz", "ie",
    "nz", "za", "eu",
)

# Characters allowed inside a URL after the host. \w keeps non-ASCII letters
# (IDN paths) but excludes emoji and symbols.
_URL_CHARS = r"[\w\-.~:/?#\[\]@!$&'()*+,;=%]"

_HOST_LABEL = r"[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?"
_TLD_ALTERNATION = "|".join(KNOWN_TLDS)

# Boundaries are ASCII-only so URLs glued to CJK text or an ellipsis still
# match. Scheme-less hosts also may not follow "label." (e-mail domains,
# version numbers).
_SCHEME_BOUNDARY = r"(?<![A-Za-z0-9])"
_HOST_BOUNDARY = r"(?<![A-Za-z0-9_@\-/])(?<![A-Za-z0-9]\.)"

URL_PATTERN = re.compile(
    rf"""
    {_SCHEME_BOUNDARY}(?P<scheme>(?:https?|ftp)://){_URL_CHARS}+
  | {_HOST_BOUNDARY}www\.{_HOST_LABEL}(?:\.{_HOST_LABEL})*{_URL_CHARS}*
  | {_HOST_BOUNDARY}(?:{_HOST_LABEL}\.)+(?:{_TLD_ALTERNATION})(?![A-Za-z0-9_\-@])
      (?::\d{{1,5}})?(?:[/?#]{_URL_CHARS}*)?
    """,
    re.IGNORECASE | re.VERBOSE,
)

_TRAILING_PUNCTUATION = ".,;:!?'\""
_BRACKETS = {")": "(", "]": "[", "}": "{"}


def _trim_match(candidate: str) -> str:
    """Drop sentence punctuation and unbalanced closing brackets at the end."""
    while candidate:
        last = candidate[-1]
        if last in _TRAILING_PUNCTUATION:
            candidate = candidate[:-1]
        elif last in _BRACKETS and candidate.count(_BRACKETS[last]) < candidate.count(last):
            candidate = candidate[:-1]
        else:
            break
    return candidate


def locate_url(text: str) -> str | None:
    """Return the first URL found in ``text`` as an absolute URL, or None."""
    if not text:
        return None

    for match in URL_PATTERN.finditer(text):
        candidate = _trim_match(match.group(0))
        if match.group("scheme"):
            # A bare "http://" with nothing after it is not a link
            if len(candidate) <= len(match.group("scheme")):
                continue
            return candidate
        if "." not in candidate:
            continue
        return f"http://{candidate}"

    return None
