import re
from typing import Any
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field, model_validator

SCHEME_PREFIXES = ("http://", "https://", "file://", "ftp://")

# ?url=<percent-encoded target> as used by 404 and interstitial pages
_EMBEDDED_REDIRECT_RE = re.compile(r"[?&]url=([^&#]+)", re.IGNORECASE)

OPTIONAL_FIELDS = ("title", "description", "images", "image", "icon", "video", "price")


def strip_scheme(url: str) -> str:
    """Remove a leading http/https/file/ftp scheme, if any."""
    lowered = url.lower()
    for prefix in SCHEME_PREFIXES:
        if lowered.startswith(prefix):
            return url[len(prefix):]
    return url


def extract_embedded_redirect(url: str) -> str | None:
    """Return the absolute URL carried in a ``url=`` query parameter, if any.

    ``https://www.dji.com/404?url=http%3A%2F%2Fwww.dji.com%2Fm600`` gives
    ``http://www.dji.com/m600``.
    """
    match = _EMBEDDED_REDIRECT_RE.search(url)
    if not match:
        return None
    target = unquote(match.group(1))
    if target.lower().startswith(SCHEME_PREFIXES):
        return target
    return None


def extract_canonical_url(final_url: str) -> str:
    """Derive the canonical host+path string from a final URL.

    Pure function of its input. The scheme is stripped, an embedded
    ``url=`` redirect target is preferred when present, query and fragment
    are dropped and the last path segment is cut off:

        https://example.com/a/b?x=1  ->  example.com/a
        https://example.com/         ->  example.com
    """
    target = extract_embedded_redirect(final_url) or final_url
    remainder = strip_scheme(target)
    remainder = re.split(r"[?#]", remainder, maxsplit=1)[0]

    host, sep, path = remainder.partition("/")
    if not sep:
        return host
    directory = path.rpartition("/")[0]
    return f"{host}/{directory}" if directory else host


class PreviewResult(BaseModel):
    """A link preview.

    ``url``, ``final_url`` and ``canonical_url`` are fixed at construction.
    The optional metadata fields are filled by the extraction stages through
    :meth:`set_field`, which never replaces a value that is already set.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(frozen=True)
    final_url: str = Field(default="", alias="finalUrl", frozen=True)
    canonical_url: str = Field(default="", alias="canonicalUrl", frozen=True)

    title: str | None = None
    description: str | None = None
    images: list[str] | None = None
    image: str | None = None
    icon: str | None = None
    video: str | None = None
    price: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _derive_identity(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        final_url = data.pop("finalUrl", None) or data.get("final_url") or data.get("url")
        data.pop("canonicalUrl", None)
        if final_url:
            data["final_url"] = final_url
            data["canonical_url"] = extract_canonical_url(final_url)
        return data

    @property
    def canonical_host(self) -> str:
        return self.canonical_url.split("/", 1)[0]

    @property
    def scheme(self) -> str:
        """Scheme used to absolutize protocol- and root-relative resources."""
        return "https" if self.final_url.lower().startswith("https:") else "http"

    def is_set(self, field: str) -> bool:
        return bool(getattr(self, field))

    def set_field(self, field: str, value: Any) -> bool:
        """Write an optional field unless it already holds a value.

        Empty values are ignored and identity fields are never written.
        Returns True when the value was stored.
        """
        if field not in OPTIONAL_FIELDS:
            return False
        if not value or self.is_set(field):
            return False
        setattr(self, field, value)
        return True

    def to_dict(self) -> dict[str, Any]:
        """String-keyed map with the public camelCase field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class PreviewRequest(BaseModel):
    text: str


class PreviewResponse(BaseModel):
    success: bool
    data: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
