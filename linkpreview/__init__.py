"""LinkPreview: turn free text containing a link into a structured preview."""

__version__ = "0.1.0"

from linkpreview.core.cache import DisabledCache, InMemoryCache
from linkpreview.core.exceptions import (
    CannotBeOpenedError,
    ErrorCode,
    InvalidURLError,
    NoURLFoundError,
    ParseError,
    PreviewError,
)
from linkpreview.schemas.preview import PreviewResult, extract_canonical_url
from linkpreview.services.cancellation import Cancellable
from linkpreview.services.preview import LinkPreview
from linkpreview.services.url_locator import locate_url

__all__ = [
    # Version
    "__version__",
    # Entry point
    "LinkPreview",
    "Cancellable",
    "locate_url",
    # Cache
    "DisabledCache",
    "InMemoryCache",
    # Errors
    "ErrorCode",
    "PreviewError",
    "NoURLFoundError",
    "InvalidURLError",
    "CannotBeOpenedError",
    "ParseError",
    # Models
    "PreviewResult",
    "extract_canonical_url",
]
