"""Preview error kinds with stable numeric codes.

Every failure that ends a preview is one of four kinds. The codes are part
of the public interface and must never be renumbered:

    NoURLHasBeenFound = 1
    InvalidURL        = 2
    CannotBeOpened    = 3
    ParseError        = 4
"""

from enum import IntEnum

ERROR_DOMAIN = "LinkPreviewDomain"


class ErrorCode(IntEnum):
    NO_URL_HAS_BEEN_FOUND = 1
    INVALID_URL = 2
    CANNOT_BE_OPENED = 3
    PARSE_ERROR = 4


class PreviewError(Exception):
    """Base class for errors delivered on the error channel."""

    code: ErrorCode = ErrorCode.CANNOT_BE_OPENED
    message: str = "Preview failed"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(self.description)

    @property
    def description(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message

    def to_dict(self) -> dict:
        """Untyped error representation for non-Python callers."""
        return {
            "domain": ERROR_DOMAIN,
            "code": int(self.code),
            "description": self.description,
        }


class NoURLFoundError(PreviewError):
    """Raised when the input text contains nothing that looks like a URL."""

    code = ErrorCode.NO_URL_HAS_BEEN_FOUND
    message = "No URL has been found"

    def __init__(self, text: str):
        self.text = text
        super().__init__(text)


class InvalidURLError(PreviewError):
    """Raised when a URL cannot be turned into a request."""

    code = ErrorCode.INVALID_URL
    message = "This data is not valid URL"

    def __init__(self, url: str):
        self.url = url
        super().__init__(url)


class CannotBeOpenedError(PreviewError):
    """Raised on transport failures while probing or fetching."""

    code = ErrorCode.CANNOT_BE_OPENED
    message = "This URL cannot be opened"

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}" if reason else url)


class ParseError(PreviewError):
    """Raised when the response body cannot be decoded to text."""

    code = ErrorCode.PARSE_ERROR
    message = "An error occurred while parsing the HTML"

    def __init__(self, url: str):
        self.url = url
        super().__init__(url)
