"""Unit tests for linkpreview.core.exceptions: stable error codes."""

import pytest

from linkpreview.core.exceptions import (
    ERROR_DOMAIN,
    CannotBeOpenedError,
    ErrorCode,
    InvalidURLError,
    NoURLFoundError,
    ParseError,
    PreviewError,
)


class TestErrorCodes:
    def test_codes_are_stable(self):
        assert int(ErrorCode.NO_URL_HAS_BEEN_FOUND) == 1
        assert int(ErrorCode.INVALID_URL) == 2
        assert int(ErrorCode.CANNOT_BE_OPENED) == 3
        assert int(ErrorCode.PARSE_ERROR) == 4

    @pytest.mark.parametrize(
        "error, code",
        [
            (NoURLFoundError("hello"), 1),
            (InvalidURLError("ftp://x"), 2),
            (CannotBeOpenedError("http://x.com/", "timed out"), 3),
            (ParseError("http://x.com/"), 4),
        ],
    )
    def test_each_kind_carries_its_code(self, error, code):
        assert isinstance(error, PreviewError)
        assert error.code == code


class TestErrorPayload:
    def test_to_dict(self):
        error = CannotBeOpenedError("http://x.com/", "timed out")
        assert error.to_dict() == {
            "domain": ERROR_DOMAIN,
            "code": 3,
            "description": "This URL cannot be opened: http://x.com/: timed out",
        }

    def test_description_and_attributes(self):
        error = NoURLFoundError("plain words")
        assert error.text == "plain words"
        assert error.description == "No URL has been found: plain words"
        assert str(error) == error.description

    def test_domain_name(self):
        assert ERROR_DOMAIN == "LinkPreviewDomain"
