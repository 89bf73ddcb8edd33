"""Unit tests for linkpreview.services.url_locator: first URL in free text."""

import pytest

from linkpreview.services.url_locator import locate_url


class TestSchemeURLs:
    def test_url_inside_sentence(self):
        """A scheme URL is returned without the trailing comma."""
        text = "Check this out https://example.com/page?x=1, it's great"
        assert locate_url(text) == "https://example.com/page?x=1"

    def test_trailing_period_is_dropped(self):
        assert locate_url("Visit https://example.com/about.") == "https://example.com/about"

    def test_ftp_scheme(self):
        assert locate_url("grab ftp://files.example.com/a.txt") == "ftp://files.example.com/a.txt"

    def test_emoji_around_url(self):
        """Emoji next to the URL are not part of it."""
        assert locate_url("\U0001f525https://example.com/a\U0001f525") == "https://example.com/a"

    def test_balanced_parentheses_are_kept(self):
        text = "(see https://en.wikipedia.org/wiki/Python_(language))"
        assert locate_url(text) == "https://en.wikipedia.org/wiki/Python_(language)"

    def test_bare_scheme_is_not_a_url(self):
        assert locate_url("just http:// and nothing else") is None


class TestSchemelessURLs:
    def test_www_host_gets_http_prefix(self):
        assert locate_url("go to www.example.com now") == "http://www.example.com"

    def test_bare_domain_with_path(self):
        assert locate_url("search on google.com/search please") == "http://google.com/search"

    def test_shortener_domain(self):
        assert locate_url("bit.ly/xyz is neat") == "http://bit.ly/xyz"

    def test_unknown_tld_is_ignored(self):
        """Bare words with a dot are only URLs for known TLDs."""
        assert locate_url("open config.yaml first") is None


class TestOrdering:
    def test_earliest_match_wins(self):
        text = "first www.first.com then https://second.com/x"
        assert locate_url(text) == "http://www.first.com"

    def test_scheme_url_before_bare_domain(self):
        text = "https://a.example.org/1 and b.example.com"
        assert locate_url(text) == "https://a.example.org/1"


class TestNoURL:
    @pytest.mark.parametrize(
        "text",
        [
            "",
            "no url here",
            "mail me at bob@example.com",
            "version 1.2.3 is out",
        ],
    )
    def test_returns_none(self, text):
        assert locate_url(text) is None


class TestGluedToSurroundingText:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("看这个https://example.com/a", "https://example.com/a"),
            ("看这个www.example.com", "http://www.example.com"),
            ("看这个example.com/a 很好", "http://example.com/a"),
            ("wow...https://example.com/a", "https://example.com/a"),
            ("wow...www.example.com", "http://www.example.com"),
            ("Look:www.example.com", "http://www.example.com"),
        ],
    )
    def test_url_without_separating_space(self, text, expected):
        assert locate_url(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "xhttps://example.com/a",
            "user@www.example.com",
            "path/example.com",
        ],
    )
    def test_ascii_glue_is_still_rejected(self, text):
        assert locate_url(text) is None
