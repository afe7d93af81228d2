"""
Tests for snapshot validation.
"""

import pytest
from policywatch.schema import looks_like_missing_page, validate_snapshot


class TestValidateSnapshot:
    """Test basic validation function."""

    def test_valid_snapshot(self, valid_snapshot_data):
        """Valid snapshot should have no errors."""
        assert validate_snapshot(valid_snapshot_data) == []

    def test_minimal_snapshot(self):
        assert validate_snapshot({"url": "https://example.com/policy"}) == []

    def test_missing_url(self):
        """Missing url should error."""
        errors = validate_snapshot({"content": "text"})
        assert any("url" in err.lower() for err in errors)

    def test_blank_url(self):
        errors = validate_snapshot({"url": "   "})
        assert errors == ["Field 'url' must be a non-empty string"]

    @pytest.mark.parametrize("url", ["not-a-url", "/relative/path", "example.com/policy"])
    def test_relative_or_bare_url(self, url):
        errors = validate_snapshot({"url": url})
        assert any("absolute URL" in err for err in errors)

    def test_valid_url_formats(self):
        """Various valid URL formats should pass."""
        for url in (
            "https://support.example.com/answer/1",
            "http://example.com/policy?hl=en",
        ):
            assert validate_snapshot({"url": url}) == []

    def test_non_string_optional_field(self):
        errors = validate_snapshot({"url": "https://example.com/p", "content": 42, "title": None})
        assert errors == ["Field 'content' must be a string if provided"]

    def test_not_a_dict(self):
        assert validate_snapshot(["url"]) == ["Snapshot must be a JSON object"]


class TestLooksLikeMissingPage:

    @pytest.mark.parametrize("content", [
        "",
        "   \n",
        "Sorry, this page can't be found.",
        "Error 404 - Page Not Found",
        None,
    ])
    def test_missing(self, content):
        assert looks_like_missing_page(content)

    def test_real_page(self, base_policy_text):
        assert not looks_like_missing_page(base_policy_text)
