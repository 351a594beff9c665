"""Tests for issue reference parsing."""

import pytest

from ghpmu.utils.references import IssueRef, parse_issue_reference, split_repository


class TestParseIssueReference:
    """Tests for parse_issue_reference."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("123", ("", "", 123)),
            ("#123", ("", "", 123)),
            (" 42 ", ("", "", 42)),
            ("acme/api#7", ("acme", "api", 7)),
            ("https://github.com/acme/api/issues/7", ("acme", "api", 7)),
            ("https://github.com/acme/api/issues/7#issuecomment-1", ("acme", "api", 7)),
        ],
    )
    def test_valid(self, text, expected):
        assert tuple(parse_issue_reference(text)) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "abc", "#", "0", "#0", "acme#7", "acme/api#x", "https://github.com/acme/api/pull/7"],
    )
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_issue_reference(text)

    def test_with_default_fills_bare_number(self):
        ref = parse_issue_reference("5").with_default("acme/api")
        assert ref == IssueRef("acme", "api", 5)
        assert ref.has_repository

    def test_with_default_keeps_qualified(self):
        ref = parse_issue_reference("other/lib#5").with_default("acme/api")
        assert ref == IssueRef("other", "lib", 5)


class TestSplitRepository:
    """Tests for split_repository."""

    def test_valid(self):
        assert split_repository("acme/api") == ("acme", "api")

    @pytest.mark.parametrize("value", ["acme", "acme/", "/api", "a/b/c", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="owner/repo"):
            split_repository(value)
