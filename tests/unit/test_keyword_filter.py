"""
Keyword Filter Tests
====================

Unit tests for per-feed keyword filtering.
"""

import pytest
from datetime import timedelta

from feednote.processing.keyword_filter import filter_by_keywords
from conftest import make_entry, BASE_TIME


@pytest.fixture
def entries():
    return [
        make_entry("1", BASE_TIME, title="foo bar"),
        make_entry("2", BASE_TIME + timedelta(minutes=1), title="baz qux"),
        make_entry("3", BASE_TIME + timedelta(minutes=2), title="plain", description="mentions foo inside"),
    ]


class TestKeywordFilter:
    """Test suite for filter_by_keywords."""

    @pytest.mark.parametrize("keywords", [None, []])
    def test_no_keywords_passes_everything_in_order(self, entries, keywords):
        result = filter_by_keywords(entries, keywords)
        assert [e.guid for e in result] == ["1", "2", "3"]

    def test_title_match(self, entries):
        result = filter_by_keywords(entries[:2], ["foo"])
        assert [e.title for e in result] == ["foo bar"]

    def test_description_match(self, entries):
        result = filter_by_keywords(entries, ["inside"])
        assert [e.guid for e in result] == ["3"]

    def test_any_keyword_matches_and_order_is_preserved(self, entries):
        result = filter_by_keywords(entries, ["qux", "foo"])
        assert [e.guid for e in result] == ["1", "2", "3"]

    def test_match_is_case_sensitive(self, entries):
        assert filter_by_keywords(entries, ["FOO"]) == []

    def test_unicode_substring(self):
        entries = [
            make_entry("jp", BASE_TIME, title="新しいリリースのお知らせ"),
            make_entry("en", BASE_TIME, title="Release notes"),
        ]
        result = filter_by_keywords(entries, ["リリース"])
        assert [e.guid for e in result] == ["jp"]

    def test_returns_new_list(self, entries):
        result = filter_by_keywords(entries, None)
        assert result == entries
        assert result is not entries

    def test_empty_keyword_matches_everything(self, entries):
        result = filter_by_keywords(entries, ["", "foo"])
        assert [e.guid for e in result] == ["1", "2", "3"]
