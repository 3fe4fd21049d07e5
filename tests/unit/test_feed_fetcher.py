"""
Feed Fetcher Tests
==================

Tests for RSS/Atom parsing and HTTP error handling in FeedFetcher.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from feednote.processing.feed_fetcher import FeedFetcher
from feednote.utils.exceptions import FeedFetchError, ErrorCode

FEED_URL = "https://example.com/rss"

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example</title>
    <item>
      <guid>item-1</guid>
      <title>First post</title>
      <link>https://example.com/1</link>
      <description>First description</description>
      <pubDate>Wed, 01 May 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>No guid</title>
      <link>https://example.com/2</link>
      <pubDate>Wed, 01 May 2024 11:30:00 +0200</pubDate>
    </item>
    <item>
      <guid>item-3</guid>
      <title>Undated</title>
      <link>https://example.com/3</link>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Example</title>
  <entry>
    <id>urn:uuid:1</id>
    <title>Atom entry</title>
    <link href="https://example.org/atom/1"/>
    <updated>2024-05-02T08:00:00Z</updated>
    <summary>Atom summary</summary>
  </entry>
</feed>
"""


def make_session(status=200, body="", error=None):
    """Fake aiohttp session whose get() yields a canned response."""
    response = MagicMock()
    response.status = status
    response.reason = "Error" if status != 200 else "OK"
    response.text = AsyncMock(return_value=body)

    request_cm = MagicMock()
    if error is not None:
        request_cm.__aenter__ = AsyncMock(side_effect=error)
    else:
        request_cm.__aenter__ = AsyncMock(return_value=response)
    request_cm.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.get = MagicMock(return_value=request_cm)

    @asynccontextmanager
    async def get_session():
        yield session

    return get_session


class TestFeedParsing:
    """Tests for FeedFetcher.parse."""

    def test_parses_rss_entries(self):
        entries = FeedFetcher().parse(RSS_FEED, FEED_URL)

        assert [e.guid for e in entries] == ["item-1", "https://example.com/2"]
        first = entries[0]
        assert first.title == "First post"
        assert first.link == "https://example.com/1"
        assert first.description == "First description"
        assert first.published == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_timezone_offsets_converted_to_utc(self):
        entries = FeedFetcher().parse(RSS_FEED, FEED_URL)
        assert entries[1].published == datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)

    def test_undated_entries_are_dropped(self):
        entries = FeedFetcher().parse(RSS_FEED, FEED_URL)
        assert "item-3" not in [e.guid for e in entries]

    def test_parses_atom_with_updated_fallback(self):
        entries = FeedFetcher().parse(ATOM_FEED, FEED_URL)

        assert len(entries) == 1
        assert entries[0].guid == "urn:uuid:1"
        assert entries[0].link == "https://example.org/atom/1"
        assert entries[0].description == "Atom summary"
        assert entries[0].published == datetime(2024, 5, 2, 8, 0, tzinfo=timezone.utc)

    def test_garbage_raises_parse_error(self):
        with pytest.raises(FeedFetchError) as exc_info:
            FeedFetcher().parse("<not really xml", FEED_URL)
        assert exc_info.value.error_code == ErrorCode.FEED_PARSE_ERROR


class TestFeedFetch:
    """Tests for FeedFetcher.fetch HTTP handling."""

    @pytest.mark.asyncio
    async def test_fetch_success(self):
        fetcher = FeedFetcher(timeout=5)
        with patch.object(fetcher, "get_session", make_session(body=RSS_FEED)):
            entries = await fetcher.fetch(FEED_URL)
        assert len(entries) == 2

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        fetcher = FeedFetcher()
        with patch.object(fetcher, "get_session", make_session(status=503)):
            with pytest.raises(FeedFetchError) as exc_info:
                await fetcher.fetch(FEED_URL)
        assert exc_info.value.error_code == ErrorCode.FEED_HTTP_ERROR
        assert exc_info.value.context["feed_url"] == FEED_URL

    @pytest.mark.asyncio
    async def test_timeout(self):
        fetcher = FeedFetcher(timeout=1)
        with patch.object(fetcher, "get_session", make_session(error=asyncio.TimeoutError())):
            with pytest.raises(FeedFetchError) as exc_info:
                await fetcher.fetch(FEED_URL)
        assert exc_info.value.error_code == ErrorCode.FEED_FETCH_TIMEOUT

    @pytest.mark.asyncio
    async def test_client_error(self):
        fetcher = FeedFetcher()
        error = aiohttp.ClientConnectionError("refused")
        with patch.object(fetcher, "get_session", make_session(error=error)):
            with pytest.raises(FeedFetchError) as exc_info:
                await fetcher.fetch(FEED_URL)
        assert exc_info.value.error_code == ErrorCode.FEED_NETWORK_ERROR
