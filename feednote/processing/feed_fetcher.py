"""
RSS Feed Fetcher
================

Downloads a feed over HTTP and parses it into ``FeedEntry`` models.
Entries without a publication date or a usable identifier are dropped
here, so every entry handed to the processor is timestamped.
"""

import asyncio
import calendar
import ssl
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional

import aiohttp
import certifi
import feedparser

from ..database.models import FeedEntry
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import FeedFetchError, ErrorCode


class FeedFetcher:
    """RSS/Atom feed source."""

    def __init__(self, timeout: int = 30):
        """Initialize feed fetcher.

        Args:
            timeout: Request timeout in seconds
        """
        self.timeout = timeout
        self.logger = get_logger_for_component("feed_fetcher")

        # SSL context for secure requests
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @asynccontextmanager
    async def get_session(self):
        """Get configured aiohttp session."""
        connector = aiohttp.TCPConnector(ssl=self.ssl_context, limit_per_host=5)
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        headers = {
            "User-Agent": "FeedNote/1.0",
            "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml, */*",
        }

        async with aiohttp.ClientSession(
            connector=connector, timeout=timeout, headers=headers
        ) as session:
            yield session

    async def fetch(self, feed_url: str) -> List[FeedEntry]:
        """Fetch and parse a single feed.

        Args:
            feed_url: URL of the RSS or Atom feed

        Returns:
            Timestamped entries in feed order

        Raises:
            FeedFetchError: On HTTP errors, timeouts or unparseable feeds
        """
        self.logger.debug(f"Fetching feed: {feed_url}")

        try:
            async with self.get_session() as session:
                async with session.get(feed_url) as response:
                    if response.status != 200:
                        raise FeedFetchError(
                            f"HTTP {response.status}: {response.reason}",
                            feed_url=feed_url,
                            error_code=ErrorCode.FEED_HTTP_ERROR,
                        )
                    content = await response.text()

        except asyncio.TimeoutError as e:
            raise FeedFetchError(
                f"Request timeout after {self.timeout}s",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e

        except aiohttp.ClientError as e:
            raise FeedFetchError(
                f"Fetch error: {e}",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_NETWORK_ERROR,
            ) from e

        return self.parse(content, feed_url)

    def parse(self, content: str, feed_url: str) -> List[FeedEntry]:
        """Parse feed XML into entries.

        Raises:
            FeedFetchError: If the document is malformed and has no entries
        """
        feed_data = feedparser.parse(content)

        if getattr(feed_data, "bozo", False):
            if not feed_data.entries:
                error = getattr(feed_data, "bozo_exception", "Invalid XML structure")
                raise FeedFetchError(
                    f"Feed parse error: {error}",
                    feed_url=feed_url,
                    error_code=ErrorCode.FEED_PARSE_ERROR,
                )
            self.logger.info(f"Feed has parse warnings but contains entries: {feed_url}")

        entries = self._parse_entries(feed_data, feed_url)
        self.logger.info(f"Fetched {len(entries)} entries from {feed_url}")
        return entries

    def _parse_entries(self, feed_data: Any, feed_url: str) -> List[FeedEntry]:
        entries = []

        for entry in feed_data.entries:
            published = self._parse_date(entry)
            if published is None:
                self.logger.debug(
                    f"Skipping entry without a date in {feed_url}: "
                    f"{entry.get('title', 'Untitled')}"
                )
                continue

            link = entry.get("link", "") or ""
            guid = entry.get("id") or link
            if not guid:
                self.logger.debug(f"Skipping entry without id or link in {feed_url}")
                continue

            entries.append(
                FeedEntry(
                    guid=guid,
                    title=entry.get("title", "") or "",
                    link=link,
                    description=self._extract_description(entry),
                    published=published,
                )
            )

        return entries

    def _extract_description(self, entry: Any) -> str:
        for field in ("summary", "description"):
            value = entry.get(field)
            if value and isinstance(value, str):
                return value
        return ""

    def _parse_date(self, entry: Any) -> Optional[datetime]:
        """Parse publication date from entry, falling back to the update date."""
        for field in ("published_parsed", "updated_parsed"):
            date_tuple = entry.get(field)
            if date_tuple:
                try:
                    # feedparser normalizes struct_time to UTC
                    return datetime.fromtimestamp(
                        calendar.timegm(date_tuple), tz=timezone.utc
                    )
                except (ValueError, OverflowError):
                    continue
        return None
