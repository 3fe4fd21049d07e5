"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and test doubles for FeedNote tests.
"""

import pytest
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List
from unittest.mock import AsyncMock

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["FEEDNOTE_FEED_URL_1"] = "https://example.com/rss"
os.environ["FEEDNOTE_MISSKEY__HOST"] = "misskey.example"
os.environ["FEEDNOTE_MISSKEY__AUTH_TOKEN"] = "test-misskey-token"
os.environ["FEEDNOTE_LOGGING__FILE_PATH"] = ""
os.environ["FEEDNOTE_DEBUG"] = "true"

from feednote.database.models import FeedEntry, Note  # noqa: E402
from feednote.delivery.base import NoteSender  # noqa: E402
from feednote.delivery.rate_limiter import RateLimiter  # noqa: E402
from feednote.storage.memory_cache import MemoryCache  # noqa: E402
from feednote.storage.sqlite_cache import SQLiteCache  # noqa: E402
from feednote.utils.exceptions import DeliveryError  # noqa: E402

FEED_URL = "https://example.com/rss"
BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_entry(guid: str, published: datetime, title: str = None, description: str = "") -> FeedEntry:
    """Build a FeedEntry with sensible defaults."""
    return FeedEntry(
        guid=guid,
        title=title if title is not None else f"Entry {guid}",
        link=f"https://example.com/{guid}",
        description=description,
        published=published,
    )


class FakeFeedFetcher:
    """Feed source returning canned entries per URL."""

    def __init__(self, feeds: Dict[str, List[FeedEntry]] = None):
        self.feeds = feeds or {}
        self.errors: Dict[str, Exception] = {}
        self.calls: List[str] = []

    async def fetch(self, feed_url: str) -> List[FeedEntry]:
        self.calls.append(feed_url)
        if feed_url in self.errors:
            raise self.errors[feed_url]
        return list(self.feeds.get(feed_url, []))


class RecordingSender(NoteSender):
    """Sink that records notes and can be told to fail on some titles."""

    name = "recording"

    def __init__(self):
        self.notes: List[Note] = []
        self.fail_titles = set()

    async def post(self, note: Note) -> None:
        if any(title in note.text for title in self.fail_titles):
            raise DeliveryError("sink unavailable", sink=self.name, status=500)
        self.notes.append(note)


# ============================================================================
# Entry Fixtures
# ============================================================================


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def abc_entries():
    """A, B, C published two hours, one hour and zero hours before BASE_TIME."""
    return [
        make_entry("A", BASE_TIME - timedelta(hours=2), title="A"),
        make_entry("B", BASE_TIME - timedelta(hours=1), title="B"),
        make_entry("C", BASE_TIME, title="C"),
    ]


# ============================================================================
# Component Fixtures
# ============================================================================


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def sqlite_cache(tmp_path):
    cache = SQLiteCache(tmp_path / "cache" / "feednote.db")
    yield cache
    cache.close()


@pytest.fixture(params=["memory", "sqlite"])
def cache(request, tmp_path):
    """Run a test against both cache backends."""
    if request.param == "memory":
        yield MemoryCache()
    else:
        store = SQLiteCache(tmp_path / "feednote.db")
        yield store
        store.close()


@pytest.fixture
def fake_fetcher():
    return FakeFeedFetcher()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def fast_limiter():
    """Limiter large enough never to block in processor tests."""
    return RateLimiter(max_permits=100, refill_interval=0.01)


@pytest.fixture
def mock_summarizer():
    summarizer = AsyncMock()
    summarizer.is_enabled = lambda: True
    summarizer.summarize = AsyncMock(return_value="Short summary.")
    return summarizer
