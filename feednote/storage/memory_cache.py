"""
In-Memory Cache
===============

Process-local entry cache. Contents are lost on restart, so callers
should enable the first-run latest-only policy when using it.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from .cache_repository import CacheRepository
from ..utils.logging import get_logger_for_component


class MemoryCache(CacheRepository):
    """Dictionary-backed cache guarded by a lock."""

    durable = False

    def __init__(self):
        self._lock = threading.Lock()
        self._latest_published: Dict[str, datetime] = {}
        self._processed: Dict[str, datetime] = {}  # guid -> marked at
        self.logger = get_logger_for_component("memory_cache")

    def get_latest_published(self, feed_url: str) -> Optional[datetime]:
        with self._lock:
            return self._latest_published.get(feed_url)

    def save_latest_published(self, feed_url: str, published: datetime) -> None:
        with self._lock:
            self._latest_published[feed_url] = published

    def is_processed(self, guid: str) -> bool:
        with self._lock:
            return guid in self._processed

    def mark_as_processed(self, guid: str) -> None:
        with self._lock:
            self._processed.setdefault(guid, datetime.now(timezone.utc))

    def cleanup_old_guids(self, older_than: timedelta) -> int:
        cutoff = datetime.now(timezone.utc) - older_than
        with self._lock:
            stale = [guid for guid, marked in self._processed.items() if marked < cutoff]
            for guid in stale:
                del self._processed[guid]

        if stale:
            self.logger.info(f"Removed {len(stale)} processed GUIDs from memory cache")
        return len(stale)
