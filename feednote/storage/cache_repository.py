"""
Cache Repository Interface
==========================

Contract shared by every entry cache. A cache remembers two things:
the newest publication time delivered per feed (the watermark) and the
set of entry GUIDs that were already delivered.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional


class CacheRepository(ABC):
    """Abstract entry cache used by the feed processor.

    Implementations must be safe to call from concurrent tasks.
    """

    #: True when contents survive a process restart
    durable: bool = False

    @abstractmethod
    def get_latest_published(self, feed_url: str) -> Optional[datetime]:
        """Return the stored watermark for a feed, or None if never set."""

    @abstractmethod
    def save_latest_published(self, feed_url: str, published: datetime) -> None:
        """Store the watermark for a feed, replacing any previous value."""

    @abstractmethod
    def is_processed(self, guid: str) -> bool:
        """Return True if the GUID has been marked as delivered."""

    @abstractmethod
    def mark_as_processed(self, guid: str) -> None:
        """Record a GUID as delivered. Marking twice is a no-op."""

    @abstractmethod
    def cleanup_old_guids(self, older_than: timedelta) -> int:
        """Forget GUIDs marked more than ``older_than`` ago.

        Returns:
            Number of GUIDs removed
        """

    def close(self) -> None:
        """Release any held resources."""
