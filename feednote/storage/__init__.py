"""
FeedNote Storage Layer
======================

Entry cache implementations behind a single repository interface.

This module provides:
- CacheRepository: the watermark + processed-GUID contract
- MemoryCache: volatile, process-local store
- SQLiteCache: durable store backed by a single SQLite file
"""

from .cache_repository import CacheRepository
from .memory_cache import MemoryCache
from .sqlite_cache import SQLiteCache

__all__ = [
    "CacheRepository",
    "MemoryCache",
    "SQLiteCache",
]
