"""
FeedNote Processing Module
==========================

Feed fetching, keyword filtering and the per-pass orchestrator.
"""

from .feed_fetcher import FeedFetcher
from .keyword_filter import filter_by_keywords
from .feed_processor import FeedProcessor, FeedResult

__all__ = [
    'FeedFetcher',
    'filter_by_keywords',
    'FeedProcessor',
    'FeedResult',
]
