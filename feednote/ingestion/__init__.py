"""
FeedNote Ingestion Module
=========================

Article page retrieval used to enrich short feed entries before
summarization.
"""

from .content_fetcher import ContentFetcher, extract_main_content

__all__ = ["ContentFetcher", "extract_main_content"]
