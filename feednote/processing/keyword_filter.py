"""
Keyword Filter
==============

Per-feed keyword gate applied before new-entry selection.
"""

from typing import Iterable, List, Optional

from ..database.models import FeedEntry


def filter_by_keywords(
    entries: List[FeedEntry], keywords: Optional[Iterable[str]]
) -> List[FeedEntry]:
    """Keep entries whose title or description contains any keyword.

    Matching is a case-sensitive substring test. With no keywords
    configured every entry passes, in its original order. An empty
    keyword is a substring of everything, so it also lets every entry
    through; settings strip blank keywords before they get here.

    Args:
        entries: Entries in feed order
        keywords: Keywords to match, or None/empty for no filtering

    Returns:
        Matching entries in input order
    """
    keywords = list(keywords or [])
    if not keywords:
        return list(entries)

    return [
        entry
        for entry in entries
        if any(k in entry.title or k in entry.description for k in keywords)
    ]
