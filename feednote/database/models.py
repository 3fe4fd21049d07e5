"""
FeedNote Data Models
====================

Pydantic data models shared by the fetcher, the feed processor and the
delivery sinks.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class NoteVisibility(str, Enum):
    """Misskey note visibility levels."""
    PUBLIC = "public"
    HOME = "home"
    FOLLOWERS = "followers"
    SPECIFIED = "specified"


class FeedEntry(BaseModel):
    """A single feed item as returned by the feed source.

    ``guid`` is the deduplication key: the entry's own id, or its link
    when the feed does not provide one.
    """
    guid: str = Field(..., min_length=1, description="Stable deduplication key")
    title: str = Field(default="", description="Entry title")
    link: str = Field(default="", description="Entry URL")
    description: str = Field(default="", description="Entry body/description")
    published: datetime = Field(..., description="Publication timestamp (UTC)")

    model_config = {"frozen": True}

    @field_validator('published')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC so comparisons never mix kinds."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def is_newer_than(self, other: Optional[datetime]) -> bool:
        """Strictly-after comparison; everything is newer than no timestamp."""
        if other is None:
            return True
        return self.published > other

    def __str__(self) -> str:
        return f"FeedEntry({self.title[:50]}:{self.guid})"


class Note(BaseModel):
    """Outbound message built from a feed entry."""
    text: str = Field(..., min_length=1, description="Note body")
    visibility: NoteVisibility = Field(default=NoteVisibility.HOME)

    model_config = {"frozen": True}

    @classmethod
    def from_entry(
        cls,
        entry: FeedEntry,
        summary: Optional[str] = None,
        visibility: NoteVisibility = NoteVisibility.HOME,
    ) -> "Note":
        """Build a note with the entry title and link, plus an optional summary."""
        summary = (summary or "").strip()
        if summary:
            text = f"📰 {entry.title}\n\n[Summary]\n{summary}\n\n{entry.link}"
        else:
            text = f"📰 {entry.title}\n{entry.link}"
        return cls(text=text, visibility=visibility)

    def __str__(self) -> str:
        return f"Note({self.visibility.value}:{self.text[:40]!r})"
