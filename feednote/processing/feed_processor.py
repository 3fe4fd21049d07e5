"""
Feed Processor
==============

Orchestrates one pass over the configured feeds: fetch, keyword filter,
new-entry selection against the cache, ascending-time delivery through
the rate limiter, and cache/watermark updates.

Per-feed state lives entirely in the cache, keyed by feed URL and entry
GUID, so feeds are independent and a failure in one never stops the
others.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from ..ai.providers.base import Summarizer
from ..config.settings import FeedSettings
from ..database.models import FeedEntry, Note, NoteVisibility
from ..delivery.base import NoteSender
from ..delivery.rate_limiter import RateLimiter
from ..ingestion.content_fetcher import ContentFetcher
from ..storage.cache_repository import CacheRepository
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import handle_exception
from .feed_fetcher import FeedFetcher
from .keyword_filter import filter_by_keywords


@dataclass
class FeedResult:
    """Outcome of processing one feed in a pass."""
    feed_url: str
    success: bool
    entries_fetched: int = 0
    new_entries: int = 0
    delivered: int = 0
    failed: int = 0
    error: Optional[str] = None
    processed_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.processed_at:
            self.processed_at = datetime.now(timezone.utc)


class FeedProcessor:
    """New-entry detection and delivery for a set of feeds."""

    def __init__(
        self,
        feed_fetcher: FeedFetcher,
        cache: CacheRepository,
        sender: NoteSender,
        rate_limiter: RateLimiter,
        summarizer: Optional[Summarizer] = None,
        content_fetcher: Optional[ContentFetcher] = None,
        first_run_latest_only: bool = True,
        visibility: NoteVisibility = NoteVisibility.HOME,
        summary_timeout: float = 30.0,
        min_content_length: int = 100,
    ):
        """Initialize feed processor.

        Args:
            feed_fetcher: Feed source
            cache: Watermark and processed-GUID store
            sender: Delivery sink
            rate_limiter: Limiter shared by every delivery to ``sender``
            summarizer: Optional summarizer; skipped when disabled
            content_fetcher: Optional page fetcher for short descriptions
            first_run_latest_only: Post only the newest entry of a never-seen feed
            visibility: Visibility of posted notes
            summary_timeout: Seconds allowed for one summary
            min_content_length: Descriptions shorter than this trigger a page fetch
        """
        self.feed_fetcher = feed_fetcher
        self.cache = cache
        self.sender = sender
        self.rate_limiter = rate_limiter
        self.summarizer = summarizer
        self.content_fetcher = content_fetcher
        self.first_run_latest_only = first_run_latest_only
        self.visibility = visibility
        self.summary_timeout = summary_timeout
        self.min_content_length = min_content_length
        self.logger = get_logger_for_component("feed_processor")

    async def process_all_feeds(self, feeds: Iterable[FeedSettings]) -> List[FeedResult]:
        """Process every feed sequentially.

        Errors are contained per feed. Cancellation propagates.
        """
        results = []
        for feed in feeds:
            try:
                result = await self.process_feed(feed.url, feed.keywords)
            except Exception as e:
                error = handle_exception(
                    e, self.logger, f"process feed {feed.url}", {"feed_url": feed.url}
                )
                result = FeedResult(feed_url=feed.url, success=False, error=str(error))
            results.append(result)

        delivered = sum(r.delivered for r in results)
        succeeded = sum(1 for r in results if r.success)
        self.logger.info(
            f"Pass complete: {succeeded}/{len(results)} feeds processed, "
            f"{delivered} notes delivered"
        )
        return results

    async def process_feed(
        self, feed_url: str, keywords: Optional[List[str]] = None
    ) -> FeedResult:
        """Fetch one feed and deliver its new entries.

        Raises:
            FeedFetchError: If the feed cannot be fetched
            DatabaseError: If the watermark cannot be read or saved
            asyncio.CancelledError: If the pass is cancelled
        """
        log = get_logger_for_component("feed_processor", feed_url=feed_url)

        entries = await self.feed_fetcher.fetch(feed_url)
        filtered = filter_by_keywords(entries, keywords)
        if len(filtered) != len(entries):
            log.debug(f"Keyword filter kept {len(filtered)}/{len(entries)} entries")

        watermark = self.cache.get_latest_published(feed_url)
        new_entries = self._filter_new_entries(filtered, watermark, log)

        if not new_entries:
            log.debug(f"No new entries in {feed_url}")
            return FeedResult(
                feed_url=feed_url, success=True, entries_fetched=len(entries)
            )

        log.info(f"Found {len(new_entries)} new entries in {feed_url}")
        delivered, failed = await self._post_entries(feed_url, new_entries, watermark, log)

        return FeedResult(
            feed_url=feed_url,
            success=True,
            entries_fetched=len(entries),
            new_entries=len(new_entries),
            delivered=delivered,
            failed=failed,
        )

    def _filter_new_entries(
        self, entries: List[FeedEntry], watermark: Optional[datetime], log=None
    ) -> List[FeedEntry]:
        """Select entries to deliver, oldest first.

        A feed with no watermark is on its first run. With latest-only on,
        only its newest entry is selected (the first one wins a tie) and
        nothing else is marked, so the saved watermark excludes the rest.
        """
        log = log or self.logger
        first_run = watermark is None

        if first_run and self.first_run_latest_only:
            latest = None
            for entry in entries:
                if latest is None or entry.published > latest.published:
                    latest = entry
            if latest is not None:
                log.info(f"First run: posting only the latest entry {latest}")
                return [latest]
            return []

        selected = []
        for entry in entries:
            try:
                if self.cache.is_processed(entry.guid):
                    continue
            except Exception as e:
                log.error(
                    f"Failed to check processed state, skipping {entry}: {e}",
                    extra={"guid": entry.guid, "title": entry.title},
                )
                continue

            if not first_run and not entry.is_newer_than(watermark):
                continue

            selected.append(entry)

        return sorted(selected, key=lambda e: e.published)

    async def _post_entries(
        self,
        feed_url: str,
        entries: List[FeedEntry],
        watermark: Optional[datetime],
        log=None,
    ) -> Tuple[int, int]:
        """Deliver entries in order and advance the watermark.

        Returns:
            (delivered, failed) counts
        """
        log = log or self.logger
        delivered = 0
        failed = 0
        latest_published: Optional[datetime] = None

        for entry in entries:
            context = {"feed_url": feed_url, "guid": entry.guid, "title": entry.title}

            summary = await self._summarize(entry, log)
            note = Note.from_entry(entry, summary=summary, visibility=self.visibility)

            await self.rate_limiter.wait()

            try:
                await self.sender.post(note)
            except Exception as e:
                failed += 1
                log.error(f"Failed to post {entry}: {e}", extra=context)
                continue

            delivered += 1
            log.info(f"Posted {entry}", extra=context)

            try:
                self.cache.mark_as_processed(entry.guid)
            except Exception as e:
                log.error(f"Failed to mark {entry} as processed: {e}", extra=context)

            if latest_published is None or entry.published > latest_published:
                latest_published = entry.published

        if latest_published is not None and (
            watermark is None or latest_published > watermark
        ):
            self.cache.save_latest_published(feed_url, latest_published)
            log.debug(f"Watermark for {feed_url} advanced to {latest_published.isoformat()}")

        return delivered, failed

    async def _summarize(self, entry: FeedEntry, log) -> Optional[str]:
        """Return a summary for the entry, or None. Never raises except on cancel."""
        if self.summarizer is None or not self.summarizer.is_enabled():
            return None

        text = entry.description
        if len(text) < self.min_content_length and self.content_fetcher is not None:
            try:
                text = await self.content_fetcher.fetch_content(entry.link)
            except Exception as e:
                log.warning(
                    f"Failed to fetch page for {entry}, using description: {e}",
                    extra={"guid": entry.guid},
                )
                text = entry.description

        if not text.strip():
            log.debug(f"No text to summarize for {entry}")
            return None

        try:
            summary = await asyncio.wait_for(
                self.summarizer.summarize(text, entry.title),
                timeout=self.summary_timeout,
            )
        except asyncio.TimeoutError:
            log.warning(
                f"Summarization timed out after {self.summary_timeout}s for {entry}",
                extra={"guid": entry.guid},
            )
            return None
        except Exception as e:
            log.warning(f"Summarization failed for {entry}: {e}", extra={"guid": entry.guid})
            return None

        return summary or None
