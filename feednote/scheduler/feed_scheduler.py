"""
FeedNote Scheduler
==================

Wires the configured components together and runs feed passes on a
fixed interval until SIGINT/SIGTERM.

The scheduler owns the process-wide state: the entry cache, the rate
limiter and the sender. They are created once at startup, shared by
every pass and closed on shutdown.
"""

import asyncio
import signal
import time
from datetime import timedelta
from typing import List, Optional

from ..ai.providers.base import Summarizer, NoopSummarizer
from ..ai.summarizer_factory import create_summarizer
from ..config.settings import FeedNoteSettings, DeliverySink, get_settings
from ..delivery.base import NoteSender
from ..delivery.rate_limiter import RateLimiter
from ..ingestion.content_fetcher import ContentFetcher
from ..processing.feed_fetcher import FeedFetcher
from ..processing.feed_processor import FeedProcessor, FeedResult
from ..storage.cache_repository import CacheRepository
from ..storage.memory_cache import MemoryCache
from ..storage.sqlite_cache import SQLiteCache
from ..utils.logging import get_logger_for_component, PerformanceLogger
from ..utils.exceptions import FeedNoteError

logger = get_logger_for_component("scheduler")


def resolve_first_run_latest_only(configured: bool, cache: CacheRepository) -> bool:
    """Decide the effective first-run policy for a cache.

    A volatile cache forgets every watermark on restart, which would
    replay each feed's full backlog, so latest-only is always enforced
    for it.
    """
    if not cache.durable and not configured:
        logger.warning(
            "first_run_latest_only is disabled but the cache is in memory; "
            "enabling it to avoid reposting feed backlogs after each restart"
        )
        return True
    return configured


def build_cache(settings: FeedNoteSettings) -> CacheRepository:
    """Open the durable cache when a path is configured, else use memory.

    Raises:
        DatabaseError: If the configured database cannot be opened
    """
    if settings.database.path:
        return SQLiteCache(settings.database.path)

    logger.info("No database path configured, using in-memory cache")
    return MemoryCache()


def build_sender(settings: FeedNoteSettings) -> NoteSender:
    """Create the configured delivery sink."""
    if settings.delivery.sink == DeliverySink.TELEGRAM:
        from ..delivery.telegram_sender import TelegramNoteSender

        return TelegramNoteSender(
            bot_token=settings.telegram.bot_token,
            chat_id=settings.telegram.chat_id,
        )

    from ..delivery.misskey_sender import MisskeyNoteSender

    return MisskeyNoteSender(
        host=settings.misskey.host,
        auth_token=settings.misskey.auth_token,
        local_only=settings.misskey.local_only,
        timeout=settings.misskey.request_timeout,
    )


def build_summarizer(settings: FeedNoteSettings) -> Summarizer:
    """Create the configured summarizer, falling back to no-op on failure."""
    try:
        return create_summarizer(settings.llm)
    except FeedNoteError as e:
        logger.warning(f"Summarizer unavailable, continuing without summaries: {e}")
        return NoopSummarizer()


def build_feed_processor(
    settings: FeedNoteSettings,
    cache: CacheRepository,
    sender: NoteSender,
    rate_limiter: RateLimiter,
    summarizer: Optional[Summarizer] = None,
) -> FeedProcessor:
    """Assemble a FeedProcessor from settings and the shared components."""
    if summarizer is None:
        summarizer = build_summarizer(settings)

    content_fetcher = None
    if settings.processing.content_fetch_enabled and summarizer.is_enabled():
        content_fetcher = ContentFetcher(timeout=settings.processing.content_fetch_timeout)

    return FeedProcessor(
        feed_fetcher=FeedFetcher(timeout=settings.processing.request_timeout),
        cache=cache,
        sender=sender,
        rate_limiter=rate_limiter,
        summarizer=summarizer,
        content_fetcher=content_fetcher,
        first_run_latest_only=resolve_first_run_latest_only(
            settings.processing.first_run_latest_only, cache
        ),
        visibility=settings.misskey.visibility,
        summary_timeout=settings.llm.timeout,
        min_content_length=settings.summary.min_content_length,
    )


class FeedScheduler:
    """Runs feed passes on an interval with periodic cache cleanup."""

    def __init__(
        self,
        settings: Optional[FeedNoteSettings] = None,
        cache: Optional[CacheRepository] = None,
        sender: Optional[NoteSender] = None,
        processor: Optional[FeedProcessor] = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        self.logger = logger

        self.cache = cache if cache is not None else build_cache(self.settings)
        self.sender = sender if sender is not None else build_sender(self.settings)
        self.rate_limiter = RateLimiter(
            max_permits=self.settings.delivery.max_permits,
            refill_interval=self.settings.delivery.refill_interval,
        )
        if processor is None:
            processor = build_feed_processor(
                self.settings, self.cache, self.sender, self.rate_limiter
            )
        self.processor = processor

        self._stopping = False
        self._last_cleanup = time.monotonic()
        self.passes_completed = 0

    async def run_once(self) -> List[FeedResult]:
        """Run a single pass over all configured feeds."""
        self.logger.info(f"Starting pass over {len(self.settings.feeds)} feeds")

        with PerformanceLogger(self.logger, "feed pass", feed_count=len(self.settings.feeds)):
            results = await self.processor.process_all_feeds(self.settings.feeds)
        self.passes_completed += 1

        self.logger.debug(
            "Pass totals",
            extra={
                "delivered": sum(r.delivered for r in results),
                "failed_feeds": sum(1 for r in results if not r.success),
            },
        )
        return results

    def run_cleanup(self, retention_days: Optional[int] = None) -> int:
        """Forget processed GUIDs older than the retention window.

        Failures are logged and reported as zero removals.
        """
        days = retention_days or self.settings.database.retention_days
        try:
            removed = self.cache.cleanup_old_guids(timedelta(days=days))
        except FeedNoteError as e:
            self.logger.error(f"Cache cleanup failed: {e}")
            return 0

        self._last_cleanup = time.monotonic()
        self.logger.info(f"Cache cleanup removed {removed} GUIDs older than {days} days")
        return removed

    def _cleanup_due(self) -> bool:
        interval = self.settings.database.cleanup_interval_hours * 3600
        return time.monotonic() - self._last_cleanup >= interval

    def request_stop(self, task: asyncio.Task) -> None:
        """Signal handler: stop after cancelling the running pass."""
        if not self._stopping:
            self.logger.info("Shutdown requested")
            self._stopping = True
            task.cancel()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        task = asyncio.current_task()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop, task)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform or outside the main thread
                self.logger.debug(f"Cannot install handler for {sig.name}")

    async def run(self) -> None:
        """Run passes every ``fetch_interval`` seconds until stopped."""
        self._install_signal_handlers()
        interval = self.settings.processing.fetch_interval
        self.logger.info(
            f"Scheduler started: {len(self.settings.feeds)} feeds, "
            f"interval {interval}s, cache {'sqlite' if self.cache.durable else 'memory'}"
        )

        try:
            while True:
                await self.run_once()
                if self._cleanup_due():
                    self.run_cleanup()
                await asyncio.sleep(interval)

        except asyncio.CancelledError:
            if not self._stopping:
                raise
            self.logger.info("Scheduler stopped")

        finally:
            await self.close()

    async def close(self) -> None:
        """Close the sender and the cache."""
        try:
            await self.sender.close()
        except Exception as e:
            self.logger.warning(f"Sender shutdown error: {e}")
        self.cache.close()
