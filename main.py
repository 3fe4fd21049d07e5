#!/usr/bin/env python3
"""
FeedNote - RSS to Misskey Notes
===============================

Main application entry point with CLI interface for running and testing.

Usage:
    python main.py --help                    # Show all commands
    python main.py check-config              # Validate configuration
    python main.py run                       # Poll feeds until interrupted
    python main.py run-once                  # Run a single pass and exit
    python main.py test-feeds                # Test RSS feed connectivity
    python main.py cleanup-cache --days 30   # Forget old processed GUIDs
"""

import sys
import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from feednote.config.settings import (
    DeliverySink,
    FeedNoteSettings,
    LLMProvider,
    get_settings,
    load_settings,
)
from feednote.utils.logging import configure_application_logging
from feednote.utils.exceptions import FeedNoteError

console = Console()


def _setup_logging(ctx, settings: FeedNoteSettings) -> None:
    configure_application_logging(
        log_level="DEBUG" if ctx.obj.get('debug') else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count,
    )


def _load_or_exit() -> FeedNoteSettings:
    try:
        return get_settings()
    except FeedNoteError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """FeedNote - post new RSS entries as Misskey notes."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        # Show help if no subcommand provided
        click.echo(ctx.get_help())


@cli.command()
def check_config():
    """Validate configuration from environment variables and .env."""
    console.print("[bold blue]🔧 Checking FeedNote Configuration[/bold blue]")

    try:
        settings = load_settings(validate=False)
    except FeedNoteError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)

    table = Table(title="Configuration Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    checks = [
        ("Feeds", _check_feeds_config),
        ("Delivery", _check_delivery_config),
        ("Cache", _check_database_config),
        ("Summarizer", _check_llm_config),
        ("Logging", _check_logging_config),
    ]

    all_passed = True
    for name, check_func in checks:
        status, details = check_func(settings)
        table.add_row(name, "✅ Valid" if status else "❌ Invalid", details)
        if not status:
            all_passed = False

    console.print(table)

    try:
        settings.validate_configuration()
    except FeedNoteError as e:
        console.print(f"[red]{e}[/red]")
        all_passed = False

    if all_passed:
        console.print("[bold green]✅ All configuration checks passed![/bold green]")
        sys.exit(0)
    else:
        console.print("[bold red]❌ Configuration validation failed[/bold red]")
        sys.exit(1)


@cli.command()
@click.pass_context
def run(ctx):
    """Poll all feeds on the configured interval until stopped."""
    settings = _load_or_exit()
    _setup_logging(ctx, settings)

    from feednote.scheduler.feed_scheduler import FeedScheduler

    console.print(
        f"[bold blue]🚀 Starting FeedNote: {len(settings.feeds)} feeds, "
        f"every {settings.processing.fetch_interval}s[/bold blue]"
    )

    async def run_scheduler():
        scheduler = FeedScheduler(settings)
        await scheduler.run()

    try:
        asyncio.run(run_scheduler())
    except FeedNoteError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)

    console.print("[yellow]👋 FeedNote stopped[/yellow]")


@cli.command()
@click.pass_context
def run_once(ctx):
    """Run a single pass over all feeds and print the results."""
    settings = _load_or_exit()
    _setup_logging(ctx, settings)

    from feednote.scheduler.feed_scheduler import FeedScheduler

    async def run_pass():
        scheduler = FeedScheduler(settings)
        try:
            return await scheduler.run_once()
        finally:
            await scheduler.close()

    try:
        results = asyncio.run(run_pass())
    except FeedNoteError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)

    table = Table(title="Pass Results")
    table.add_column("Feed", style="cyan")
    table.add_column("Status")
    table.add_column("Fetched", justify="right")
    table.add_column("New", justify="right")
    table.add_column("Delivered", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")

    for result in results:
        table.add_row(
            result.feed_url,
            "✅" if result.success else f"❌ {result.error}",
            str(result.entries_fetched),
            str(result.new_entries),
            str(result.delivered),
            str(result.failed),
        )

    console.print(table)
    if not all(r.success for r in results):
        sys.exit(1)


@cli.command()
@click.argument('urls', nargs=-1)
def test_feeds(urls):
    """Fetch feeds (configured ones by default) and show entry counts."""
    console.print("[bold blue]📡 Testing RSS Feeds[/bold blue]")

    from feednote.processing.feed_fetcher import FeedFetcher

    if urls:
        feed_urls = list(urls)
        timeout = 30
    else:
        settings = _load_or_exit()
        feed_urls = [feed.url for feed in settings.feeds]
        timeout = settings.processing.request_timeout

    async def run_fetch():
        fetcher = FeedFetcher(timeout=timeout)
        rows = []
        for url in feed_urls:
            try:
                entries = await fetcher.fetch(url)
            except FeedNoteError as e:
                rows.append((url, False, str(e), None))
                continue
            latest = max(entries, key=lambda e: e.published) if entries else None
            rows.append((url, True, f"{len(entries)} entries", latest))
        return rows

    rows = asyncio.run(run_fetch())

    table = Table(title="Feed Connectivity")
    table.add_column("Feed", style="cyan")
    table.add_column("Status")
    table.add_column("Details")
    table.add_column("Latest Entry")

    for url, ok, details, latest in rows:
        latest_text = f"{latest.published:%Y-%m-%d %H:%M} {latest.title[:40]}" if latest else "-"
        table.add_row(url, "✅" if ok else "❌", details, latest_text)

    console.print(table)
    if not all(ok for _, ok, _, _ in rows):
        sys.exit(1)


@cli.command()
@click.option('--days', type=int, default=None, help='Retention window in days (default from config)')
@click.pass_context
def cleanup_cache(ctx, days):
    """Forget processed GUIDs older than the retention window."""
    console.print("[bold blue]🧹 FeedNote Cache Cleanup[/bold blue]")

    settings = _load_or_exit()
    _setup_logging(ctx, settings)

    if not settings.database.path:
        console.print("[yellow]No database path configured; the in-memory cache has nothing to clean[/yellow]")
        return

    from datetime import timedelta
    from feednote.storage.sqlite_cache import SQLiteCache

    days = days or settings.database.retention_days
    try:
        cache = SQLiteCache(settings.database.path)
        try:
            removed = cache.cleanup_old_guids(timedelta(days=days))
        finally:
            cache.close()
    except FeedNoteError as e:
        console.print(f"[bold red]❌ Cleanup error: {e}[/bold red]")
        sys.exit(1)

    console.print(f"[bold green]✅ Removed {removed} GUIDs older than {days} days[/bold green]")


def _check_feeds_config(settings) -> tuple:
    """Check feed configuration."""
    if not settings.feeds:
        return False, "No feeds configured"
    bad = [f.url for f in settings.feeds if not f.url.startswith(("http://", "https://"))]
    if bad:
        return False, f"Invalid URLs: {', '.join(bad)}"
    with_keywords = sum(1 for f in settings.feeds if f.keywords)
    return True, f"{len(settings.feeds)} feeds, {with_keywords} with keyword filters"


def _check_delivery_config(settings) -> tuple:
    """Check delivery sink configuration."""
    limits = f"{settings.delivery.max_permits} burst, 1 per {settings.delivery.refill_interval:g}s"
    if settings.delivery.sink == DeliverySink.TELEGRAM:
        if not settings.telegram.bot_token or not settings.telegram.chat_id:
            return False, "Telegram bot token or chat ID missing"
        return True, f"Telegram chat {settings.telegram.chat_id}, {limits}"

    if not settings.misskey.host or not settings.misskey.auth_token:
        return False, "Misskey host or auth token missing"
    return True, f"Misskey {settings.misskey.host} ({settings.misskey.visibility.value}), {limits}"


def _check_database_config(settings) -> tuple:
    """Check cache configuration."""
    if not settings.database.path:
        return True, "In-memory (first-run latest-only enforced)"
    try:
        Path(settings.database.path).parent.mkdir(parents=True, exist_ok=True)
        return True, f"SQLite: {settings.database.path}, retention {settings.database.retention_days}d"
    except OSError as e:
        return False, str(e)


def _check_llm_config(settings) -> tuple:
    """Check summarizer configuration."""
    if settings.llm.provider == LLMProvider.NOOP:
        return True, "Disabled"
    if not settings.llm.api_key:
        return False, f"Missing API key for {settings.llm.provider.value}"
    return True, f"{settings.llm.provider.value}: {settings.llm.model or 'default model'}"


def _check_logging_config(settings) -> tuple:
    """Check logging configuration."""
    if settings.logging.file_path:
        try:
            Path(settings.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return False, str(e)
    return True, f"Level: {settings.logging.level.value}, File: {settings.logging.file_path or 'none'}"


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 FeedNote interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[bold red]❌ Unexpected error: {e}[/bold red]")
        sys.exit(1)
