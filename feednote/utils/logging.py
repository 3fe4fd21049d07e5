"""
FeedNote Logging Configuration
==============================

Console and rotating-file logging for the poller. Every FeedNote logger
lives under the ``feednote`` namespace and carries its component name,
plus the feed URL when it works on a single feed.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER = "feednote"

# Attributes every LogRecord has; anything else was passed through ``extra``
_RECORD_ATTRIBUTES = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, context fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_record_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Short colored lines for interactive runs."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        component = getattr(record, "component", record.name)

        line = f"{color}[{timestamp}] {record.levelname:8}{self.RESET} {component}: {record.getMessage()}"

        feed_url = getattr(record, "feed_url", None)
        if feed_url:
            line += f" ({feed_url})"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class LoggerAdapter(logging.LoggerAdapter):
    """Adds component context to every record.

    Per-call ``extra`` values win over the adapter's context and the
    caller's dict is never modified.
    """

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger_for_component(
    component_name: str, feed_url: Optional[str] = None
) -> LoggerAdapter:
    """Get a logger adapter for a FeedNote component.

    Args:
        component_name: Component name, e.g. 'feed_fetcher' or 'scheduler'
        feed_url: Feed the logger is scoped to (optional)
    """
    context = {"component": component_name}
    if feed_url:
        context["feed_url"] = feed_url

    return LoggerAdapter(logging.getLogger(f"{ROOT_LOGGER}.{component_name}"), context)


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = "logs/feednote.log",
    enable_console: bool = True,
    structured_logging: bool = False,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the ``feednote`` logger tree.

    The file handler always writes JSON lines; the console uses JSON only
    when ``structured_logging`` is set. Calling this again replaces the
    handlers installed by the previous call.

    Args:
        log_level: Level name for FeedNote loggers
        log_file: Rotating log file path; empty or None disables file output
        enable_console: Log to stdout
        structured_logging: Use JSON on the console as well
        max_file_size_mb: Rotate the log file after this many megabytes
        backup_count: Number of rotated files to keep

    Returns:
        The configured ``feednote`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper()))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            StructuredFormatter() if structured_logging else ColoredConsoleFormatter()
        )
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    # Chatty client libraries
    for name in ("aiohttp", "feedparser", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("telegram").setLevel(logging.INFO)

    return logger


class PerformanceLogger:
    """Context manager that logs how long an operation took."""

    def __init__(self, logger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.start_time: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = time.monotonic()
        self.logger.debug(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        duration = time.monotonic() - self.start_time
        context = {**self.context, "duration_seconds": duration, "success": exc_type is None}

        if exc_type:
            self.logger.error(f"Failed {self.operation} after {duration:.3f}s", extra=context)
        else:
            self.logger.info(f"Completed {self.operation} in {duration:.3f}s", extra=context)
