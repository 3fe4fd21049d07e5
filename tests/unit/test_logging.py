"""
Logging Tests
=============

Tests for the component logger adapter, formatters and handler setup.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest

from feednote.utils.logging import (
    ColoredConsoleFormatter,
    PerformanceLogger,
    StructuredFormatter,
    configure_application_logging,
    get_logger_for_component,
)


def make_record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord("feednote.test", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def reset_feednote_logger():
    logger = logging.getLogger("feednote")
    saved_handlers, saved_level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        logger.addHandler(handler)
    logger.setLevel(saved_level)


class TestComponentLogger:

    def test_context(self):
        adapter = get_logger_for_component("feed_processor", feed_url="https://example.com/rss")
        assert adapter.logger.name == "feednote.feed_processor"
        assert adapter.extra == {
            "component": "feed_processor",
            "feed_url": "https://example.com/rss",
        }

    def test_call_extra_is_merged_without_mutation(self):
        adapter = get_logger_for_component("scheduler")
        extra = {"guid": "abc"}

        _, kwargs = adapter.process("msg", {"extra": extra})

        assert kwargs["extra"] == {"component": "scheduler", "guid": "abc"}
        assert extra == {"guid": "abc"}


class TestFormatters:

    def test_structured_formatter_emits_context(self):
        record = make_record(component="misskey_sender", status=429)

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["component"] == "misskey_sender"
        assert data["status"] == 429
        assert "lineno" not in data

    def test_structured_formatter_serializes_unknown_types(self):
        record = make_record(path=object())
        data = json.loads(StructuredFormatter().format(record))
        assert data["path"].startswith("<object")

    def test_console_formatter_shows_component_and_feed(self):
        record = make_record(
            "Found 2 new entries", component="feed_processor", feed_url="https://example.com/rss"
        )

        line = ColoredConsoleFormatter().format(record)

        assert "feed_processor: Found 2 new entries (https://example.com/rss)" in line


class TestConfigureApplicationLogging:

    def test_file_output_is_json(self, tmp_path, reset_feednote_logger):
        log_file = tmp_path / "logs" / "feednote.log"

        configure_application_logging(log_level="DEBUG", log_file=str(log_file), enable_console=False)
        get_logger_for_component("scheduler").info("Pass finished", extra={"delivered": 3})
        for handler in reset_feednote_logger.handlers:
            handler.flush()

        data = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert data["message"] == "Pass finished"
        assert data["component"] == "scheduler"
        assert data["delivered"] == 3

    def test_reconfiguring_replaces_handlers(self, reset_feednote_logger):
        configure_application_logging(log_file=None)
        configure_application_logging(log_file=None)

        assert len(reset_feednote_logger.handlers) == 1

    def test_no_outputs(self, reset_feednote_logger):
        logger = configure_application_logging(log_file="", enable_console=False)
        assert logger.handlers == []


class TestPerformanceLogger:

    def test_logs_completion(self):
        logger = MagicMock()

        with PerformanceLogger(logger, "feed pass", feed_count=2):
            pass

        message = logger.info.call_args.args[0]
        extra = logger.info.call_args.kwargs["extra"]
        assert message.startswith("Completed feed pass")
        assert extra["feed_count"] == 2
        assert extra["success"] is True

    def test_logs_failure_and_reraises(self):
        logger = MagicMock()

        with pytest.raises(RuntimeError):
            with PerformanceLogger(logger, "feed pass"):
                raise RuntimeError("boom")

        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["extra"]["success"] is False
