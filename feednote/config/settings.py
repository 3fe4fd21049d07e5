"""
FeedNote Configuration System
=============================

Simple configuration management with environment variables and Pydantic models.
Environment variables override Field defaults with clear precedence.

Feeds can be configured either as JSON in ``FEEDNOTE_FEEDS`` or with
numbered variables::

    FEEDNOTE_FEED_URL_1=https://example.com/rss
    FEEDNOTE_FEED_KEYWORDS_1=python,asyncio
    FEEDNOTE_FEED_URL_2=https://example.org/atom.xml
"""

import os
from pathlib import Path
from typing import List, Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from ..database.models import NoteVisibility
from ..utils.exceptions import ConfigurationError, ErrorCode

ENV_PREFIX = "FEEDNOTE_"


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DeliverySink(str, Enum):
    """Available note sinks."""
    MISSKEY = "misskey"
    TELEGRAM = "telegram"


class LLMProvider(str, Enum):
    """Available summarization providers."""
    NOOP = "noop"
    GEMINI = "gemini"
    GROQ = "groq"
    OPENAI = "openai"


class FeedSettings(BaseModel):
    """A single watched feed."""
    url: str = Field(..., min_length=1, description="Feed URL")
    keywords: List[str] = Field(default_factory=list, description="Keep only entries matching any keyword")

    @field_validator('keywords', mode='before')
    @classmethod
    def split_keywords(cls, v):
        """Accept a comma-separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [k.strip() for k in v.split(',') if k.strip()]
        return v


class MisskeySettings(BaseModel):
    """Misskey instance configuration."""
    host: Optional[str] = Field(default=None, description="Instance host, e.g. misskey.io")
    auth_token: Optional[str] = Field(default=None, description="API access token")
    visibility: NoteVisibility = Field(default=NoteVisibility.HOME, description="Note visibility")
    local_only: bool = Field(default=False, description="Do not federate notes")
    request_timeout: int = Field(default=30, ge=1, le=300, description="Request timeout in seconds")


class TelegramSettings(BaseModel):
    """Telegram bot configuration."""
    bot_token: Optional[str] = Field(default=None, description="Telegram bot token")
    chat_id: Optional[str] = Field(default=None, description="Target chat or channel ID")


class DeliverySettings(BaseModel):
    """Sink selection and outbound rate limiting."""
    sink: DeliverySink = Field(default=DeliverySink.MISSKEY, description="Where notes are posted")
    max_permits: int = Field(default=3, ge=1, le=100, description="Rate limiter burst capacity")
    refill_interval: float = Field(default=10.0, gt=0, description="Seconds per refilled permit")


class ProcessingSettings(BaseModel):
    """Feed polling configuration."""
    fetch_interval: int = Field(default=1800, ge=1, description="Seconds between passes")
    first_run_latest_only: bool = Field(default=True, description="Post only the newest entry of a never-seen feed")
    request_timeout: int = Field(default=30, ge=1, le=300, description="Feed request timeout in seconds")
    content_fetch_enabled: bool = Field(default=True, description="Fetch article pages for short entries")
    content_fetch_timeout: int = Field(default=15, ge=1, le=300, description="Article page timeout in seconds")


class SummarySettings(BaseModel):
    """Summary input configuration."""
    min_content_length: int = Field(default=100, ge=0, description="Fetch the page when the description is shorter")


class DatabaseSettings(BaseModel):
    """Entry cache configuration."""
    path: Optional[str] = Field(default=None, description="SQLite cache path; unset keeps the cache in memory")
    retention_days: int = Field(default=30, ge=1, le=3650, description="Days to remember delivered GUIDs")
    cleanup_interval_hours: int = Field(default=24, ge=1, le=720, description="Hours between retention sweeps")

    @field_validator('path', mode='before')
    @classmethod
    def blank_path_is_memory(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LLMSettings(BaseModel):
    """Summarization provider configuration."""
    provider: LLMProvider = Field(default=LLMProvider.NOOP, description="Summarizer provider")
    api_key: Optional[str] = Field(default=None, description="Provider API key")
    model: str = Field(default="", description="Model name; empty uses the provider default")
    max_tokens: int = Field(default=0, ge=0, description="Max output tokens; 0 uses the provider default")
    timeout: float = Field(default=30.0, gt=0, description="Summary timeout in seconds")
    system_instruction: Optional[str] = Field(default=None, description="Custom system prompt")

    @field_validator('provider', mode='before')
    @classmethod
    def empty_provider_is_noop(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return LLMProvider.NOOP
        return v.lower() if isinstance(v, str) else v


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default="logs/feednote.log", description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")


def _numbered_feeds_from_env() -> List[FeedSettings]:
    """Read FEEDNOTE_FEED_URL_1..N, stopping at the first missing index."""
    feeds = []
    index = 1
    while True:
        url = os.getenv(f"{ENV_PREFIX}FEED_URL_{index}")
        if not url:
            break
        keywords = os.getenv(f"{ENV_PREFIX}FEED_KEYWORDS_{index}", "")
        feeds.append(FeedSettings(url=url.strip(), keywords=keywords))
        index += 1
    return feeds


class FeedNoteSettings(BaseSettings):
    """Main application settings."""

    feeds: List[FeedSettings] = Field(default_factory=list)
    misskey: MisskeySettings = Field(default_factory=MisskeySettings)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    delivery: DeliverySettings = Field(default_factory=DeliverySettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    summary: SummarySettings = Field(default_factory=SummarySettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Application metadata
    app_name: str = Field(default="FeedNote", description="Application name")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": ENV_PREFIX,
        "extra": "ignore",
    }

    @model_validator(mode='after')
    def add_numbered_feeds(self):
        """Append feeds configured through numbered variables."""
        known = {feed.url for feed in self.feeds}
        for feed in _numbered_feeds_from_env():
            if feed.url not in known:
                self.feeds.append(feed)
                known.add(feed.url)
        return self

    @property
    def uses_durable_cache(self) -> bool:
        return self.database.path is not None

    def validate_configuration(self) -> None:
        """Validate complete configuration.

        Raises:
            ConfigurationError: Listing every problem found
        """
        errors = []

        if not self.feeds:
            errors.append("No feeds configured (set FEEDNOTE_FEEDS or FEEDNOTE_FEED_URL_1)")

        for feed in self.feeds:
            if not feed.url.startswith(("http://", "https://")):
                errors.append(f"Feed URL must be http(s): {feed.url}")

        if self.delivery.sink == DeliverySink.MISSKEY:
            if not self.misskey.host or not self.misskey.auth_token:
                errors.append("Misskey sink requires misskey.host and misskey.auth_token")
        elif self.delivery.sink == DeliverySink.TELEGRAM:
            if not self.telegram.bot_token or not self.telegram.chat_id:
                errors.append("Telegram sink requires telegram.bot_token and telegram.chat_id")

        if self.database.path:
            try:
                Path(self.database.path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid database path: {e}")

        if self.logging.file_path:
            try:
                Path(self.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid log file path: {e}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                error_code=ErrorCode.CONFIG_INVALID
            )

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value


def load_settings(validate: bool = True) -> FeedNoteSettings:
    """Load settings from environment variables and defaults.

    Args:
        validate: Run ``validate_configuration`` after loading

    Returns:
        Loaded settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    # Load .env into the process environment so numbered feed variables are visible
    from dotenv import load_dotenv
    load_dotenv()

    try:
        settings = FeedNoteSettings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        ) from e

    if validate:
        settings.validate_configuration()

    return settings


# Global settings instance
_settings: Optional[FeedNoteSettings] = None


def get_settings(reload: bool = False) -> FeedNoteSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
