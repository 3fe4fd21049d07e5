"""
FeedNote Custom Exceptions
==========================

Exception hierarchy for FeedNote with error codes, context information
and user-friendly messages.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"

    # Database / cache errors (D001-D099)
    DATABASE_CONNECTION = "D001"
    DATABASE_SCHEMA = "D002"
    DATABASE_ERROR = "D006"

    # Feed ingestion errors (F001-F099)
    FEED_INVALID_URL = "F001"
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_HTTP_ERROR = "F005"

    # Content processing errors (P001-P099)
    CONTENT_INVALID = "P001"
    CONTENT_EXTRACTION_FAILED = "P003"

    # Summarization errors (A001-A099)
    AI_API_ERROR = "A001"
    AI_INVALID_RESPONSE = "A003"
    AI_TIMEOUT = "A004"
    AI_INVALID_CREDENTIALS = "A009"

    # Delivery errors (L001-L099)
    DELIVERY_FAILED = "L001"
    DELIVERY_MESSAGE_REJECTED = "L003"
    DELIVERY_TIMEOUT = "L004"

    # System errors (S001-S099)
    SYSTEM_PERMISSION_DENIED = "S002"


class FeedNoteError(Exception):
    """Base exception for all FeedNote errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize FeedNote error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: User-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


def _passthrough(kwargs: Dict[str, Any], consumed) -> Dict[str, Any]:
    return {k: v for k, v in kwargs.items() if k not in consumed}


class ConfigurationError(FeedNoteError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            **kwargs: Additional arguments for FeedNoteError
        """
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", f"Configuration error: {message}"),
            **_passthrough(kwargs, ["context", "error_code", "user_message"]),
        )


class DatabaseError(FeedNoteError):
    """Cache database errors."""

    def __init__(self, message: str, query: Optional[str] = None, **kwargs):
        """Initialize database error.

        Args:
            message: Error message
            query: SQL query that caused the error
            **kwargs: Additional arguments for FeedNoteError
        """
        context = kwargs.get("context", {})
        if query:
            context["query"] = query

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.DATABASE_ERROR),
            context=context,
            user_message=kwargs.get("user_message", "Cache operation failed"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(
                kwargs, ["context", "error_code", "user_message", "recoverable"]
            ),
        )


class FeedError(FeedNoteError):
    """Feed ingestion and parsing errors."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        """Initialize feed error.

        Args:
            message: Error message
            feed_url: Feed URL that caused the error
            **kwargs: Additional arguments for FeedNoteError
        """
        context = kwargs.get("context", {})
        if feed_url:
            context["feed_url"] = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_NETWORK_ERROR),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Feed processing failed: {message}"
            ),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(
                kwargs, ["context", "error_code", "user_message", "recoverable"]
            ),
        )


class FeedFetchError(FeedError):
    """RSS feed fetching errors."""

    pass


class ProcessingError(FeedNoteError):
    """Entry processing errors."""

    def __init__(self, message: str, guid: Optional[str] = None, **kwargs):
        """Initialize processing error.

        Args:
            message: Error message
            guid: Entry GUID that caused the error
            **kwargs: Additional arguments for FeedNoteError
        """
        context = kwargs.get("context", {})
        if guid:
            context["guid"] = guid

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONTENT_INVALID),
            context=context,
            user_message=kwargs.get("user_message", "Entry processing failed"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(
                kwargs, ["context", "error_code", "user_message", "recoverable"]
            ),
        )


class ContentFetchError(ProcessingError):
    """Article page download / extraction errors."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if url:
            context["url"] = url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONTENT_EXTRACTION_FAILED),
            context=context,
            user_message=kwargs.get("user_message", "Article content unavailable"),
            **_passthrough(kwargs, ["context", "error_code", "user_message"]),
        )


class SummarizationError(FeedNoteError):
    """LLM summarization errors."""

    def __init__(self, message: str, provider: Optional[str] = None, **kwargs):
        """Initialize summarization error.

        Args:
            message: Error message
            provider: LLM provider name (e.g., 'gemini', 'groq')
            **kwargs: Additional arguments for FeedNoteError
        """
        context = kwargs.get("context", {})
        if provider:
            context["llm_provider"] = provider

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.AI_API_ERROR),
            context=context,
            user_message=kwargs.get(
                "user_message", "Summarization temporarily unavailable"
            ),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(
                kwargs, ["context", "error_code", "user_message", "recoverable"]
            ),
        )
        self.provider = provider


class DeliveryError(FeedNoteError):
    """Note delivery errors."""

    def __init__(
        self,
        message: str,
        sink: Optional[str] = None,
        status: Optional[int] = None,
        **kwargs,
    ):
        """Initialize delivery error.

        Args:
            message: Error message
            sink: Delivery sink name ('misskey', 'telegram')
            status: HTTP status returned by the sink, if any
            **kwargs: Additional arguments for FeedNoteError
        """
        context = kwargs.get("context", {})
        if sink:
            context["sink"] = sink
        if status is not None:
            context["status"] = status

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.DELIVERY_FAILED),
            context=context,
            user_message=kwargs.get("user_message", "Note delivery failed"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(
                kwargs, ["context", "error_code", "user_message", "recoverable"]
            ),
        )
        self.status = status


# Exception handling utilities


def handle_exception(
    exception: Exception,
    logger,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> FeedNoteError:
    """Convert generic exceptions to FeedNote exceptions with proper logging.

    Args:
        exception: Original exception
        logger: Logger instance for error logging
        operation: Operation that was being performed
        context: Additional context information

    Returns:
        FeedNote exception with proper categorization
    """
    context = context or {}
    context["operation"] = operation
    context["original_exception_type"] = type(exception).__name__

    if isinstance(exception, FeedNoteError):
        logger.error(f"Operation '{operation}' failed: {exception}", extra=exception.to_dict())
        return exception

    elif isinstance(exception, (ConnectionError, TimeoutError)):
        error = FeedNoteError(
            message=f"Network error during {operation}: {str(exception)}",
            error_code=ErrorCode.FEED_NETWORK_ERROR,
            context=context,
            user_message="Network connection failed",
            recoverable=True,
        )

    elif isinstance(exception, PermissionError):
        error = FeedNoteError(
            message=f"Permission denied during {operation}: {str(exception)}",
            error_code=ErrorCode.SYSTEM_PERMISSION_DENIED,
            context=context,
            user_message="Access denied",
            recoverable=False,
        )

    else:
        error = FeedNoteError(
            message=f"Unexpected error during {operation}: {str(exception)}",
            context=context,
            user_message="An unexpected error occurred",
            recoverable=True,
        )

    logger.error(f"Operation '{operation}' failed: {error}", extra=error.to_dict())
    return error
