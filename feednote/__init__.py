"""
FeedNote - RSS to Misskey Notes
===============================

Polls RSS/Atom feeds and posts each new entry as a note, optionally with
an LLM-generated summary.

Main Components:
- Storage: watermark + processed-GUID cache (in-memory or SQLite)
- Processing: feed fetching, keyword filtering, new-entry selection
- Delivery: Misskey/Telegram senders behind a token-bucket rate limiter
- AI Integration: Gemini/Groq/OpenAI summarizers with a no-op fallback
- Scheduler: interval loop with periodic cache cleanup
"""

__version__ = "1.0.0"
__author__ = "FeedNote Development Team"
__description__ = "RSS feed to Misskey note bot"

# Core imports for easy access
from .config.settings import get_settings
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import FeedNoteError

__all__ = [
    "get_settings",
    "configure_application_logging",
    "get_logger_for_component",
    "FeedNoteError",
]
