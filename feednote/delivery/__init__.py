"""
FeedNote Delivery
=================

Outbound sinks for notes and the rate limiter that guards them.
The Telegram sink lives in ``telegram_sender`` and is imported on demand.
"""

from .base import NoteSender
from .misskey_sender import MisskeyNoteSender
from .rate_limiter import RateLimiter

__all__ = [
    "NoteSender",
    "MisskeyNoteSender",
    "RateLimiter",
]
