"""
Telegram Note Sender
====================

Alternative sink that posts notes to a Telegram chat.
"""

from typing import Optional

from telegram import Bot
from telegram.error import TelegramError, BadRequest, Forbidden, TimedOut

from .base import NoteSender
from ..database.models import Note
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DeliveryError, ErrorCode


class TelegramNoteSender(NoteSender):
    """Delivers notes as plain-text Telegram messages."""

    name = "telegram"

    def __init__(self, bot_token: str, chat_id: str, bot: Optional[Bot] = None):
        """Initialize Telegram sender.

        Args:
            bot_token: Bot API token
            chat_id: Target chat or channel ID
            bot: Pre-built bot instance (mainly for tests)
        """
        self.chat_id = chat_id
        self.bot = bot or Bot(token=bot_token)
        self._initialized = False
        self.logger = get_logger_for_component("telegram_sender")

    async def post(self, note: Note) -> None:
        try:
            if not self._initialized:
                await self.bot.initialize()
                self._initialized = True

            await self.bot.send_message(
                chat_id=self.chat_id,
                text=note.text,
                disable_web_page_preview=False,
            )

        except (BadRequest, Forbidden) as e:
            # Invalid chat, message, or bot removed from the chat
            raise DeliveryError(
                f"Telegram rejected message for {self.chat_id}: {e}",
                sink=self.name,
                error_code=ErrorCode.DELIVERY_MESSAGE_REJECTED,
            ) from e

        except TimedOut as e:
            raise DeliveryError(
                f"Timeout sending to {self.chat_id}: {e}",
                sink=self.name,
                error_code=ErrorCode.DELIVERY_TIMEOUT,
            ) from e

        except TelegramError as e:
            raise DeliveryError(
                f"Telegram error sending to {self.chat_id}: {e}", sink=self.name
            ) from e

        self.logger.debug(f"Sent note to chat {self.chat_id}")

    async def close(self) -> None:
        if self._initialized:
            await self.bot.shutdown()
            self._initialized = False
            self.logger.debug("Bot shutdown completed")
