"""
Misskey Note Sender
===================

Posts notes to a Misskey instance through ``/api/notes/create``.
"""

import asyncio
import ssl
from typing import Optional

import aiohttp
import certifi

from .base import NoteSender
from ..database.models import Note
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DeliveryError, ErrorCode


class MisskeyNoteSender(NoteSender):
    """Delivers notes to Misskey over HTTPS."""

    name = "misskey"

    def __init__(
        self,
        host: str,
        auth_token: str,
        local_only: bool = False,
        timeout: int = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize Misskey sender.

        Args:
            host: Instance host name, with or without scheme
            auth_token: API access token
            local_only: Keep notes off the federated timeline
            timeout: Request timeout in seconds
            session: Existing aiohttp session (not closed by this sender)
        """
        self.host = host.rstrip("/")
        self.auth_token = auth_token
        self.local_only = local_only
        self.timeout = timeout
        self.logger = get_logger_for_component("misskey_sender")

        self._session = session
        self._owns_session = session is None
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @property
    def endpoint(self) -> str:
        """Full URL of the note creation endpoint."""
        base = self.host
        if not base.startswith(("http://", "https://")):
            base = f"https://{base}"
        return f"{base}/api/notes/create"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=self.ssl_context)
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": "FeedNote/1.0"},
            )
            self._owns_session = True
        return self._session

    async def post(self, note: Note) -> None:
        payload = {
            "i": self.auth_token,
            "text": note.text,
            "visibility": note.visibility.value,
            "localOnly": self.local_only,
        }

        session = self._get_session()
        try:
            async with session.post(self.endpoint, json=payload) as response:
                if response.status != 200:
                    body = await response.text()
                    raise DeliveryError(
                        f"Misskey API returned status {response.status}: {body[:200]}",
                        sink=self.name,
                        status=response.status,
                        error_code=ErrorCode.DELIVERY_MESSAGE_REJECTED,
                    )

        except asyncio.TimeoutError as e:
            raise DeliveryError(
                f"Misskey request timed out after {self.timeout}s",
                sink=self.name,
                error_code=ErrorCode.DELIVERY_TIMEOUT,
            ) from e

        except aiohttp.ClientError as e:
            raise DeliveryError(
                f"Failed to send request to Misskey: {e}", sink=self.name
            ) from e

        self.logger.debug(f"Posted note to {self.host}: {note}")

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
