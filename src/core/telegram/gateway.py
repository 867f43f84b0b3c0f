"""
Telegram client factory.

The gateway owns the application credentials and hands out connected
sessions built from string sessions. A connection lives only for the
duration of one ``async with`` block.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from telethon import TelegramClient
from telethon.sessions import StringSession

from src.config.settings import get_settings
from src.core.exceptions import TelegramConfigurationError
from src.core.telegram.errors import translate_errors
from src.core.telegram.session import TelegramSession


class TelegramGateway:
    """
    Creates Telegram sessions for the auth and file services.
    """

    def __init__(self, api_id: int, api_hash: str, connection_retries: int = 3):
        """
        Initialize gateway

        Args:
            api_id: Telegram application id
            api_hash: Telegram application hash
            connection_retries: Client reconnect attempts
        """
        self.api_id = api_id
        self.api_hash = api_hash
        self.connection_retries = connection_retries
        self.logger = structlog.get_logger("TelegramGateway")

    @classmethod
    def from_settings(cls) -> "TelegramGateway":
        settings = get_settings()
        return cls(
            api_id=settings.TG_API_ID,
            api_hash=settings.TG_API_HASH,
            connection_retries=settings.TG_CONNECTION_RETRIES,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_id and self.api_hash)

    def create_client(self, session_string: str = "") -> TelegramClient:
        """Build a disconnected client for a string session"""
        return TelegramClient(
            StringSession(session_string or None),
            self.api_id,
            self.api_hash,
            connection_retries=self.connection_retries,
            receive_updates=False,
        )

    @asynccontextmanager
    async def session(self, session_string: Optional[str] = "") -> AsyncIterator[TelegramSession]:
        """
        Open a connected session.

        Args:
            session_string: Saved string session, empty for a new login

        Yields:
            Connected TelegramSession, disconnected on exit
        """
        if not self.is_configured:
            raise TelegramConfigurationError()

        client = self.create_client(session_string or "")
        try:
            with translate_errors("connect"):
                await client.connect()
            yield TelegramSession(client, self.api_id, self.api_hash)
        finally:
            try:
                await client.disconnect()
            except (ConnectionError, OSError) as e:
                self.logger.warning("Telegram disconnect failed", error=str(e))
