"""
Telegram session operations.

A TelegramSession wraps one connected Telethon client and exposes the
few RPCs VoidBox needs: the login handshake, channel creation and
storing files as channel messages. Every error leaving this module is
a core exception.
"""

import io
from dataclasses import dataclass
from typing import Optional

import structlog
from telethon import TelegramClient, functions, types
from telethon.password import compute_check

from src.config.constants import DEFAULT_CODE_TIMEOUT
from src.core.exceptions import TelegramError, MessageNotFoundError
from src.core.telegram.errors import translate_errors
from src.utils.metrics import metrics


@dataclass
class SentCode:
    """Result of a send-code request"""
    phone_code_hash: str
    timeout: int = DEFAULT_CODE_TIMEOUT


@dataclass
class TelegramUser:
    """The parts of a Telegram account VoidBox stores"""
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    has_photo: bool = False

    @classmethod
    def from_telethon(cls, user: types.User) -> "TelegramUser":
        return cls(
            id=int(user.id),
            first_name=user.first_name,
            last_name=user.last_name,
            username=user.username,
            has_photo=isinstance(getattr(user, "photo", None), types.UserProfilePhoto),
        )


@dataclass
class StoredMessage:
    """Location of an uploaded file in a channel"""
    file_id: str
    message_id: str


class TelegramSession:
    """
    Operations on one connected Telegram client.

    Instances are created by :class:`TelegramGateway.session`, which
    owns the connection.
    """

    def __init__(self, client: TelegramClient, api_id: int, api_hash: str):
        self.client = client
        self.api_id = api_id
        self.api_hash = api_hash
        self.logger = structlog.get_logger("TelegramSession")

    # Authentication

    async def send_code(self, phone_number: str) -> SentCode:
        """
        Ask Telegram to send a login code.

        Args:
            phone_number: Phone number in international format

        Returns:
            The code hash needed by :meth:`sign_in`
        """
        request = functions.auth.SendCodeRequest(
            phone_number=phone_number,
            api_id=self.api_id,
            api_hash=self.api_hash,
            settings=types.CodeSettings(
                allow_flashcall=True,
                current_number=True,
                allow_app_hash=True,
            ),
        )

        with metrics.time_telegram("send_code"), translate_errors("send_code"):
            result = await self.client(request)

        phone_code_hash = getattr(result, "phone_code_hash", None)
        if not phone_code_hash:
            raise TelegramError("Telegram did not return a code hash", operation="send_code")

        return SentCode(
            phone_code_hash=phone_code_hash,
            timeout=getattr(result, "timeout", None) or DEFAULT_CODE_TIMEOUT,
        )

    async def sign_in(
            self,
            phone_number: str,
            phone_code: str,
            phone_code_hash: str
    ) -> Optional[TelegramUser]:
        """
        Complete the login with the received code.

        Returns:
            The logged in account, or None when Telegram returned no user

        Raises:
            PasswordRequiredError: If the account needs its 2FA password
            InvalidCodeError: If the code is wrong
            CodeExpiredError: If the code expired
        """
        request = functions.auth.SignInRequest(
            phone_number=phone_number,
            phone_code_hash=phone_code_hash,
            phone_code=phone_code,
        )

        with metrics.time_telegram("sign_in"), translate_errors("sign_in"):
            result = await self.client(request)

        return self._user_from_authorization(result)

    async def check_password(self, password: str) -> Optional[TelegramUser]:
        """
        Complete a login with the two-step verification password.

        Returns:
            The logged in account, or None when Telegram returned no user

        Raises:
            InvalidPasswordError: If the password is wrong
        """
        with metrics.time_telegram("check_password"), translate_errors("check_password"):
            password_info = await self.client(functions.account.GetPasswordRequest())
            srp_check = compute_check(password_info, password)
            result = await self.client(functions.auth.CheckPasswordRequest(password=srp_check))

        return self._user_from_authorization(result)

    @staticmethod
    def _user_from_authorization(result) -> Optional[TelegramUser]:
        # auth.AuthorizationSignUpRequired carries no user
        user = getattr(result, "user", None)
        if not isinstance(user, types.User):
            return None
        return TelegramUser.from_telethon(user)

    # Storage

    async def create_drive_channel(self, title: str, about: str) -> int:
        """
        Create the private broadcast channel used as file storage.

        Returns:
            The channel id
        """
        request = functions.channels.CreateChannelRequest(
            title=title,
            about=about,
            megagroup=False,
        )

        with metrics.time_telegram("create_channel"), translate_errors("create_channel"):
            result = await self.client(request)

        chats = getattr(result, "chats", None) or []
        if not chats or not getattr(chats[0], "id", None):
            raise TelegramError("Failed to create channel", operation="create_channel")

        channel_id = int(chats[0].id)
        self.logger.info("Drive channel created", channel_id=channel_id)
        return channel_id

    async def _resolve_channel(self, channel_id: int):
        peer = types.PeerChannel(channel_id)
        try:
            return await self.client.get_input_entity(peer)
        except ValueError:
            # Fresh string sessions start with an empty entity cache
            self.logger.debug("Channel not cached, refreshing dialogs", channel_id=channel_id)
            await self.client.get_dialogs()
            try:
                return await self.client.get_input_entity(peer)
            except ValueError as e:
                raise TelegramError(
                    "Storage channel not found", operation="resolve_channel"
                ) from e

    async def send_file(
            self,
            channel_id: int,
            data: bytes,
            filename: str,
            mimetype: Optional[str] = None
    ) -> StoredMessage:
        """
        Upload bytes to a channel as a document.

        Args:
            channel_id: Target channel
            data: File content
            filename: Name shown in the channel, its extension drives the MIME type
            mimetype: Declared MIME type, for logging

        Returns:
            File and message ids of the new channel message
        """
        stream = io.BytesIO(data)
        stream.name = filename

        with metrics.time_telegram("send_file"), translate_errors("send_file"):
            entity = await self._resolve_channel(channel_id)
            message = await self.client.send_file(entity, stream, force_document=True)

        media = getattr(message, "document", None) or getattr(message, "photo", None)
        file_id = str(media.id) if media is not None else ""

        self.logger.info(
            "File stored in channel",
            channel_id=channel_id,
            message_id=message.id,
            size=len(data),
            mimetype=mimetype
        )
        return StoredMessage(file_id=file_id, message_id=str(message.id))

    async def download_file(self, channel_id: int, message_id: int) -> bytes:
        """
        Download the media of a channel message.

        Raises:
            MessageNotFoundError: If the message does not exist or has no media
            TelegramError: If the download returns nothing
        """
        with metrics.time_telegram("download_file"), translate_errors("download_file"):
            entity = await self._resolve_channel(channel_id)
            message = await self.client.get_messages(entity, ids=message_id)

            if message is None:
                raise MessageNotFoundError("Message not found", operation="download_file")
            if not getattr(message, "media", None):
                raise MessageNotFoundError("Message has no media", operation="download_file")

            data = await self.client.download_media(message, file=bytes)

        if not data:
            raise TelegramError("Failed to download file", operation="download_file")
        return data

    async def delete_message(self, channel_id: int, message_id: int) -> bool:
        """
        Delete a channel message.

        Returns:
            True if Telegram reported the message as deleted
        """
        with metrics.time_telegram("delete_message"), translate_errors("delete_message"):
            entity = await self._resolve_channel(channel_id)
            affected = await self.client.delete_messages(entity, [message_id])

        return any(getattr(item, "pts_count", 0) for item in affected or [])

    def export(self) -> str:
        """Current string session, including the authorization key."""
        return self.client.session.save()
