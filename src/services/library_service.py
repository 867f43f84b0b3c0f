"""
Library Service

A user's list of uploads ("my drops") and their removal.
"""

from typing import Optional

from src.core.exceptions import TelegramError
from src.core.telegram import TelegramGateway
from src.exceptions import ValidationError, AuthenticationError, AuthorizationError, NotFoundError
from src.models.schemas import UserFileListResponse, UserFileResponse, SuccessResponse
from src.repositories import FileRepository, UserFileRepository
from src.services.base_service import BaseService
from src.services.token_service import SessionClaims


class LibraryService(BaseService):
    """Service for the per-user file library"""

    def __init__(
            self,
            gateway: TelegramGateway,
            file_repository: FileRepository,
            user_file_repository: UserFileRepository
    ):
        super().__init__()
        self.gateway = gateway
        self.files = file_repository
        self.user_files = user_file_repository

    async def list_files(
            self,
            user_id: Optional[str],
            claims: Optional[SessionClaims] = None
    ) -> UserFileListResponse:
        """
        List a user's library, newest first

        Args:
            user_id: Owner of the library
            claims: Session of the caller, when a valid token was sent

        Raises:
            AuthorizationError: If the token belongs to another user
        """
        if not user_id:
            raise ValidationError("Missing user_id", field="user_id")
        if claims is not None and claims.user_id != user_id:
            self.logger.warning("Library access denied", user_id=user_id, caller=claims.user_id)
            raise AuthorizationError("Access denied")

        entries = await self.user_files.list_for_user(user_id)
        return UserFileListResponse(files=[UserFileResponse.from_document(e) for e in entries])

    async def delete_file(self, claims: Optional[SessionClaims], slug: str) -> SuccessResponse:
        """
        Remove an upload from the caller's library

        The channel message is deleted when the caller's session allows
        it; a failed delete leaves the message in the channel.
        """
        if claims is None:
            raise AuthenticationError()

        entry = await self.user_files.get_for_user(claims.user_id, slug)
        if entry is None:
            raise NotFoundError("File not found", resource_type="user_file", resource_id=slug)

        if claims.session and claims.channel_id is not None:
            file = await self.files.get_by_slug(slug)
            if file is not None and file.telegram_message_id:
                await self._delete_message(claims, file.telegram_message_id, slug)
            await self.files.delete_by_slug(slug)

        await self.user_files.delete_for_user(claims.user_id, slug)
        self.log_operation("delete_file", user_id=claims.user_id, slug=slug)
        return SuccessResponse()

    async def _delete_message(self, claims: SessionClaims, message_id: str, slug: str) -> None:
        try:
            async with self.gateway.session(claims.session) as session:
                await session.delete_message(claims.channel_id, int(message_id))
        except (TelegramError, ValueError) as e:
            self.logger.warning(
                "Channel message delete failed",
                slug=slug,
                error_type=type(e).__name__,
                error=str(e)
            )
