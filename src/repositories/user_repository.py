"""
User Repository Implementation
==============================

MongoDB repository for users identified by their Telegram account.
"""

from typing import Optional, Dict, Any

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from src.config.constants import USERS_COLLECTION
from src.models.mongo import UserDocument, user_id_for
from src.utils.date_utils import utc_now
from .base_repository import BaseRepository
from .exceptions import RepositoryError


class UserRepository(BaseRepository[UserDocument]):
    """
    Repository for user documents in MongoDB
    """

    collection_name = USERS_COLLECTION

    async def get_by_id(self, user_id: str) -> Optional[UserDocument]:
        """
        Get user by id (``tg_<telegram_id>``)

        Returns:
            User document if found, None otherwise
        """
        try:
            async with self._timed_operation("get_user"):
                document = await self.collection.find_one({"_id": user_id})
                return UserDocument.from_dict(document)

        except PyMongoError as e:
            self._log_error("get_user", e, user_id=user_id)
            raise RepositoryError(f"Failed to get user: {e}", original_error=e)

    async def upsert_from_telegram(
            self,
            telegram_id: int,
            profile: Dict[str, Any]
    ) -> UserDocument:
        """
        Create or refresh a user from their Telegram profile

        Profile fields are overwritten on every login; the id, the
        creation date and the storage channel are kept.

        Args:
            telegram_id: Telegram account id
            profile: first_name, last_name, username and photo_url

        Returns:
            The stored user
        """
        user_id = user_id_for(telegram_id)

        try:
            async with self._timed_operation("upsert_user"):
                document = await self.collection.find_one_and_update(
                    {"telegram_id": telegram_id},
                    {
                        "$set": profile,
                        "$setOnInsert": {
                            "_id": user_id,
                            "telegram_id": telegram_id,
                            "created_at": utc_now(),
                        },
                    },
                    upsert=True,
                    return_document=ReturnDocument.AFTER
                )

                self._log_operation("upsert_user", user_id=user_id)
                return UserDocument.from_dict(document)

        except PyMongoError as e:
            self._log_error("upsert_user", e, user_id=user_id)
            raise RepositoryError(f"Failed to upsert user: {e}", original_error=e)

    async def set_channel(self, user_id: str, channel_id: int) -> bool:
        """
        Store the user's storage channel id

        Returns:
            True if a document was updated
        """
        try:
            async with self._timed_operation("set_user_channel"):
                result = await self.collection.update_one(
                    {"_id": user_id},
                    {"$set": {"channel_id": channel_id}}
                )
                return result.modified_count > 0

        except PyMongoError as e:
            self._log_error("set_user_channel", e, user_id=user_id)
            raise RepositoryError(f"Failed to update user channel: {e}", original_error=e)
