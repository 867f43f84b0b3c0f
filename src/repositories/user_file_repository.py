"""
User File Repository Implementation
===================================

MongoDB repository for library entries ("my drops").
"""

from typing import Optional, List

from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.config.constants import USER_FILES_COLLECTION
from src.models.mongo import UserFileDocument
from .base_repository import BaseRepository
from .exceptions import RepositoryError, DuplicateEntityError


class UserFileRepository(BaseRepository[UserFileDocument]):
    """
    Repository for library entries in MongoDB
    """

    collection_name = USER_FILES_COLLECTION

    async def create(self, entry: UserFileDocument) -> UserFileDocument:
        """
        Create a library entry

        Raises:
            DuplicateEntityError: If the slug is already in a library
            RepositoryError: If creation fails
        """
        try:
            async with self._timed_operation("create_user_file"):
                result = await self.collection.insert_one(entry.to_dict())
                entry.id = result.inserted_id

                self._log_operation(
                    "create_user_file",
                    user_id=entry.user_id,
                    slug=entry.slug,
                    type=entry.type
                )
                return entry

        except DuplicateKeyError as e:
            raise DuplicateEntityError(
                entity_type="UserFile",
                conflicting_fields={"slug": entry.slug},
                original_error=e
            )
        except PyMongoError as e:
            self._log_error("create_user_file", e, slug=entry.slug)
            raise RepositoryError(f"Failed to create user file: {e}", original_error=e)

    async def get_for_user(self, user_id: str, slug: str) -> Optional[UserFileDocument]:
        """
        Get a library entry owned by a user

        Returns:
            The entry, or None when it does not exist or belongs to someone else
        """
        try:
            async with self._timed_operation("get_user_file_for_user"):
                document = await self.collection.find_one({"slug": slug, "user_id": user_id})
                return UserFileDocument.from_dict(document)

        except PyMongoError as e:
            self._log_error("get_user_file_for_user", e, user_id=user_id, slug=slug)
            raise RepositoryError(f"Failed to get user file: {e}", original_error=e)

    async def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[UserFileDocument]:
        """
        List a user's library, newest first

        Args:
            user_id: Owner id
            limit: Maximum number of entries, None for the whole library

        Returns:
            Library entries
        """
        try:
            async with self._timed_operation("list_user_files"):
                cursor = self.collection.find({"user_id": user_id}).sort("created_at", DESCENDING)
                if limit is not None:
                    cursor = cursor.limit(limit)

                documents = await cursor.to_list(length=limit)
                return [UserFileDocument.from_dict(doc) for doc in documents]

        except PyMongoError as e:
            self._log_error("list_user_files", e, user_id=user_id)
            raise RepositoryError(f"Failed to list user files: {e}", original_error=e)

    async def delete_for_user(self, user_id: str, slug: str) -> bool:
        """
        Remove an entry from a user's library

        Returns:
            True if deleted, False if not found
        """
        try:
            async with self._timed_operation("delete_user_file"):
                result = await self.collection.delete_one({"slug": slug, "user_id": user_id})
                return result.deleted_count > 0

        except PyMongoError as e:
            self._log_error("delete_user_file", e, user_id=user_id, slug=slug)
            raise RepositoryError(f"Failed to delete user file: {e}", original_error=e)

    async def delete_by_slug(self, slug: str) -> int:
        """
        Remove every library entry pointing at a slug

        Returns:
            Number of deleted entries
        """
        try:
            async with self._timed_operation("delete_user_files_by_slug"):
                result = await self.collection.delete_many({"slug": slug})
                return result.deleted_count

        except PyMongoError as e:
            self._log_error("delete_user_files_by_slug", e, slug=slug)
            raise RepositoryError(f"Failed to delete user files: {e}", original_error=e)
