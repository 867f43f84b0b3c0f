"""
File Repository Implementation
==============================

MongoDB repository for stored file metadata.

Features:
- Lookup by public slug or document id
- Atomic download counter
- Expired file queries for the cleanup job
"""

from datetime import datetime
from typing import Optional, List, Any, Iterable

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.config.constants import FILES_COLLECTION
from src.models.mongo import FileDocument
from .base_repository import BaseRepository
from .exceptions import RepositoryError, DuplicateEntityError


class FileRepository(BaseRepository[FileDocument]):
    """
    Repository for file documents in MongoDB
    """

    collection_name = FILES_COLLECTION

    async def create(self, file: FileDocument) -> FileDocument:
        """
        Create a new file document

        Args:
            file: File metadata to store

        Returns:
            Stored file with assigned ID

        Raises:
            DuplicateEntityError: If the slug already exists
            RepositoryError: If creation fails
        """
        try:
            async with self._timed_operation("create_file"):
                result = await self.collection.insert_one(file.to_dict())
                file.id = result.inserted_id

                self._log_operation("create_file", slug=file.slug, size=file.size)
                return file

        except DuplicateKeyError as e:
            raise DuplicateEntityError(
                entity_type="File",
                conflicting_fields={"slug": file.slug},
                original_error=e
            )
        except PyMongoError as e:
            self._log_error("create_file", e, slug=file.slug)
            raise RepositoryError(f"Failed to create file: {e}", original_error=e)

    async def get_by_slug(self, slug: str) -> Optional[FileDocument]:
        """
        Get file by public slug

        Args:
            slug: Public file identifier

        Returns:
            File document if found, None otherwise
        """
        try:
            async with self._timed_operation("get_file_by_slug"):
                document = await self.collection.find_one({"slug": slug})
                return FileDocument.from_dict(document)

        except PyMongoError as e:
            self._log_error("get_file_by_slug", e, slug=slug)
            raise RepositoryError(f"Failed to get file: {e}", original_error=e)

    async def increment_download_count(self, file_id: Any) -> bool:
        """
        Increment the download counter of a file

        Returns:
            True if a document was updated
        """
        try:
            async with self._timed_operation("increment_download_count"):
                result = await self.collection.update_one(
                    {"_id": self.to_object_id(file_id)},
                    {"$inc": {"download_count": 1}}
                )
                return result.modified_count > 0

        except PyMongoError as e:
            self._log_error("increment_download_count", e, file_id=str(file_id))
            raise RepositoryError(f"Failed to update download count: {e}", original_error=e)

    async def delete_by_slug(self, slug: str) -> bool:
        """
        Delete file metadata by slug

        Returns:
            True if deleted, False if not found
        """
        try:
            async with self._timed_operation("delete_file"):
                result = await self.collection.delete_one({"slug": slug})
                deleted = result.deleted_count > 0

                self._log_operation("delete_file", slug=slug, deleted=deleted)
                return deleted

        except PyMongoError as e:
            self._log_error("delete_file", e, slug=slug)
            raise RepositoryError(f"Failed to delete file: {e}", original_error=e)

    async def find_expired(
            self,
            now: datetime,
            limit: int = 500,
            exclude_slugs: Optional[Iterable[str]] = None
    ) -> List[FileDocument]:
        """
        Find files whose expiry date has passed

        Args:
            now: Reference time (naive UTC)
            limit: Maximum number of documents to return
            exclude_slugs: Slugs to leave out of the result

        Returns:
            Expired files, oldest expiry first
        """
        try:
            async with self._timed_operation("find_expired_files"):
                query = {"expiry_at": {"$ne": None, "$lt": now}}
                if exclude_slugs:
                    query["slug"] = {"$nin": list(exclude_slugs)}

                cursor = self.collection.find(query).sort("expiry_at", ASCENDING).limit(limit)

                documents = await cursor.to_list(length=limit)
                return [FileDocument.from_dict(doc) for doc in documents]

        except PyMongoError as e:
            self._log_error("find_expired_files", e)
            raise RepositoryError(f"Failed to query expired files: {e}", original_error=e)
