"""
Abuse Flag Repository Implementation
====================================

MongoDB repository for abuse reports.
"""

from pymongo.errors import PyMongoError

from src.config.constants import ABUSE_FLAGS_COLLECTION
from src.models.mongo import AbuseFlagDocument
from .base_repository import BaseRepository
from .exceptions import RepositoryError


class AbuseFlagRepository(BaseRepository[AbuseFlagDocument]):
    """
    Repository for abuse flags in MongoDB
    """

    collection_name = ABUSE_FLAGS_COLLECTION

    async def create(self, flag: AbuseFlagDocument) -> AbuseFlagDocument:
        """
        Store an abuse report

        Raises:
            RepositoryError: If creation fails
        """
        try:
            async with self._timed_operation("create_abuse_flag"):
                result = await self.collection.insert_one(flag.to_dict())
                flag.id = result.inserted_id

                self._log_operation("create_abuse_flag", file_id=str(flag.file_id))
                return flag

        except PyMongoError as e:
            self._log_error("create_abuse_flag", e, file_id=str(flag.file_id))
            raise RepositoryError(f"Failed to create abuse flag: {e}", original_error=e)

