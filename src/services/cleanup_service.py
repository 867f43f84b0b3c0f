"""
Cleanup Service

Removes the metadata of expired files. Channel messages stay in the
user's channel, where the user can delete them.
"""

from datetime import datetime
from typing import Optional, Set

from src.repositories import FileRepository, UserFileRepository, RepositoryError
from src.services.base_service import BaseService
from src.utils.date_utils import utc_now
from src.utils.metrics import metrics


class CleanupService(BaseService):
    """Service deleting expired file documents"""

    def __init__(
            self,
            file_repository: FileRepository,
            user_file_repository: UserFileRepository,
            batch_size: int = 500
    ):
        super().__init__()
        self.files = file_repository
        self.user_files = user_file_repository
        self.batch_size = batch_size

    async def cleanup_expired(self, now: Optional[datetime] = None) -> int:
        """
        Delete every file whose expiry date has passed

        Args:
            now: Reference time, defaults to the current time

        Returns:
            Number of files removed
        """
        now = now or utc_now()
        found = 0
        removed = 0
        failed: Set[str] = set()

        while True:
            expired = await self.files.find_expired(now, limit=self.batch_size, exclude_slugs=sorted(failed))
            if not expired:
                break
            found += len(expired)

            for file in expired:
                try:
                    # Library entries go first so a failure leaves the file for the next run
                    await self.user_files.delete_by_slug(file.slug)
                    await self.files.delete_by_slug(file.slug)
                    removed += 1
                except RepositoryError as e:
                    failed.add(file.slug)
                    self.logger.error("Failed to remove expired file", slug=file.slug, error=str(e))

            if len(expired) < self.batch_size:
                break

        metrics.record_cleanup(removed)
        self.log_operation("cleanup_expired", found=found, removed=removed, failed=len(failed))
        return removed
