"""
Expired file cleanup job.

Runs once from the ``voidbox-cleanup`` console script, or periodically
inside the API process when ``CLEANUP_INTERVAL_SECONDS`` is set.
"""

import asyncio

from src.config.settings import get_settings
from src.database.mongodb import initialize_mongodb, get_mongodb, close_mongodb
from src.repositories import FileRepository, UserFileRepository, RepositoryError
from src.services import CleanupService
from src.utils.logger import setup_logging, get_logger

logger = get_logger(__name__)


async def run_cleanup() -> int:
    """
    Remove expired files once

    Returns:
        Number of files removed
    """
    database = await get_mongodb()
    service = CleanupService(
        file_repository=FileRepository(database),
        user_file_repository=UserFileRepository(database)
    )
    return await service.cleanup_expired()


async def periodic_cleanup(interval_seconds: int) -> None:
    """Run the cleanup every ``interval_seconds`` until cancelled"""
    logger.info("Periodic cleanup started", interval_seconds=interval_seconds)

    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await run_cleanup()
        except RepositoryError as e:
            logger.error("Periodic cleanup failed", error=str(e))


async def _run_once() -> int:
    await initialize_mongodb()
    try:
        removed = await run_cleanup()
    finally:
        await close_mongodb()

    logger.info("Cleanup finished", removed=removed)
    return removed


def main() -> int:
    """Entry point of the ``voidbox-cleanup`` console script"""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL.value, settings.LOG_FORMAT)

    asyncio.run(_run_once())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
