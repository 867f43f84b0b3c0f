"""
Dependency injection for services and repositories

Provides FastAPI dependency providers for services, repositories, and other components.
Centralizes dependency management and configuration; tests replace any
provider through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from src.core.telegram import TelegramGateway
from src.database import get_database_manager
from src.database.mongodb import get_mongodb
from src.database.redis_client import get_redis
from src.repositories import (
    FileRepository,
    UserRepository,
    UserFileRepository,
    AbuseFlagRepository,
    RateLimitRepository,
)
from src.services import (
    TokenService,
    AuthService,
    FileService,
    LibraryService,
    CleanupService,
)


# =============================================================================
# Database Dependencies
# =============================================================================

async def get_database() -> AsyncIOMotorDatabase:
    """MongoDB database handle"""
    return await get_mongodb()


# =============================================================================
# Repository Dependencies
# =============================================================================

async def get_file_repository(
        database: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> FileRepository:
    return FileRepository(database)


async def get_user_repository(
        database: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> UserRepository:
    return UserRepository(database)


async def get_user_file_repository(
        database: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> UserFileRepository:
    return UserFileRepository(database)


async def get_abuse_flag_repository(
        database: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> AbuseFlagRepository:
    return AbuseFlagRepository(database)


async def get_rate_limit_repository() -> Optional[RateLimitRepository]:
    """
    Rate limit repository, or None when Redis is not available

    Returns:
        RateLimitRepository instance or None
    """
    manager = get_database_manager()
    if manager is None or not manager.redis_available:
        return None

    redis_client = await get_redis()
    return RateLimitRepository(redis_client)


# =============================================================================
# Core Component Dependencies
# =============================================================================

@lru_cache()
def get_telegram_gateway() -> TelegramGateway:
    """Telegram gateway built from settings (cached singleton)"""
    return TelegramGateway.from_settings()


@lru_cache()
def get_token_service() -> TokenService:
    """Token service built from settings (cached singleton)"""
    return TokenService.from_settings()


# =============================================================================
# Service Dependencies
# =============================================================================

async def get_auth_service(
        gateway: Annotated[TelegramGateway, Depends(get_telegram_gateway)],
        token_service: Annotated[TokenService, Depends(get_token_service)],
        user_repo: Annotated[UserRepository, Depends(get_user_repository)]
) -> AuthService:
    return AuthService(
        gateway=gateway,
        token_service=token_service,
        user_repository=user_repo
    )


async def get_file_service(
        gateway: Annotated[TelegramGateway, Depends(get_telegram_gateway)],
        file_repo: Annotated[FileRepository, Depends(get_file_repository)],
        user_file_repo: Annotated[UserFileRepository, Depends(get_user_file_repository)],
        abuse_flag_repo: Annotated[AbuseFlagRepository, Depends(get_abuse_flag_repository)]
) -> FileService:
    return FileService(
        gateway=gateway,
        file_repository=file_repo,
        user_file_repository=user_file_repo,
        abuse_flag_repository=abuse_flag_repo
    )


async def get_library_service(
        gateway: Annotated[TelegramGateway, Depends(get_telegram_gateway)],
        file_repo: Annotated[FileRepository, Depends(get_file_repository)],
        user_file_repo: Annotated[UserFileRepository, Depends(get_user_file_repository)]
) -> LibraryService:
    return LibraryService(
        gateway=gateway,
        file_repository=file_repo,
        user_file_repository=user_file_repo
    )


async def get_cleanup_service(
        file_repo: Annotated[FileRepository, Depends(get_file_repository)],
        user_file_repo: Annotated[UserFileRepository, Depends(get_user_file_repository)]
) -> CleanupService:
    return CleanupService(
        file_repository=file_repo,
        user_file_repository=user_file_repo
    )


# Export all dependency functions
__all__ = [
    "get_database",
    "get_file_repository",
    "get_user_repository",
    "get_user_file_repository",
    "get_abuse_flag_repository",
    "get_rate_limit_repository",
    "get_telegram_gateway",
    "get_token_service",
    "get_auth_service",
    "get_file_service",
    "get_library_service",
    "get_cleanup_service",
]
