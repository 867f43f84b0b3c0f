"""
Repository Layer Package
========================

This package provides the data access layer for VoidBox, implementing
the repository pattern for clean separation between business logic and data persistence.

Supported Databases:
- MongoDB: files, users, library entries and abuse flags
- Redis: rate limit counters
"""

from .base_repository import BaseRepository

from .exceptions import (
    RepositoryError,
    EntityNotFoundError,
    DuplicateEntityError,
)

from .file_repository import FileRepository
from .user_repository import UserRepository
from .user_file_repository import UserFileRepository
from .abuse_flag_repository import AbuseFlagRepository
from .rate_limit_repository import (
    RateLimitRepository,
    RateLimitConfig,
    RateLimitResult,
)

__all__ = [
    # Base classes
    "BaseRepository",

    # Exceptions
    "RepositoryError",
    "EntityNotFoundError",
    "DuplicateEntityError",

    # MongoDB repositories
    "FileRepository",
    "UserRepository",
    "UserFileRepository",
    "AbuseFlagRepository",

    # Redis repositories
    "RateLimitRepository",
    "RateLimitConfig",
    "RateLimitResult",
]
