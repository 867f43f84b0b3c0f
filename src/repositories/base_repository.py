"""
Base Repository Pattern Implementation
=====================================

Provides the base class and utilities shared by the MongoDB
repositories.

Key Features:
- Generic type support for type safety
- Consistent error handling
- Operation timing and structured logging
"""

import time
from abc import ABC
from contextlib import asynccontextmanager
from typing import TypeVar, Generic, Optional, Any

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorCollection
import structlog

# Generic type variable for entities
T = TypeVar('T')


class BaseRepository(ABC, Generic[T]):
    """
    Base repository class with the utilities shared by the collections

    Type Parameters:
        T: Entity type this repository manages
    """

    collection_name: str = ""

    def __init__(self, database: AsyncIOMotorDatabase):
        """
        Initialize repository

        Args:
            database: MongoDB database instance
        """
        self.database = database
        self.collection: AsyncIOMotorCollection = database[self.collection_name]
        self.logger = structlog.get_logger(self.__class__.__name__)

    # Utility Methods

    @staticmethod
    def to_object_id(value: Any) -> Optional[ObjectId]:
        """
        Convert a value to an ObjectId

        Returns:
            ObjectId, or None when the value is not a valid id
        """
        if isinstance(value, ObjectId):
            return value
        try:
            return ObjectId(str(value))
        except (InvalidId, TypeError):
            return None

    def _log_operation(
            self,
            operation: str,
            duration_ms: Optional[float] = None,
            **kwargs
    ) -> None:
        """
        Log repository operation with structured data

        Args:
            operation: Operation name
            duration_ms: Operation duration in milliseconds
            **kwargs: Additional context data
        """
        log_data = {
            "operation": operation,
            "repository": self.__class__.__name__,
            **kwargs
        }

        if duration_ms is not None:
            log_data["duration_ms"] = round(duration_ms, 2)

        self.logger.debug("Repository operation completed", **log_data)

    def _log_error(
            self,
            operation: str,
            error: Exception,
            **kwargs
    ) -> None:
        """
        Log repository error with context

        Args:
            operation: Failed operation name
            error: Exception that occurred
            **kwargs: Additional context data
        """
        self.logger.error(
            f"Repository operation failed: {operation}",
            error=str(error),
            error_type=type(error).__name__,
            repository=self.__class__.__name__,
            **kwargs
        )

    @asynccontextmanager
    async def _timed_operation(self, operation: str):
        """
        Context manager for timing and logging operations

        Args:
            operation: Operation name for logging
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._log_operation(operation, duration_ms)
