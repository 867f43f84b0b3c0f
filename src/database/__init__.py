"""
Database Initialization and Management
=====================================

Centralized database initialization and health monitoring for the
data stores used by VoidBox.

Features:
- MongoDB initialization with index setup
- Redis initialization for rate limit counters
- Health reporting for all data stores
- Graceful startup and shutdown
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional

import structlog
from pymongo.errors import PyMongoError
from redis.exceptions import RedisError

from src.utils.date_utils import utc_now
from .mongodb import (
    MongoDBConfig,
    initialize_mongodb,
    close_mongodb,
    mongodb_health_check,
    setup_mongodb_indexes,
    get_mongodb
)
from .redis_client import (
    RedisConfig,
    initialize_redis,
    close_redis,
    redis_health_check,
    get_redis
)

logger = structlog.get_logger(__name__)


@dataclass
class DatabaseConfig:
    """Combined database configuration"""
    mongodb: MongoDBConfig
    redis: RedisConfig

    @classmethod
    def from_settings(cls) -> "DatabaseConfig":
        """Create configuration from application settings"""
        return cls(
            mongodb=MongoDBConfig.from_settings(),
            redis=RedisConfig.from_settings()
        )


class DatabaseManager:
    """
    Centralized database manager for all data stores
    """

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database manager

        Args:
            config: Database configuration
        """
        self.config = config
        self._initialized = False
        self._redis_available = False

    async def initialize(self) -> None:
        """
        Initialize all database connections

        MongoDB is required. Redis is optional: when it cannot be reached
        the service starts without rate limiting.

        Raises:
            PyMongoError: If MongoDB cannot be initialized
        """
        if self._initialized:
            logger.warning("Database manager already initialized")
            return

        logger.info("Initializing database connections")

        try:
            await initialize_mongodb(self.config.mongodb)
            await setup_mongodb_indexes()
        except PyMongoError as e:
            logger.error("Failed to initialize MongoDB", error=str(e))
            await self.shutdown()
            raise

        try:
            await initialize_redis(self.config.redis)
            self._redis_available = True
        except RedisError as e:
            logger.warning("Redis unavailable, rate limiting disabled", error=str(e))
            await close_redis()
            self._redis_available = False

        self._initialized = True
        logger.info(
            "Database connections initialized",
            redis_available=self._redis_available
        )

    async def shutdown(self) -> None:
        """
        Gracefully shutdown all database connections
        """
        logger.info("Shutting down database connections")

        try:
            await close_mongodb()
        except PyMongoError as e:
            logger.error("Error closing MongoDB", error=str(e))

        try:
            await close_redis()
        except RedisError as e:
            logger.error("Error closing Redis", error=str(e))

        self._initialized = False
        self._redis_available = False
        logger.info("Database shutdown completed")

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform health check on all databases

        Returns:
            Health status for all databases
        """
        health_status = {
            "overall_status": "healthy",
            "databases": {},
            "timestamp": utc_now().isoformat()
        }

        mongo_health = await mongodb_health_check()
        health_status["databases"]["mongodb"] = mongo_health
        if not mongo_health.get("healthy", False):
            health_status["overall_status"] = "unhealthy"

        redis_health = await redis_health_check()
        health_status["databases"]["redis"] = redis_health
        if not redis_health.get("healthy", False) and health_status["overall_status"] == "healthy":
            health_status["overall_status"] = "degraded"

        return health_status

    @property
    def redis_available(self) -> bool:
        return self._redis_available


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


async def initialize_databases(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Initialize all databases

    Args:
        config: Database configuration (built from settings if None)

    Returns:
        Database manager instance
    """
    global _db_manager

    if config is None:
        config = DatabaseConfig.from_settings()

    if _db_manager is None:
        _db_manager = DatabaseManager(config)

    await _db_manager.initialize()
    return _db_manager


async def shutdown_databases() -> None:
    """Shutdown all database connections"""
    global _db_manager

    if _db_manager:
        await _db_manager.shutdown()
        _db_manager = None


async def database_health_check() -> Dict[str, Any]:
    """
    Get health status for all databases

    Returns:
        Combined health status
    """
    if _db_manager:
        return await _db_manager.health_check()

    return {
        "overall_status": "unhealthy",
        "error": "Database manager not initialized",
        "databases": {}
    }


def get_database_manager() -> Optional[DatabaseManager]:
    """Get the current database manager instance"""
    return _db_manager


# Export main components
__all__ = [
    'DatabaseConfig',
    'MongoDBConfig',
    'RedisConfig',
    'DatabaseManager',
    'initialize_databases',
    'shutdown_databases',
    'database_health_check',
    'get_database_manager',
    'get_mongodb',
    'get_redis',
]
