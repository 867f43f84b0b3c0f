"""
MongoDB Connection Management
============================

Centralized MongoDB connection management with connection pooling,
health monitoring, and index management.

Features:
- Connection pooling configured from application settings
- Background health monitoring and reconnection logic
- Index management for the VoidBox collections
- Graceful connection handling
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import IndexModel, ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, PyMongoError
import structlog

from src.config.constants import (
    HEALTH_CHECK_INTERVAL,
    FILES_COLLECTION,
    USERS_COLLECTION,
    USER_FILES_COLLECTION,
    ABUSE_FLAGS_COLLECTION,
)
from src.config.settings import get_settings

logger = structlog.get_logger(__name__)


@dataclass
class MongoDBConfig:
    """MongoDB configuration with secure defaults"""
    uri: str = "mongodb://localhost:27017"
    database_name: str = "voidbox"

    # Connection pool settings
    max_pool_size: int = 50
    min_pool_size: int = 5
    max_idle_time_ms: int = 30000

    # Timeout settings
    connect_timeout_ms: int = 10000
    socket_timeout_ms: int = 30000
    server_selection_timeout_ms: int = 5000

    # Reliability settings
    retry_writes: bool = True
    retry_reads: bool = True

    health_check_interval: int = HEALTH_CHECK_INTERVAL

    @classmethod
    def from_settings(cls) -> "MongoDBConfig":
        """Build configuration from application settings"""
        settings = get_settings()
        return cls(
            uri=settings.MONGODB_URI,
            database_name=settings.MONGODB_DATABASE,
            max_pool_size=settings.MONGODB_MAX_CONNECTIONS,
            min_pool_size=settings.MONGODB_MIN_CONNECTIONS,
        )

    def get_client_options(self) -> Dict[str, Any]:
        """
        Get client options for AsyncIOMotorClient

        Returns:
            Dictionary of client options
        """
        return {
            'maxPoolSize': self.max_pool_size,
            'minPoolSize': self.min_pool_size,
            'maxIdleTimeMS': self.max_idle_time_ms,
            'connectTimeoutMS': self.connect_timeout_ms,
            'socketTimeoutMS': self.socket_timeout_ms,
            'serverSelectionTimeoutMS': self.server_selection_timeout_ms,
            'retryWrites': self.retry_writes,
            'retryReads': self.retry_reads,
        }


class MongoDBConnectionManager:
    """
    MongoDB connection manager with health monitoring and reconnection logic
    """

    def __init__(self, config: MongoDBConfig):
        """
        Initialize connection manager

        Args:
            config: MongoDB configuration
        """
        self.config = config
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self._connection_lock = asyncio.Lock()
        self._health_check_task: Optional[asyncio.Task] = None
        self._is_healthy = False

    async def connect(self) -> AsyncIOMotorDatabase:
        """
        Establish connection to MongoDB

        Returns:
            MongoDB database instance

        Raises:
            ConnectionFailure: If connection cannot be established
        """
        async with self._connection_lock:
            if self.client is None:
                try:
                    logger.info("Connecting to MongoDB", database=self.config.database_name)

                    self.client = AsyncIOMotorClient(self.config.uri, **self.config.get_client_options())
                    self.database = self.client[self.config.database_name]

                    await self._test_connection()
                    self._start_health_monitoring()

                    self._is_healthy = True
                    logger.info("Successfully connected to MongoDB")

                except PyMongoError as e:
                    logger.error("Failed to connect to MongoDB", error=str(e))
                    self._close_client()
                    raise ConnectionFailure(f"Failed to connect to MongoDB: {e}") from e

            return self.database

    def _close_client(self) -> None:
        if self.client is not None:
            self.client.close()
        self.client = None
        self.database = None
        self._is_healthy = False

    async def disconnect(self) -> None:
        """Disconnect from MongoDB"""
        async with self._connection_lock:
            if self._health_check_task:
                self._health_check_task.cancel()
                try:
                    await self._health_check_task
                except asyncio.CancelledError:
                    pass
                self._health_check_task = None

            if self.client is not None:
                self._close_client()
                logger.info("Disconnected from MongoDB")

    async def get_database(self) -> AsyncIOMotorDatabase:
        """
        Get database instance, connecting if necessary

        Returns:
            MongoDB database instance
        """
        if self.database is None:
            await self.connect()

        return self.database

    async def _test_connection(self) -> None:
        """Test MongoDB connection"""
        if self.client is not None:
            await self.client.admin.command('ping')

    def _start_health_monitoring(self) -> None:
        """Start background health monitoring task"""
        if self._health_check_task is None:
            self._health_check_task = asyncio.create_task(self._health_monitor())

    async def _health_monitor(self) -> None:
        """Background health monitoring coroutine"""
        while True:
            await asyncio.sleep(self.config.health_check_interval)
            try:
                await self._test_connection()

                if not self._is_healthy:
                    self._is_healthy = True
                    logger.info("MongoDB connection restored")

            except PyMongoError as e:
                # The driver reconnects on its own; only the state is tracked here
                if self._is_healthy:
                    self._is_healthy = False
                    logger.error("MongoDB health check failed", error=str(e))

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform health check

        Returns:
            Health status information
        """
        health_info = {
            "connected": False,
            "healthy": self._is_healthy,
            "database": self.config.database_name,
        }

        try:
            if self.client is not None:
                start_time = asyncio.get_running_loop().time()
                await self._test_connection()
                response_time = (asyncio.get_running_loop().time() - start_time) * 1000

                health_info.update({
                    "connected": True,
                    "healthy": True,
                    "response_time_ms": round(response_time, 2),
                })

        except PyMongoError as e:
            health_info.update({
                "error": str(e),
                "healthy": False
            })

        return health_info


# Index Management
class MongoIndexManager:
    """MongoDB index management utilities"""

    def __init__(self, database: AsyncIOMotorDatabase):
        """
        Initialize index manager

        Args:
            database: MongoDB database instance
        """
        self.database = database
        self.logger = structlog.get_logger("MongoIndexManager")

    async def _create(self, collection_name: str, indexes: List[IndexModel]) -> None:
        try:
            await self.database[collection_name].create_indexes(indexes)
            self.logger.info("Indexes created", collection=collection_name, count=len(indexes))
        except PyMongoError as e:
            self.logger.error("Failed to create indexes", collection=collection_name, error=str(e))
            raise

    async def create_file_indexes(self) -> None:
        """Create indexes for files collection"""
        await self._create(FILES_COLLECTION, [
            IndexModel([("slug", ASCENDING)], unique=True),
            # Expired file cleanup
            IndexModel([("expiry_at", ASCENDING)], sparse=True),
        ])

    async def create_user_indexes(self) -> None:
        """Create indexes for users collection"""
        await self._create(USERS_COLLECTION, [
            IndexModel([("telegram_id", ASCENDING)], unique=True),
        ])

    async def create_user_file_indexes(self) -> None:
        """Create indexes for user_files collection"""
        await self._create(USER_FILES_COLLECTION, [
            IndexModel([("slug", ASCENDING)], unique=True),
            IndexModel([("user_id", ASCENDING), ("created_at", DESCENDING)]),
        ])

    async def create_abuse_flag_indexes(self) -> None:
        """Create indexes for abuse_flags collection"""
        await self._create(ABUSE_FLAGS_COLLECTION, [
            IndexModel([("file_id", ASCENDING)]),
        ])

    async def create_all_indexes(self) -> None:
        """Create all required indexes"""
        await self.create_file_indexes()
        await self.create_user_indexes()
        await self.create_user_file_indexes()
        await self.create_abuse_flag_indexes()
        self.logger.info("All MongoDB indexes created successfully")


# Global connection manager instance
_connection_manager: Optional[MongoDBConnectionManager] = None


async def initialize_mongodb(config: Optional[MongoDBConfig] = None) -> AsyncIOMotorDatabase:
    """
    Initialize MongoDB connection

    Args:
        config: MongoDB configuration (built from settings if None)

    Returns:
        MongoDB database instance
    """
    global _connection_manager

    if config is None:
        config = MongoDBConfig.from_settings()

    if _connection_manager is None:
        _connection_manager = MongoDBConnectionManager(config)

    return await _connection_manager.connect()


async def get_mongodb() -> AsyncIOMotorDatabase:
    """
    Get MongoDB database instance

    Returns:
        MongoDB database instance
    """
    if _connection_manager is None:
        return await initialize_mongodb()

    return await _connection_manager.get_database()


async def close_mongodb() -> None:
    """Close MongoDB connection"""
    global _connection_manager

    if _connection_manager:
        await _connection_manager.disconnect()
        _connection_manager = None


async def mongodb_health_check() -> Dict[str, Any]:
    """
    Get MongoDB health status

    Returns:
        Health check results
    """
    if _connection_manager:
        return await _connection_manager.health_check()

    return {
        "connected": False,
        "healthy": False,
        "error": "MongoDB not initialized"
    }


async def setup_mongodb_indexes() -> None:
    """Setup all required MongoDB indexes"""
    database = await get_mongodb()
    index_manager = MongoIndexManager(database)
    await index_manager.create_all_indexes()
