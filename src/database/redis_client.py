"""
Redis Connection Management
==========================

Centralized Redis connection management with connection pooling
and health monitoring.

Redis only holds rate limit counters, so an unavailable Redis
degrades the service instead of stopping it.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Dict, Any

from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import ConnectionError as RedisConnectionError, RedisError
import structlog

from src.config.constants import HEALTH_CHECK_INTERVAL
from src.config.settings import get_settings

logger = structlog.get_logger(__name__)


@dataclass
class RedisConfig:
    """Redis configuration with secure defaults"""
    url: str = "redis://localhost:6379/0"

    # Connection pool settings
    max_connections: int = 20
    retry_on_timeout: bool = True
    health_check_interval: int = HEALTH_CHECK_INTERVAL

    # Timeout settings
    socket_connect_timeout: float = 5.0
    socket_timeout: float = 5.0

    decode_responses: bool = True

    @classmethod
    def from_settings(cls) -> "RedisConfig":
        """Build configuration from application settings"""
        settings = get_settings()
        return cls(
            url=settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )

    def get_pool_kwargs(self) -> Dict[str, Any]:
        """
        Get connection pool parameters

        Returns:
            Dictionary of pool parameters
        """
        return {
            'max_connections': self.max_connections,
            'socket_connect_timeout': self.socket_connect_timeout,
            'socket_timeout': self.socket_timeout,
            'retry_on_timeout': self.retry_on_timeout,
            'health_check_interval': self.health_check_interval,
            'decode_responses': self.decode_responses,
        }


class RedisConnectionManager:
    """
    Redis connection manager with health monitoring
    """

    def __init__(self, config: RedisConfig):
        """
        Initialize connection manager

        Args:
            config: Redis configuration
        """
        self.config = config
        self.client: Optional[Redis] = None
        self.pool: Optional[ConnectionPool] = None
        self._connection_lock = asyncio.Lock()
        self._health_check_task: Optional[asyncio.Task] = None
        self._is_healthy = False

    async def connect(self) -> Redis:
        """
        Establish connection to Redis

        Returns:
            Redis client instance

        Raises:
            RedisConnectionError: If connection cannot be established
        """
        async with self._connection_lock:
            if self.client is None:
                try:
                    logger.info("Connecting to Redis")

                    self.pool = ConnectionPool.from_url(self.config.url, **self.config.get_pool_kwargs())
                    self.client = Redis(connection_pool=self.pool)

                    await self._test_connection()
                    self._start_health_monitoring()

                    self._is_healthy = True
                    logger.info("Successfully connected to Redis")

                except RedisError as e:
                    logger.error("Failed to connect to Redis", error=str(e))
                    await self._close_client()
                    raise RedisConnectionError(f"Failed to connect to Redis: {e}") from e

            return self.client

    async def _close_client(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
        if self.pool is not None:
            await self.pool.disconnect()
            self.pool = None
        self._is_healthy = False

    async def disconnect(self) -> None:
        """Disconnect from Redis"""
        async with self._connection_lock:
            if self._health_check_task:
                self._health_check_task.cancel()
                try:
                    await self._health_check_task
                except asyncio.CancelledError:
                    pass
                self._health_check_task = None

            await self._close_client()
            logger.info("Disconnected from Redis")

    async def get_client(self) -> Redis:
        """
        Get Redis client instance, connecting if necessary

        Returns:
            Redis client instance
        """
        if self.client is None:
            await self.connect()

        return self.client

    async def _test_connection(self) -> None:
        """Test Redis connection"""
        if self.client is not None:
            await self.client.ping()

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
                    logger.info("Redis connection restored")

            except RedisError as e:
                if self._is_healthy:
                    self._is_healthy = False
                    logger.error("Redis health check failed", error=str(e))

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform health check

        Returns:
            Health status information
        """
        health_info = {
            "connected": False,
            "healthy": self._is_healthy,
        }

        try:
            if self.client is not None:
                start_time = asyncio.get_running_loop().time()
                await self._test_connection()
                response_time = (asyncio.get_running_loop().time() - start_time) * 1000

                info = await self.client.info(section="server")

                health_info.update({
                    "connected": True,
                    "healthy": True,
                    "response_time_ms": round(response_time, 2),
                    "redis_version": info.get('redis_version', 'unknown'),
                })

        except RedisError as e:
            health_info.update({
                "error": str(e),
                "healthy": False
            })

        return health_info


# Global connection manager instance
_connection_manager: Optional[RedisConnectionManager] = None


async def initialize_redis(config: Optional[RedisConfig] = None) -> Redis:
    """
    Initialize Redis connection

    Args:
        config: Redis configuration (built from settings if None)

    Returns:
        Redis client instance
    """
    global _connection_manager

    if config is None:
        config = RedisConfig.from_settings()

    if _connection_manager is None:
        _connection_manager = RedisConnectionManager(config)

    return await _connection_manager.connect()


async def get_redis() -> Redis:
    """
    Get Redis client instance

    Returns:
        Redis client instance
    """
    if _connection_manager is None:
        return await initialize_redis()

    return await _connection_manager.get_client()


async def close_redis() -> None:
    """Close Redis connection"""
    global _connection_manager

    if _connection_manager:
        await _connection_manager.disconnect()
        _connection_manager = None


async def redis_health_check() -> Dict[str, Any]:
    """
    Get Redis health status

    Returns:
        Health check results
    """
    if _connection_manager:
        return await _connection_manager.health_check()

    return {
        "connected": False,
        "healthy": False,
        "error": "Redis not initialized"
    }
