"""
Rate Limit Repository Implementation
===================================

Redis repository for per-client request limiting with fixed windows.

Features:
- Fixed window counters (INCR + EXPIRE in one pipeline)
- Separate buckets per scope
- Standard rate limit response headers
"""

import time
from dataclasses import dataclass
from typing import Optional, Dict

from redis.asyncio import Redis
from redis.exceptions import RedisError
import structlog

from src.config.constants import RateLimitScope
from .exceptions import RepositoryError


@dataclass
class RateLimitConfig:
    """Rate limit configuration"""
    limit: int  # Number of requests allowed
    window_seconds: int  # Time window in seconds

    def __post_init__(self):
        if self.limit < 1:
            raise ValueError("Rate limit must be at least 1")
        if self.window_seconds < 1:
            raise ValueError("Rate limit window must be at least 1 second")


@dataclass
class RateLimitResult:
    """Result of a rate limit check"""
    allowed: bool
    current_count: int
    limit: int
    remaining: int
    reset_time: int  # Unix timestamp
    retry_after_seconds: Optional[int] = None

    def to_headers(self) -> Dict[str, str]:
        """Convert to HTTP headers"""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_time)
        }

        if self.retry_after_seconds:
            headers["Retry-After"] = str(self.retry_after_seconds)

        return headers


class RateLimitRepository:
    """
    Repository for fixed window rate limiting in Redis
    """

    def __init__(self, redis_client: Redis):
        """
        Initialize rate limit repository

        Args:
            redis_client: Redis async client instance
        """
        self.redis = redis_client
        self.logger = structlog.get_logger("RateLimitRepository")

    async def check_rate_limit(
            self,
            scope: RateLimitScope,
            identifier: str,
            config: RateLimitConfig,
            now: Optional[float] = None
    ) -> RateLimitResult:
        """
        Count a request and check it against the limit

        Args:
            scope: Rate limit bucket
            identifier: Client identifier (IP address)
            config: Rate limit configuration
            now: Current Unix time, for tests

        Returns:
            RateLimitResult with decision and metadata

        Raises:
            RepositoryError: If Redis cannot be reached
        """
        current_time = time.time() if now is None else now
        window_start = int(current_time // config.window_seconds) * config.window_seconds
        reset_time = window_start + config.window_seconds

        key = self._get_rate_limit_key(scope, identifier, window_start)

        try:
            pipe = self.redis.pipeline()
            pipe.incr(key)
            pipe.expire(key, config.window_seconds)
            results = await pipe.execute()
        except RedisError as e:
            self.logger.error(
                "Rate limit check failed",
                scope=scope.value,
                identifier=identifier,
                error=str(e)
            )
            raise RepositoryError(f"Failed to check rate limit: {e}", original_error=e)

        current_count = int(results[0])
        allowed = current_count <= config.limit
        remaining = max(0, config.limit - current_count)

        retry_after = None
        if not allowed:
            retry_after = max(1, int(reset_time - current_time))

        self.logger.debug(
            "Fixed window rate limit check",
            scope=scope.value,
            identifier=identifier,
            allowed=allowed,
            current_count=current_count,
            reset_time=reset_time
        )

        return RateLimitResult(
            allowed=allowed,
            current_count=current_count,
            limit=config.limit,
            remaining=remaining,
            reset_time=reset_time,
            retry_after_seconds=retry_after
        )

    @staticmethod
    def _get_rate_limit_key(scope: RateLimitScope, identifier: str, window) -> str:
        """Generate Redis key for rate limiting"""
        return f"rate_limit:{scope.value}:{identifier}:{window}"
