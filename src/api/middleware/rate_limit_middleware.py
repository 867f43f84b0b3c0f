"""
Rate Limiting Middleware
Per-client rate limiting backed by Redis fixed window counters.
"""

from typing import Dict, Optional

from fastapi import Request, Response, Depends
import structlog

from src.config.constants import RateLimitScope
from src.config.settings import get_settings, Settings
from src.dependencies import get_rate_limit_repository
from src.exceptions import RateLimitError
from src.repositories import RateLimitRepository, RateLimitConfig, RepositoryError
from src.utils.dependencies import get_client_ip

logger = structlog.get_logger()


def get_rate_limit_config(scope: RateLimitScope, settings: Optional[Settings] = None) -> RateLimitConfig:
    """Limit and window configured for a scope"""
    settings = settings or get_settings()

    if scope == RateLimitScope.API:
        return RateLimitConfig(
            limit=settings.API_RATE_LIMIT,
            window_seconds=settings.API_RATE_WINDOW_SECONDS
        )
    return RateLimitConfig(
        limit=settings.GLOBAL_RATE_LIMIT,
        window_seconds=settings.GLOBAL_RATE_WINDOW_SECONDS
    )


class RateLimiter:
    """
    FastAPI dependency enforcing one rate limit scope

    Requests are counted per client IP. When Redis is unavailable the
    request is let through.
    """

    def __init__(self, scope: RateLimitScope):
        self.scope = scope

    async def __call__(
            self,
            request: Request,
            response: Response,
            rate_limit_repo: Optional[RateLimitRepository] = Depends(get_rate_limit_repository)
    ) -> None:
        settings = get_settings()
        if not settings.RATE_LIMIT_ENABLED or rate_limit_repo is None:
            return

        config = get_rate_limit_config(self.scope, settings)
        client_ip = get_client_ip(request)

        try:
            result = await rate_limit_repo.check_rate_limit(self.scope, client_ip, config)
        except RepositoryError as e:
            logger.error("Rate limit check failed", scope=self.scope.value, error=str(e))
            return

        headers: Dict[str, str] = result.to_headers()

        if not result.allowed:
            logger.warning(
                "Rate limit exceeded",
                scope=self.scope.value,
                client_ip=client_ip,
                count=result.current_count,
                limit=result.limit
            )
            raise RateLimitError(
                limit=config.limit,
                window=config.window_seconds,
                retry_after=result.retry_after_seconds,
                headers=headers
            )

        for header, value in headers.items():
            response.headers[header] = value
        # Responses returned directly by a route skip the injected one
        request.state.rate_limit_headers = {**getattr(request.state, "rate_limit_headers", {}), **headers}


# Dependencies for the two scopes
global_rate_limit = RateLimiter(RateLimitScope.GLOBAL)
api_rate_limit = RateLimiter(RateLimitScope.API)
