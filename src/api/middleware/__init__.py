"""
API Middleware Package
Provides middleware components for the VoidBox API.
"""

from .auth_middleware import (
    AuthContext,
    get_auth_context,
    get_optional_auth_context,
)

from .rate_limit_middleware import (
    RateLimiter,
    get_rate_limit_config,
    global_rate_limit,
    api_rate_limit,
)

from .logging_middleware import LoggingMiddleware

__all__ = [
    # Authentication
    "AuthContext",
    "get_auth_context",
    "get_optional_auth_context",

    # Rate Limiting
    "RateLimiter",
    "get_rate_limit_config",
    "global_rate_limit",
    "api_rate_limit",

    # Logging
    "LoggingMiddleware",
]
