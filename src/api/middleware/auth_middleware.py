"""
Authentication Middleware
Session token authentication dependencies for the VoidBox API.
"""

from typing import Optional

from fastapi import Depends, Request
import structlog

from src.dependencies import get_token_service
from src.exceptions import AuthenticationError
from src.services import TokenService, TokenError, SessionClaims
from src.utils.dependencies import get_bearer_token

logger = structlog.get_logger()

# Session claims of the caller
AuthContext = SessionClaims


async def get_optional_auth_context(
        request: Request,
        token_service: TokenService = Depends(get_token_service)
) -> Optional[AuthContext]:
    """
    Resolve the caller's session if a valid token was sent

    The token is read from ``Authorization: Bearer`` or ``?token=``.

    Returns:
        Session claims, or None when the token is missing or invalid
    """
    token = get_bearer_token(request)
    if not token:
        return None

    try:
        claims = token_service.decode_session_token(token)
    except TokenError as e:
        logger.info("Ignoring invalid session token", reason=e.message, path=request.url.path)
        return None

    structlog.contextvars.bind_contextvars(user_id=claims.user_id)
    return claims


async def get_auth_context(
        auth_context: Optional[AuthContext] = Depends(get_optional_auth_context)
) -> AuthContext:
    """
    Require a valid session token

    Raises:
        AuthenticationError: If the token is missing or invalid
    """
    if auth_context is None:
        raise AuthenticationError(
            "Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return auth_context
