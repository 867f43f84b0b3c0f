"""
Request context helpers for FastAPI.

This module provides functions that extract request-scoped values
used by routes, middleware and logging.
"""

from typing import Optional

from fastapi import Request

from src.utils.id_generator import generate_request_id


def get_request_id(request: Request) -> str:
    """
    Extract or generate request ID for tracking.

    Args:
        request: FastAPI request object

    Returns:
        Request ID string
    """
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return request_id

    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    request.state.request_id = request_id
    return request_id


def get_client_ip(request: Request) -> str:
    """
    Resolve the client IP address.

    The first entry of ``X-Forwarded-For`` wins, then ``X-Real-IP``,
    then the socket peer.

    Args:
        request: FastAPI request object

    Returns:
        Client IP, or "unknown"
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def get_bearer_token(request: Request) -> Optional[str]:
    """
    Extract a token from the Authorization header or ``?token=``.

    Browser elements such as ``<img>`` and ``<video>`` cannot send
    headers, so the query parameter is accepted as well.
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token:
            return token

    token = request.query_params.get("token")
    return token or None
