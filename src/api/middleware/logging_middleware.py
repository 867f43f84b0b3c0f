"""
Logging Middleware
Structured logging middleware for request/response tracking and performance monitoring.
"""

import time
from typing import Dict, Optional, Set

from fastapi import Request
import structlog

from src.config.constants import UNTRACKED_PATHS
from src.utils.dependencies import get_client_ip, get_request_id
from src.utils.metrics import metrics

logger = structlog.get_logger()


class LoggingMiddleware:
    """Middleware for structured request/response logging"""

    def __init__(
            self,
            exclude_paths: Optional[Set[str]] = None,
            slow_request_seconds: float = 5.0
    ):
        self.exclude_paths = exclude_paths if exclude_paths is not None else set(UNTRACKED_PATHS)
        self.slow_request_seconds = slow_request_seconds

        # Headers to sanitize for security
        self.sensitive_headers = {
            "authorization", "cookie", "set-cookie", "x-api-key", "x-auth-token"
        }

    async def __call__(self, request: Request, call_next):
        """Process request through logging middleware"""
        request_id = get_request_id(request)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        if request.url.path in self.exclude_paths:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        start_time = time.time()
        self._log_request(request)

        try:
            response = await call_next(request)
        except Exception as e:
            processing_time = time.time() - start_time
            logger.error(
                "Request failed with exception",
                event_type="request_failed",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error_message=str(e),
                processing_time_ms=round(processing_time * 1000, 2)
            )
            raise

        processing_time = time.time() - start_time

        for header, value in getattr(request.state, "rate_limit_headers", {}).items():
            response.headers.setdefault(header, value)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(processing_time * 1000, 2))

        self._log_response(request, response.status_code, processing_time)
        metrics.record_request(
            request.method,
            self._endpoint(request),
            response.status_code,
            processing_time
        )
        return response

    def _log_request(self, request: Request) -> None:
        """Log incoming request details"""
        logger.info(
            "Incoming request",
            event_type="request_started",
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
            content_length=request.headers.get("content-length"),
            headers=self._sanitize_headers(dict(request.headers))
        )

    def _log_response(self, request: Request, status_code: int, processing_time: float) -> None:
        """Log response details"""
        response_data = {
            "event_type": "request_completed",
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "client_ip": get_client_ip(request),
            "processing_time_ms": round(processing_time * 1000, 2),
        }

        if processing_time > self.slow_request_seconds:
            response_data["performance_warning"] = "slow_request"

        # Log with appropriate level based on status code
        if status_code >= 500:
            logger.error("Request completed with server error", **response_data)
        elif status_code >= 400:
            logger.warning("Request completed with client error", **response_data)
        else:
            logger.info("Request completed successfully", **response_data)

    @staticmethod
    def _endpoint(request: Request) -> str:
        """Route template, so slugs do not explode metric cardinality"""
        route = request.scope.get("route")
        return getattr(route, "path", None) or "unmatched"

    def _sanitize_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Sanitize sensitive headers for logging"""
        sanitized = {}

        for key, value in headers.items():
            if key.lower() in self.sensitive_headers:
                # Show only first and last 4 characters for sensitive headers
                if len(value) > 8:
                    sanitized[key] = f"{value[:4]}...{value[-4:]}"
                else:
                    sanitized[key] = "***"
            else:
                sanitized[key] = value

        return sanitized
