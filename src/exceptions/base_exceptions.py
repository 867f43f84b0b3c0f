"""
Base exception classes and error handling for VoidBox.

This module provides the foundation for all custom exceptions
and centralized error handling throughout the application.

Every error leaves the API as::

    {"status": "error", "error": "<message>", "code": "<ERROR_CODE>",
     "details": {...}, "meta": {"timestamp": ..., "path": ..., "method": ...}}

The single-page client reads ``error`` as a plain string.
"""

import traceback
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from src.config.constants import ErrorCategory
from src.utils.date_utils import utc_now
from src.utils.logger import get_logger

# Initialize logger
logger = get_logger(__name__)


class VoidBoxException(Exception):
    """
    Base exception class for all VoidBox custom exceptions.

    This provides a consistent interface for error handling with
    structured error information and logging integration.
    """

    def __init__(
            self,
            message: str,
            error_code: str = "INTERNAL_ERROR",
            status_code: int = 500,
            details: Optional[Dict[str, Any]] = None,
            category: ErrorCategory = ErrorCategory.INTERNAL,
            retryable: bool = False,
            headers: Optional[Dict[str, str]] = None,
            caused_by: Optional[Exception] = None
    ):
        """
        Initialize VoidBox exception.

        Args:
            message: Error message returned to the client
            error_code: Machine-readable error code
            status_code: HTTP status code
            details: Additional error details
            category: Error category for monitoring
            retryable: Whether the operation can be retried
            headers: Extra response headers
            caused_by: Original exception that caused this error
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.category = category
        self.retryable = retryable
        self.headers = headers or {}
        self.caused_by = caused_by
        self.timestamp = utc_now()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary representation.

        Returns:
            Dictionary with error information
        """
        error_dict = {
            "error": self.message,
            "code": self.error_code,
        }

        if self.details:
            error_dict["details"] = self.details

        return error_dict

    def log_error(self, logger: Optional[structlog.stdlib.BoundLogger] = None) -> None:
        """
        Log the error with appropriate level and context.

        Args:
            logger: Logger instance to use
        """
        if logger is None:
            logger = get_logger(__name__)

        log_data = {
            "error_code": self.error_code,
            "error_category": self.category.value,
            "status_code": self.status_code,
            "retryable": self.retryable,
        }

        if self.details:
            log_data["details"] = self.details

        if self.caused_by:
            log_data["caused_by"] = str(self.caused_by)
            log_data["caused_by_type"] = type(self.caused_by).__name__

        # Choose appropriate log level based on status code
        if self.status_code >= 500:
            logger.error(self.message, **log_data)
        elif self.status_code >= 400:
            logger.warning(self.message, **log_data)
        else:
            logger.info(self.message, **log_data)


class ValidationError(VoidBoxException):
    """Exception for request validation errors."""

    def __init__(
            self,
            message: str = "Request validation failed",
            field: Optional[str] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "VALIDATION_ERROR"),
            status_code=400,
            category=ErrorCategory.VALIDATION,
            details=details,
            **kwargs
        )


class AuthenticationError(VoidBoxException):
    """Exception for authentication failures."""

    def __init__(
            self,
            message: str = "Authentication required",
            **kwargs
    ):
        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "AUTHENTICATION_FAILED"),
            status_code=401,
            category=ErrorCategory.AUTHENTICATION,
            **kwargs
        )


class AuthorizationError(VoidBoxException):
    """Exception for authorization failures."""

    def __init__(
            self,
            message: str = "Forbidden",
            **kwargs
    ):
        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "AUTHORIZATION_FAILED"),
            status_code=403,
            category=ErrorCategory.AUTHORIZATION,
            **kwargs
        )


class NotFoundError(VoidBoxException):
    """Exception for resource not found errors."""

    def __init__(
            self,
            message: str = "Resource not found",
            resource_type: Optional[str] = None,
            resource_id: Optional[str] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "RESOURCE_NOT_FOUND"),
            status_code=404,
            category=ErrorCategory.NOT_FOUND,
            details=details,
            **kwargs
        )


class GoneError(VoidBoxException):
    """Exception for resources that existed but are no longer available."""

    def __init__(
            self,
            message: str = "Resource expired",
            **kwargs
    ):
        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "RESOURCE_GONE"),
            status_code=410,
            category=ErrorCategory.GONE,
            **kwargs
        )


class PayloadTooLargeError(VoidBoxException):
    """Exception for uploads above the configured size limit."""

    def __init__(
            self,
            message: str = "File too large",
            max_bytes: Optional[int] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if max_bytes:
            details["max_bytes"] = max_bytes

        super().__init__(
            message=message,
            error_code="PAYLOAD_TOO_LARGE",
            status_code=413,
            category=ErrorCategory.VALIDATION,
            details=details,
            **kwargs
        )


class RateLimitError(VoidBoxException):
    """Exception for rate limit exceeded errors."""

    def __init__(
            self,
            message: str = "Too many requests, please try again later.",
            limit: Optional[int] = None,
            window: Optional[int] = None,
            retry_after: Optional[int] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if limit:
            details["limit"] = limit
        if window:
            details["window_seconds"] = window

        headers = kwargs.pop("headers", {})
        if retry_after is not None:
            headers.setdefault("Retry-After", str(retry_after))

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "RATE_LIMIT_EXCEEDED"),
            status_code=429,
            category=ErrorCategory.RATE_LIMIT,
            details=details,
            headers=headers,
            retryable=True,
            **kwargs
        )


class InternalServerError(VoidBoxException):
    """Exception for internal server errors."""

    def __init__(
            self,
            message: str = "Internal server error",
            **kwargs
    ):
        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "INTERNAL_SERVER_ERROR"),
            status_code=500,
            category=ErrorCategory.INTERNAL,
            retryable=True,
            **kwargs
        )


class ExternalServiceError(VoidBoxException):
    """Exception for external service errors."""

    def __init__(
            self,
            message: str = "External service error",
            service_name: Optional[str] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if service_name:
            details["service_name"] = service_name

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "EXTERNAL_SERVICE_ERROR"),
            status_code=502,
            category=ErrorCategory.EXTERNAL,
            details=details,
            retryable=True,
            **kwargs
        )


class UpstreamTimeoutError(VoidBoxException):
    """Exception for timeouts while talking to an upstream service."""

    def __init__(
            self,
            message: str = "Request timeout",
            operation: Optional[str] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", "TIMEOUT_ERROR"),
            status_code=504,
            category=ErrorCategory.TIMEOUT,
            details=details,
            retryable=True,
            **kwargs
        )


def _meta(request: Request, timestamp: Optional[str] = None) -> Dict[str, Any]:
    meta = {
        "timestamp": timestamp or utc_now().isoformat(),
        "path": str(request.url.path),
        "method": request.method,
    }

    # Add request ID if available
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        meta["request_id"] = request_id
    return meta


async def voidbox_exception_handler(
        request: Request,
        exc: VoidBoxException
) -> JSONResponse:
    """
    Handler for VoidBox custom exceptions.

    Args:
        request: FastAPI request object
        exc: VoidBox exception instance

    Returns:
        JSON response with error details
    """
    exc.log_error(logger)

    response_data = {
        "status": "error",
        **exc.to_dict(),
        "meta": _meta(request, exc.timestamp.isoformat()),
    }

    return JSONResponse(
        status_code=exc.status_code,
        content=response_data,
        headers=exc.headers or None
    )


async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handler for standard HTTP exceptions.

    Args:
        request: FastAPI request object
        exc: HTTP exception instance

    Returns:
        JSON response with error details
    """
    error_data = {
        "status": "error",
        "error": str(exc.detail),
        "code": f"HTTP_{exc.status_code}",
        "meta": _meta(request),
    }

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=str(request.url.path),
        method=request.method,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_data,
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
) -> JSONResponse:
    """
    Handler for request validation errors.

    Args:
        request: FastAPI request object
        exc: Request validation error instance

    Returns:
        JSON response with validation error details
    """
    validation_errors = []
    for error in exc.errors():
        validation_errors.append({
            "field": ".".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    error_data = {
        "status": "error",
        "error": "Request validation failed",
        "code": "VALIDATION_ERROR",
        "details": {
            "validation_errors": validation_errors
        },
        "meta": _meta(request),
    }

    logger.warning(
        "Request validation failed",
        validation_errors=validation_errors,
        path=str(request.url.path),
        method=request.method,
    )

    return JSONResponse(
        status_code=400,
        content=error_data
    )


async def generic_exception_handler(
        request: Request,
        exc: Exception
) -> JSONResponse:
    """
    Handler for unexpected exceptions.

    Args:
        request: FastAPI request object
        exc: Generic exception instance

    Returns:
        JSON response with generic error message
    """
    # Generate error ID for tracking
    error_id = str(uuid.uuid4())

    error_data = {
        "status": "error",
        "error": "Internal server error",
        "code": "INTERNAL_SERVER_ERROR",
        "details": {"error_id": error_id},
        "meta": _meta(request),
    }

    logger.error(
        "Unexpected exception occurred",
        error_id=error_id,
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=str(request.url.path),
        method=request.method,
        traceback="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )

    return JSONResponse(
        status_code=500,
        content=error_data
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Setup exception handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(VoidBoxException, voidbox_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Generic exception handler (catch-all)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers configured")


# Export all exception classes and utilities
__all__ = [
    "VoidBoxException",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "GoneError",
    "PayloadTooLargeError",
    "RateLimitError",
    "InternalServerError",
    "ExternalServiceError",
    "UpstreamTimeoutError",
    "setup_exception_handlers",
    "voidbox_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "generic_exception_handler",
]
