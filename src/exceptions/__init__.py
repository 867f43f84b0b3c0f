"""
Custom exceptions package for VoidBox.

This package provides custom exception classes and error handling
utilities for the VoidBox application.
"""

from src.exceptions.base_exceptions import (
    VoidBoxException,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    GoneError,
    PayloadTooLargeError,
    RateLimitError,
    InternalServerError,
    ExternalServiceError,
    UpstreamTimeoutError,
    setup_exception_handlers,
)

# Re-export all custom exceptions
__all__ = [
    # Base exception classes
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

    # Exception handling setup
    "setup_exception_handlers",
]
