"""
Core exceptions for the VoidBox business logic layer.

This module defines the errors raised by the Telegram storage and
authentication layer. Client library errors are translated into these
at the Telegram session boundary.
"""

from typing import Dict, Any, Optional

from src.utils.date_utils import utc_now


class CoreError(Exception):
    """Base exception for all core business logic errors."""

    def __init__(
            self,
            message: str,
            error_code: Optional[str] = None,
            details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.timestamp = utc_now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }


class TelegramError(CoreError):
    """Base exception for Telegram operations."""

    def __init__(
            self,
            message: str,
            rpc_error: Optional[str] = None,
            operation: Optional[str] = None
    ):
        details = {}
        if rpc_error:
            details["rpc_error"] = rpc_error
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code=rpc_error or "TELEGRAM_ERROR",
            details=details
        )
        self.rpc_error = rpc_error
        self.operation = operation


class TelegramConfigurationError(TelegramError):
    """Raised when the Telegram application credentials are missing."""

    def __init__(self, message: str = "Telegram API credentials are not configured"):
        super().__init__(message, rpc_error="NOT_CONFIGURED")


# Authentication errors

class InvalidPhoneNumberError(TelegramError):
    """Raised when Telegram rejects the phone number."""


class PhoneFloodError(TelegramError):
    """Raised when Telegram refuses to send more codes for now."""

    def __init__(self, message: str, seconds: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.seconds = seconds
        if seconds is not None:
            self.details["retry_after"] = seconds


class PasswordRequiredError(TelegramError):
    """Raised when the account has two-step verification enabled."""


class InvalidCodeError(TelegramError):
    """Raised when the login code is wrong."""


class CodeExpiredError(TelegramError):
    """Raised when the login code is no longer valid."""


class InvalidPasswordError(TelegramError):
    """Raised when the two-step verification password is wrong."""


# Session errors

class SessionExpiredError(TelegramError):
    """Raised when the stored session is no longer authorized."""


class TelegramTimeoutError(TelegramError):
    """Raised when Telegram does not answer in time."""


# Storage errors

class MessageNotFoundError(TelegramError):
    """Raised when the message holding a file cannot be found."""
