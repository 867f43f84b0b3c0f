"""
Base Service Class

Abstract base class for all services providing common logging and
error translation helpers.
"""

from abc import ABC
from typing import Dict, Any, Optional
import structlog

from src.core.exceptions import (
    TelegramError,
    InvalidPhoneNumberError,
    PhoneFloodError,
    PasswordRequiredError,
    InvalidCodeError,
    CodeExpiredError,
    InvalidPasswordError,
    SessionExpiredError,
    TelegramTimeoutError,
)
from src.exceptions import (
    VoidBoxException,
    ValidationError,
    AuthenticationError,
    RateLimitError,
    ExternalServiceError,
    UpstreamTimeoutError,
)
from src.models.types import UserId

SENSITIVE_FIELDS = (
    "password", "token", "session", "code", "secret", "authorization"
)


class BaseService(ABC):
    """Abstract base class for all services"""

    def __init__(self):
        self.logger = structlog.get_logger(self.__class__.__name__)
        self.service_name = self.__class__.__name__

    def log_operation(
            self,
            operation: str,
            user_id: Optional[UserId] = None,
            **kwargs
    ) -> None:
        """Log service operation with standard fields"""
        log_data = {
            "service": self.service_name,
            "operation": operation,
            **self._sanitize_log_data(kwargs)
        }

        if user_id:
            log_data["user_id"] = user_id

        self.logger.info("Service operation", **log_data)

    def _sanitize_log_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Remove sensitive data from log entries"""
        sanitized = {}
        for key, value in data.items():
            if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
                sanitized[key] = "[REDACTED]"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_log_data(value)
            else:
                sanitized[key] = value

        return sanitized

    def telegram_http_error(
            self,
            error: TelegramError,
            operation: str,
            fallback_message: Optional[str] = None
    ) -> VoidBoxException:
        """
        Convert a Telegram error into the API error returned to the client

        Args:
            error: Translated Telegram error
            operation: Operation that failed
            fallback_message: Message for errors without a specific mapping,
                defaults to the Telegram error message

        Returns:
            VoidBoxException carrying the HTTP status
        """
        self.logger.warning(
            "Telegram operation failed",
            service=self.service_name,
            operation=operation,
            error_type=type(error).__name__,
            error_code=error.error_code
        )

        if isinstance(error, (InvalidPhoneNumberError, InvalidCodeError,
                              CodeExpiredError, InvalidPasswordError)):
            return ValidationError(error.message, error_code=error.error_code)
        if isinstance(error, PhoneFloodError):
            return RateLimitError(error.message, retry_after=error.seconds)
        if isinstance(error, SessionExpiredError):
            return AuthenticationError(error.message, error_code="SESSION_EXPIRED")
        if isinstance(error, TelegramTimeoutError):
            return UpstreamTimeoutError(error.message, operation=operation)
        if isinstance(error, PasswordRequiredError):
            return ValidationError(error.message, error_code="PASSWORD_REQUIRED")

        return ExternalServiceError(
            fallback_message or error.message,
            service_name="telegram",
            error_code=error.error_code
        )
