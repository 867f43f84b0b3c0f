"""
Core business logic package for VoidBox.

This package contains the Telegram storage and authentication layer
and the exceptions it raises.
"""

from src.core import exceptions
from src.core import telegram

from src.core.telegram import (
    TelegramGateway,
    TelegramSession,
    SentCode,
    TelegramUser,
    StoredMessage,
)

from src.core.exceptions import (
    CoreError,
    TelegramError,
    TelegramConfigurationError,
    InvalidPhoneNumberError,
    PhoneFloodError,
    PasswordRequiredError,
    InvalidCodeError,
    CodeExpiredError,
    InvalidPasswordError,
    SessionExpiredError,
    TelegramTimeoutError,
    MessageNotFoundError,
)

__all__ = [
    # Subpackages
    "exceptions",
    "telegram",

    # Telegram components
    "TelegramGateway",
    "TelegramSession",
    "SentCode",
    "TelegramUser",
    "StoredMessage",

    # Exception classes
    "CoreError",
    "TelegramError",
    "TelegramConfigurationError",
    "InvalidPhoneNumberError",
    "PhoneFloodError",
    "PasswordRequiredError",
    "InvalidCodeError",
    "CodeExpiredError",
    "InvalidPasswordError",
    "SessionExpiredError",
    "TelegramTimeoutError",
    "MessageNotFoundError",
]
