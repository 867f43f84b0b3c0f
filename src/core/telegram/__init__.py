"""
Telegram storage and authentication layer.
"""

from src.core.telegram.gateway import TelegramGateway
from src.core.telegram.session import (
    TelegramSession,
    SentCode,
    TelegramUser,
    StoredMessage,
)
from src.core.telegram.errors import translate_error, translate_errors

__all__ = [
    "TelegramGateway",
    "TelegramSession",
    "SentCode",
    "TelegramUser",
    "StoredMessage",
    "translate_error",
    "translate_errors",
]
