"""
Translation of Telethon errors into VoidBox core exceptions.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from telethon import errors

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

logger = structlog.get_logger(__name__)

INVALID_PHONE_MESSAGE = "Invalid phone number format"
FLOOD_MESSAGE = "Too many attempts, try again later"
INVALID_CODE_MESSAGE = "Invalid verification code"
CODE_EXPIRED_MESSAGE = "Code expired, please resend"
INVALID_PASSWORD_MESSAGE = "Invalid password"
SESSION_EXPIRED_MESSAGE = "Telegram session expired. Please re-login."
TIMEOUT_MESSAGE = "Telegram connection timed out. Please try again."
CONNECTION_MESSAGE = "Could not connect to Telegram"


def _rpc_name(exc: BaseException) -> Optional[str]:
    return getattr(exc, "message", None) if isinstance(exc, errors.RPCError) else None


def translate_error(exc: BaseException, operation: Optional[str] = None) -> TelegramError:
    """
    Map a Telethon or network exception to a core exception.

    Args:
        exc: Exception raised by the client library
        operation: Name of the failed operation, for logging

    Returns:
        Matching TelegramError subclass
    """
    rpc = _rpc_name(exc)
    kwargs = {"rpc_error": rpc, "operation": operation}

    if isinstance(exc, errors.PhoneNumberInvalidError):
        return InvalidPhoneNumberError(INVALID_PHONE_MESSAGE, **kwargs)
    if isinstance(exc, errors.PhoneNumberFloodError):
        return PhoneFloodError(FLOOD_MESSAGE, **kwargs)
    if isinstance(exc, errors.FloodWaitError):
        return PhoneFloodError(FLOOD_MESSAGE, seconds=exc.seconds, **kwargs)
    if isinstance(exc, errors.FloodError):
        return PhoneFloodError(FLOOD_MESSAGE, **kwargs)
    if isinstance(exc, errors.SessionPasswordNeededError):
        return PasswordRequiredError("Two-step verification password required", **kwargs)
    if isinstance(exc, errors.PhoneCodeInvalidError):
        return InvalidCodeError(INVALID_CODE_MESSAGE, **kwargs)
    if isinstance(exc, errors.PhoneCodeExpiredError):
        return CodeExpiredError(CODE_EXPIRED_MESSAGE, **kwargs)
    if isinstance(exc, errors.PasswordHashInvalidError):
        return InvalidPasswordError(INVALID_PASSWORD_MESSAGE, **kwargs)
    if isinstance(exc, errors.UnauthorizedError):
        return SessionExpiredError(SESSION_EXPIRED_MESSAGE, **kwargs)
    if isinstance(exc, TimeoutError):
        return TelegramTimeoutError(TIMEOUT_MESSAGE, **kwargs)
    if isinstance(exc, (ConnectionError, OSError)):
        return TelegramError(CONNECTION_MESSAGE, **kwargs)

    return TelegramError(rpc or str(exc) or type(exc).__name__, **kwargs)


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """
    Re-raise client library errors as core exceptions.

    Args:
        operation: Name of the wrapped operation
    """
    try:
        yield
    except (errors.RPCError, TimeoutError, ConnectionError, OSError) as e:
        translated = translate_error(e, operation)
        logger.warning(
            "Telegram operation failed",
            operation=operation,
            error_type=type(e).__name__,
            translated=type(translated).__name__,
            rpc_error=translated.rpc_error,
        )
        raise translated from e
