"""
Encryption utilities.

Telegram session strings grant full access to the user's account, so
they are encrypted before being embedded in signed tokens.
"""

import base64
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from src.utils.logger import get_logger

# Initialize logger
logger = get_logger(__name__)

_KDF_SALT = b"voidbox_session_encryption_salt"
_KDF_ITERATIONS = 100_000


class EncryptionError(Exception):
    """Raised when data cannot be encrypted or decrypted."""
    pass


def derive_key(secret: str, salt: bytes = _KDF_SALT) -> bytes:
    """
    Derive a Fernet key from an application secret.

    Args:
        secret: Application secret (the JWT signing key)
        salt: KDF salt

    Returns:
        URL-safe base64 encoded 32 byte key
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=_KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


class SessionCipher:
    """Symmetric encryption of Telegram session strings."""

    def __init__(self, secret: Optional[str] = None, key: Optional[bytes] = None):
        """
        Initialize cipher.

        Args:
            secret: Secret to derive the key from
            key: Ready Fernet key, takes precedence over ``secret``
        """
        if key is None:
            if not secret:
                raise EncryptionError("A secret or key is required")
            key = derive_key(secret)
        self._fernet = Fernet(key)

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt text.

        Args:
            plaintext: Text to encrypt

        Returns:
            Fernet token as text
        """
        if not plaintext:
            return ""
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt text produced by :meth:`encrypt`.

        Raises:
            EncryptionError: If the ciphertext is invalid or was tampered with
        """
        if not ciphertext:
            return ""
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            logger.warning("Session decryption failed", error_type=type(e).__name__)
            raise EncryptionError("Invalid encrypted session") from e
