"""
Token Service

Issues and verifies the signed tokens of the login flow:

* the pending-login token carries a partially authenticated Telegram
  session between ``sendCode`` and ``login``;
* the session token identifies the user and carries their Telegram
  session and storage channel.

Telegram sessions are encrypted before they are embedded, so the token
payload can be base64-decoded without exposing account access.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from src.config.constants import TokenType
from src.config.settings import get_settings
from src.services.base_service import BaseService
from src.services.exceptions import TokenError
from src.utils.date_utils import utc_now
from src.utils.encryption import SessionCipher, EncryptionError


@dataclass
class PendingLogin:
    """Decoded pending-login token"""
    session: str


@dataclass
class SessionClaims:
    """Decoded session token"""
    user_id: str
    telegram_id: int
    session: str
    channel_id: Optional[int] = None


class TokenService(BaseService):
    """Signs, verifies and decrypts VoidBox tokens"""

    def __init__(
            self,
            secret_key: str,
            algorithm: str = "HS256",
            session_ttl: timedelta = timedelta(days=30),
            pending_ttl: timedelta = timedelta(minutes=10),
            cipher: Optional[SessionCipher] = None
    ):
        super().__init__()
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.session_ttl = session_ttl
        self.pending_ttl = pending_ttl
        self.cipher = cipher or SessionCipher(secret=secret_key)

    @classmethod
    def from_settings(cls) -> "TokenService":
        settings = get_settings()
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            session_ttl=timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS),
            pending_ttl=timedelta(minutes=settings.PENDING_LOGIN_EXPIRE_MINUTES),
        )

    # Issuing

    def issue_pending_token(self, session: str, now: Optional[datetime] = None) -> str:
        """
        Sign a pending-login token

        Args:
            session: Telegram string session of the login in progress
            now: Issue time, defaults to the current time

        Returns:
            Encoded token
        """
        issued_at = now or utc_now()
        payload = {
            "typ": TokenType.PENDING.value,
            "session": self.cipher.encrypt(session),
            "iat": issued_at,
            "exp": issued_at + self.pending_ttl,
        }
        return self._encode(payload)

    def issue_session_token(
            self,
            user_id: str,
            telegram_id: int,
            session: str,
            channel_id: Optional[int] = None,
            now: Optional[datetime] = None
    ) -> str:
        """
        Sign a session token

        Args:
            user_id: VoidBox user id
            telegram_id: Telegram account id
            session: Authorized Telegram string session
            channel_id: Storage channel id, when the user has one
            now: Issue time, defaults to the current time

        Returns:
            Encoded token
        """
        issued_at = now or utc_now()
        payload = {
            "typ": TokenType.SESSION.value,
            "sub": user_id,
            "telegram_id": telegram_id,
            "session": self.cipher.encrypt(session),
            "iat": issued_at,
            "exp": issued_at + self.session_ttl,
        }
        if channel_id is not None:
            payload["channel_id"] = channel_id

        return self._encode(payload)

    # Verification

    def decode_pending_token(self, token: str) -> PendingLogin:
        """
        Verify a pending-login token

        Raises:
            TokenError: If the token is invalid, expired or not a pending token
        """
        payload = self._decode(token, TokenType.PENDING)
        return PendingLogin(session=self._decrypt_session(payload, TokenType.PENDING))

    def decode_session_token(self, token: str) -> SessionClaims:
        """
        Verify a session token

        Raises:
            TokenError: If the token is invalid, expired or not a session token
        """
        payload = self._decode(token, TokenType.SESSION)

        user_id = payload.get("sub")
        telegram_id = payload.get("telegram_id")
        if not user_id or telegram_id is None:
            raise TokenError("Token is missing the user", token_type=TokenType.SESSION.value)

        channel_id = payload.get("channel_id")
        try:
            return SessionClaims(
                user_id=str(user_id),
                telegram_id=int(telegram_id),
                session=self._decrypt_session(payload, TokenType.SESSION),
                channel_id=int(channel_id) if channel_id is not None else None,
            )
        except (TypeError, ValueError) as e:
            raise TokenError("Malformed token claims", token_type=TokenType.SESSION.value,
                             original_error=e) from e

    def _encode(self, payload: Dict[str, Any]) -> str:
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def _decode(self, token: str, expected: TokenType) -> Dict[str, Any]:
        if not token:
            raise TokenError("Token is required", token_type=expected.value)

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "typ"]}
            )
        except ExpiredSignatureError as e:
            self.logger.info("Expired token", token_type=expected.value)
            raise TokenError("Token has expired", token_type=expected.value, original_error=e) from e
        except InvalidTokenError as e:
            self.logger.warning("Invalid token", token_type=expected.value, error=str(e))
            raise TokenError("Invalid token", token_type=expected.value, original_error=e) from e

        if payload.get("typ") != expected.value:
            self.logger.warning(
                "Unexpected token type",
                expected=expected.value,
                received=payload.get("typ")
            )
            raise TokenError("Wrong token type", token_type=expected.value)

        return payload

    def _decrypt_session(self, payload: Dict[str, Any], token_type: TokenType) -> str:
        encrypted = payload.get("session")
        if not encrypted or not isinstance(encrypted, str):
            raise TokenError("Token is missing the session", token_type=token_type.value)

        try:
            return self.cipher.decrypt(encrypted)
        except EncryptionError as e:
            raise TokenError("Token session cannot be decrypted",
                             token_type=token_type.value, original_error=e) from e
