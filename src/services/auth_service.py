"""
Auth Service

Runs the Telegram login handshake on behalf of the browser client:

1. ``send_code`` opens a fresh Telegram session, asks Telegram to send
   a login code and hands the session back inside a pending-login token.
2. ``login`` resumes that session and signs in with the code, or with
   the two-step verification password when the account requires it.

On success the user is stored, their storage channel is created when
missing and a session token is issued.
"""

from typing import Optional, Union

from src.config.constants import USERPIC_URL_TEMPLATE
from src.config.settings import get_settings
from src.core.exceptions import TelegramError, PasswordRequiredError
from src.core.telegram import TelegramGateway, TelegramSession, TelegramUser
from src.exceptions import ValidationError, AuthenticationError
from src.models.mongo import UserDocument
from src.models.schemas import (
    SendCodeRequest,
    LoginRequest,
    SendCodeResponse,
    PasswordRequiredResponse,
    LoginResponse,
    MeResponse,
    UserResponse,
)
from src.repositories import UserRepository, RepositoryError
from src.services.base_service import BaseService
from src.services.exceptions import TokenError
from src.services.token_service import TokenService, SessionClaims
from src.utils.metrics import metrics


class AuthService(BaseService):
    """Service for the OTP / 2FA login flow"""

    def __init__(
            self,
            gateway: TelegramGateway,
            token_service: TokenService,
            user_repository: UserRepository,
            channel_title: Optional[str] = None,
            channel_about: Optional[str] = None
    ):
        super().__init__()
        settings = get_settings()
        self.gateway = gateway
        self.tokens = token_service
        self.users = user_repository
        self.channel_title = channel_title or settings.DRIVE_CHANNEL_TITLE
        self.channel_about = channel_about or settings.DRIVE_CHANNEL_ABOUT

    async def send_code(self, request: SendCodeRequest) -> SendCodeResponse:
        """
        Send a login code to a phone number

        Args:
            request: Phone number to log in with

        Returns:
            Code hash, code timeout and the pending-login token
        """
        if not request.phone_number:
            raise ValidationError("Phone number is required", field="phoneNumber")

        try:
            async with self.gateway.session() as session:
                sent = await session.send_code(request.phone_number)
                session_string = session.export()
        except TelegramError as e:
            metrics.record_auth_attempt("send_code", "failure")
            raise self.telegram_http_error(e, "send_code") from e

        metrics.record_auth_attempt("send_code", "success")
        self.log_operation("send_code", timeout=sent.timeout)

        return SendCodeResponse(
            phone_code_hash=sent.phone_code_hash,
            timeout=sent.timeout,
            temp_token=self.tokens.issue_pending_token(session_string),
        )

    async def login(self, request: LoginRequest) -> Union[LoginResponse, PasswordRequiredResponse]:
        """
        Complete a login started with :meth:`send_code`

        Args:
            request: Code fields or 2FA password plus the pending-login token

        Returns:
            Session token and user, or a password prompt with a new
            pending-login token
        """
        if not request.temp_token:
            raise ValidationError("Missing tempToken from sendCode step", field="tempToken")

        try:
            pending = self.tokens.decode_pending_token(request.temp_token)
        except TokenError as e:
            raise AuthenticationError(
                "Expired or invalid temp token, please resend code",
                error_code="INVALID_TEMP_TOKEN"
            ) from e

        step = "check_password" if request.password else "sign_in"
        if step == "sign_in":
            missing = [
                alias for alias, value in (
                    ("phoneNumber", request.phone_number),
                    ("phoneCode", request.phone_code),
                    ("phoneCodeHash", request.phone_code_hash),
                ) if not value
            ]
            if missing:
                raise ValidationError(
                    "phoneNumber, phoneCode and phoneCodeHash are required",
                    details={"missing_fields": missing}
                )

        try:
            async with self.gateway.session(pending.session) as session:
                try:
                    account = await self._authenticate(session, request)
                except PasswordRequiredError:
                    metrics.record_auth_attempt(step, "password_required")
                    self.log_operation(step, outcome="password_required")
                    return PasswordRequiredResponse(
                        temp_token=self.tokens.issue_pending_token(session.export())
                    )

                if account is None:
                    metrics.record_auth_attempt(step, "failure")
                    raise ValidationError("Authentication failed", error_code="AUTHENTICATION_FAILED")

                user = await self._store_user(account)
                if user.channel_id is None:
                    await self._create_drive_channel(session, user)

                session_string = session.export()
        except TelegramError as e:
            metrics.record_auth_attempt(step, "failure")
            raise self.telegram_http_error(e, step) from e

        metrics.record_auth_attempt(step, "success")
        self.log_operation("login", user_id=user.id, step=step)

        token = self.tokens.issue_session_token(
            user_id=user.id,
            telegram_id=user.telegram_id,
            session=session_string,
            channel_id=user.channel_id,
        )
        return LoginResponse(token=token, user=UserResponse.from_document(user))

    async def me(self, claims: SessionClaims) -> MeResponse:
        """Return the user identified by a session token"""
        user = await self.users.get_by_id(claims.user_id)
        if user is None:
            raise AuthenticationError("User not found", error_code="USER_NOT_FOUND")
        return MeResponse(user=UserResponse.from_document(user))

    @staticmethod
    async def _authenticate(session: TelegramSession, request: LoginRequest) -> Optional[TelegramUser]:
        if request.password:
            return await session.check_password(request.password)
        return await session.sign_in(
            request.phone_number,
            request.phone_code,
            request.phone_code_hash,
        )

    async def _store_user(self, account: TelegramUser) -> UserDocument:
        photo_url = None
        if account.has_photo:
            photo_url = USERPIC_URL_TEMPLATE.format(handle=account.username or account.id)

        profile = {
            "first_name": account.first_name or "User",
            "last_name": account.last_name or None,
            "username": account.username or None,
            "photo_url": photo_url,
        }
        return await self.users.upsert_from_telegram(account.id, profile)

    async def _create_drive_channel(self, session: TelegramSession, user: UserDocument) -> None:
        """Create the user's storage channel; failures leave the user without one"""
        try:
            channel_id = await session.create_drive_channel(self.channel_title, self.channel_about)
            await self.users.set_channel(user.id, channel_id)
        except (TelegramError, RepositoryError) as e:
            self.logger.warning(
                "Drive channel creation failed",
                user_id=user.id,
                error_type=type(e).__name__,
                error=str(e)
            )
            return

        user.channel_id = channel_id
        self.log_operation("create_drive_channel", user_id=user.id, channel_id=channel_id)
