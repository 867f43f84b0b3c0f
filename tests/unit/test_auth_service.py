import pytest

from src.core.exceptions import (
    InvalidPhoneNumberError,
    PhoneFloodError,
    PasswordRequiredError,
    InvalidCodeError,
    TelegramError,
    TelegramTimeoutError,
)
from src.core.telegram import TelegramUser
from src.exceptions import (
    ValidationError,
    AuthenticationError,
    RateLimitError,
    ExternalServiceError,
    UpstreamTimeoutError,
)
from src.models.schemas import (
    SendCodeRequest,
    LoginRequest,
    LoginResponse,
    PasswordRequiredResponse,
)
from src.repositories import RepositoryError
from src.services import AuthService


@pytest.fixture
def auth_service(gateway, token_service, user_repository, sample_user):
    user_repository.upsert_from_telegram.return_value = sample_user
    return AuthService(
        gateway=gateway,
        token_service=token_service,
        user_repository=user_repository,
        channel_title="VoidBox Drive",
        channel_about="Personal cloud storage powered by VoidBox",
    )


def login_request(token_service, **overrides):
    fields = {
        "phone_number": "+15551234567",
        "phone_code": "12345",
        "phone_code_hash": "hash123",
        "temp_token": token_service.issue_pending_token("pending-session"),
    }
    fields.update(overrides)
    return LoginRequest(**fields)


# --- send_code ---

async def test_send_code_returns_pending_token(auth_service, gateway, token_service, telegram_session):
    telegram_session.export.return_value = "pending-session"

    response = await auth_service.send_code(SendCodeRequest(phone_number="+15551234567"))

    telegram_session.send_code.assert_awaited_once_with("+15551234567")
    assert gateway.opened == [""]
    assert response.phone_code_hash == "hash123"
    assert response.timeout == 120
    assert token_service.decode_pending_token(response.temp_token).session == "pending-session"


async def test_send_code_requires_phone(auth_service, telegram_session):
    with pytest.raises(ValidationError, match="Phone number is required"):
        await auth_service.send_code(SendCodeRequest())

    telegram_session.send_code.assert_not_awaited()


async def test_send_code_invalid_phone(auth_service, telegram_session):
    telegram_session.send_code.side_effect = InvalidPhoneNumberError(
        "Invalid phone number format", rpc_error="PHONE_NUMBER_INVALID"
    )

    with pytest.raises(ValidationError) as exc_info:
        await auth_service.send_code(SendCodeRequest(phone_number="123"))

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Invalid phone number format"
    assert exc_info.value.error_code == "PHONE_NUMBER_INVALID"


async def test_send_code_flood(auth_service, telegram_session):
    telegram_session.send_code.side_effect = PhoneFloodError(
        "Too many attempts, try again later", seconds=30, rpc_error="FLOOD_WAIT_X"
    )

    with pytest.raises(RateLimitError) as exc_info:
        await auth_service.send_code(SendCodeRequest(phone_number="+15551234567"))

    assert exc_info.value.status_code == 429
    assert exc_info.value.headers["Retry-After"] == "30"


async def test_send_code_timeout(auth_service, telegram_session):
    telegram_session.send_code.side_effect = TelegramTimeoutError("Telegram connection timed out. Please try again.")

    with pytest.raises(UpstreamTimeoutError):
        await auth_service.send_code(SendCodeRequest(phone_number="+15551234567"))


# --- login ---

async def test_login_with_code(auth_service, gateway, token_service, telegram_session, user_repository):
    response = await auth_service.login(login_request(token_service))

    assert isinstance(response, LoginResponse)
    assert gateway.opened == ["pending-session"]
    telegram_session.sign_in.assert_awaited_once_with("+15551234567", "12345", "hash123")
    user_repository.upsert_from_telegram.assert_awaited_once_with(42, {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "username": "ada",
        "photo_url": None,
    })
    # The sample user already has a channel
    telegram_session.create_drive_channel.assert_not_awaited()

    claims = token_service.decode_session_token(response.token)
    assert claims.user_id == "tg_42"
    assert claims.channel_id == 1001
    assert claims.session == "authorized-session"
    assert response.user.id == "tg_42"


async def test_login_creates_channel_for_new_user(
        auth_service, token_service, telegram_session, user_repository, sample_user
):
    sample_user.channel_id = None

    response = await auth_service.login(login_request(token_service))

    telegram_session.create_drive_channel.assert_awaited_once_with(
        "VoidBox Drive", "Personal cloud storage powered by VoidBox"
    )
    user_repository.set_channel.assert_awaited_once_with("tg_42", 1001)
    assert token_service.decode_session_token(response.token).channel_id == 1001
    assert response.user.channel_id == 1001


async def test_login_survives_channel_creation_failure(
        auth_service, token_service, telegram_session, user_repository, sample_user
):
    sample_user.channel_id = None
    telegram_session.create_drive_channel.side_effect = TelegramError("Failed to create channel")

    response = await auth_service.login(login_request(token_service))

    user_repository.set_channel.assert_not_awaited()
    assert token_service.decode_session_token(response.token).channel_id is None


async def test_login_survives_channel_store_failure(
        auth_service, token_service, user_repository, sample_user
):
    sample_user.channel_id = None
    user_repository.set_channel.side_effect = RepositoryError("boom")

    response = await auth_service.login(login_request(token_service))

    assert response.user.channel_id is None


async def test_login_sets_profile_photo(auth_service, token_service, telegram_session, user_repository):
    telegram_session.sign_in.return_value = TelegramUser(id=42, first_name=None, username="ada", has_photo=True)

    await auth_service.login(login_request(token_service))

    profile = user_repository.upsert_from_telegram.await_args.args[1]
    assert profile["first_name"] == "User"
    assert profile["photo_url"] == "https://t.me/i/userpic/320/ada.jpg"


async def test_login_asks_for_password(auth_service, token_service, telegram_session, user_repository):
    telegram_session.sign_in.side_effect = PasswordRequiredError("Two-step verification password required")
    telegram_session.export.return_value = "needs-password-session"

    response = await auth_service.login(login_request(token_service))

    assert isinstance(response, PasswordRequiredResponse)
    assert response.requires_password is True
    assert token_service.decode_pending_token(response.temp_token).session == "needs-password-session"
    user_repository.upsert_from_telegram.assert_not_awaited()


async def test_login_with_password(auth_service, token_service, telegram_session):
    request = login_request(
        token_service, phone_number=None, phone_code=None, phone_code_hash=None, password="hunter2"
    )

    response = await auth_service.login(request)

    assert isinstance(response, LoginResponse)
    telegram_session.check_password.assert_awaited_once_with("hunter2")
    telegram_session.sign_in.assert_not_awaited()


async def test_login_requires_temp_token(auth_service, token_service):
    with pytest.raises(ValidationError, match="Missing tempToken"):
        await auth_service.login(login_request(token_service, temp_token=None))


async def test_login_rejects_session_token_as_temp_token(auth_service, token_service, session_token):
    with pytest.raises(AuthenticationError) as exc_info:
        await auth_service.login(login_request(token_service, temp_token=session_token))

    assert exc_info.value.error_code == "INVALID_TEMP_TOKEN"
    assert exc_info.value.message == "Expired or invalid temp token, please resend code"


async def test_login_requires_code_fields(auth_service, token_service, telegram_session):
    with pytest.raises(ValidationError) as exc_info:
        await auth_service.login(login_request(token_service, phone_code=None))

    assert exc_info.value.details["missing_fields"] == ["phoneCode"]
    telegram_session.sign_in.assert_not_awaited()


async def test_login_wrong_code(auth_service, token_service, telegram_session):
    telegram_session.sign_in.side_effect = InvalidCodeError(
        "Invalid verification code", rpc_error="PHONE_CODE_INVALID"
    )

    with pytest.raises(ValidationError, match="Invalid verification code"):
        await auth_service.login(login_request(token_service))


async def test_login_without_user(auth_service, token_service, telegram_session):
    telegram_session.sign_in.return_value = None

    with pytest.raises(ValidationError, match="Authentication failed"):
        await auth_service.login(login_request(token_service))


async def test_login_unexpected_telegram_error(auth_service, token_service, telegram_session):
    telegram_session.sign_in.side_effect = TelegramError("INTERNAL", rpc_error="INTERNAL")

    with pytest.raises(ExternalServiceError) as exc_info:
        await auth_service.login(login_request(token_service))

    assert exc_info.value.status_code == 502


# --- me ---

async def test_me(auth_service, claims, user_repository, sample_user):
    user_repository.get_by_id.return_value = sample_user

    response = await auth_service.me(claims)

    user_repository.get_by_id.assert_awaited_once_with("tg_42")
    assert response.user.first_name == "Ada"


async def test_me_unknown_user(auth_service, claims, user_repository):
    user_repository.get_by_id.return_value = None

    with pytest.raises(AuthenticationError, match="User not found"):
        await auth_service.me(claims)
