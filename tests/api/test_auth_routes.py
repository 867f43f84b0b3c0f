from unittest.mock import MagicMock

import pytest

from src.dependencies import get_auth_service
from src.exceptions import ValidationError, RateLimitError
from src.models.schemas import (
    SendCodeResponse,
    PasswordRequiredResponse,
    LoginResponse,
    MeResponse,
    UserResponse,
)
from src.services import AuthService


@pytest.fixture
def auth_service(app):
    service = MagicMock(spec=AuthService)
    app.dependency_overrides[get_auth_service] = lambda: service
    return service


def test_send_code(client, auth_service):
    auth_service.send_code.return_value = SendCodeResponse(
        phone_code_hash="hash123", timeout=60, temp_token="pending-token"
    )

    response = client.post("/api/auth/sendCode", json={"phoneNumber": "+15551234567"})

    assert response.status_code == 200
    assert response.json() == {"phoneCodeHash": "hash123", "timeout": 60, "tempToken": "pending-token"}
    request = auth_service.send_code.await_args.args[0]
    assert request.phone_number == "+15551234567"


def test_send_code_invalid_phone(client, auth_service):
    auth_service.send_code.side_effect = ValidationError(
        "Invalid phone number format", error_code="PHONE_NUMBER_INVALID"
    )

    response = client.post("/api/auth/sendCode", json={"phoneNumber": "123"})

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert body["error"] == "Invalid phone number format"
    assert body["code"] == "PHONE_NUMBER_INVALID"
    assert body["meta"]["path"] == "/api/auth/sendCode"


def test_send_code_flood(client, auth_service):
    auth_service.send_code.side_effect = RateLimitError("Too many attempts, try again later", retry_after=120)

    response = client.post("/api/auth/sendCode", json={"phoneNumber": "+15551234567"})

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "120"


def test_login(client, auth_service, sample_user):
    auth_service.login.return_value = LoginResponse(
        token="session-token", user=UserResponse.from_document(sample_user)
    )

    response = client.post("/api/auth/login", json={
        "phoneNumber": "+15551234567",
        "phoneCode": "12345",
        "phoneCodeHash": "hash123",
        "tempToken": "pending-token",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["token"] == "session-token"
    assert body["user"]["id"] == "tg_42"
    assert body["user"]["channel_id"] == 1001
    assert body["user"]["created_at"] == "2026-01-15T12:30:00.000Z"

    request = auth_service.login.await_args.args[0]
    assert request.phone_code == "12345"
    assert request.temp_token == "pending-token"


def test_login_password_required(client, auth_service):
    auth_service.login.return_value = PasswordRequiredResponse(temp_token="pending-token-2")

    response = client.post("/api/auth/login", json={"tempToken": "pending-token"})

    assert response.status_code == 200
    assert response.json() == {"requiresPassword": True, "tempToken": "pending-token-2"}


def test_login_keeps_password_whitespace(client, auth_service):
    auth_service.login.return_value = PasswordRequiredResponse(temp_token="t")

    client.post("/api/auth/login", json={"password": " spaced ", "tempToken": "pending-token"})

    assert auth_service.login.await_args.args[0].password == " spaced "


def test_me(client, auth_service, auth_headers, sample_user):
    auth_service.me.return_value = MeResponse(user=UserResponse.from_document(sample_user))

    response = client.get("/api/auth/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["user"]["first_name"] == "Ada"
    claims = auth_service.me.await_args.args[0]
    assert claims.user_id == "tg_42"
    assert claims.session == "authorized-session"


def test_me_without_token(client, auth_service):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["error"] == "Authentication required"
    auth_service.me.assert_not_awaited()


def test_me_with_invalid_token(client, auth_service):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401


def test_me_with_pending_token(client, auth_service, token_service):
    pending = token_service.issue_pending_token("pending-session")

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {pending}"})

    assert response.status_code == 401
