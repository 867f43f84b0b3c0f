"""
Shared test fixtures for the VoidBox test suite.

Provides: settings for the test environment, a fake Telegram gateway,
repository mocks, sample documents and a FastAPI test client.
"""

import os

# Settings are cached on first import, so the environment is set up front
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CLEANUP_INTERVAL_SECONDS"] = "0"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["TG_API_ID"] = "12345"
os.environ["TG_API_HASH"] = "0123456789abcdef0123456789abcdef"
os.environ.pop("STATIC_DIR", None)

from contextlib import asynccontextmanager
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from src.core.telegram import SentCode, TelegramUser, StoredMessage
from src.models.mongo import FileDocument, UserDocument, UserFileDocument
from src.repositories import (
    BaseRepository,
    FileRepository,
    UserRepository,
    UserFileRepository,
    AbuseFlagRepository,
)
from src.services import TokenService, SessionClaims

TEST_SECRET = os.environ["JWT_SECRET_KEY"]
CREATED_AT = datetime(2026, 1, 15, 12, 30, 0)


class FakeGateway:
    """Gateway double yielding one prepared session"""

    def __init__(self, telegram_session):
        self.telegram_session = telegram_session
        self.opened = []
        self.is_configured = True

    @asynccontextmanager
    async def session(self, session_string=""):
        self.opened.append(session_string)
        yield self.telegram_session


@pytest.fixture
def telegram_session():
    session = MagicMock()
    session.send_code = AsyncMock(return_value=SentCode(phone_code_hash="hash123", timeout=120))
    session.sign_in = AsyncMock(
        return_value=TelegramUser(id=42, first_name="Ada", last_name="Lovelace", username="ada")
    )
    session.check_password = AsyncMock(return_value=TelegramUser(id=42, first_name="Ada"))
    session.create_drive_channel = AsyncMock(return_value=1001)
    session.send_file = AsyncMock(return_value=StoredMessage(file_id="555", message_id="77"))
    session.download_file = AsyncMock(return_value=b"hello world")
    session.delete_message = AsyncMock(return_value=True)
    session.export = MagicMock(return_value="authorized-session")
    return session


@pytest.fixture
def gateway(telegram_session):
    return FakeGateway(telegram_session)


@pytest.fixture
def token_service():
    return TokenService(secret_key=TEST_SECRET)


@pytest.fixture
def claims():
    return SessionClaims(
        user_id="tg_42",
        telegram_id=42,
        session="authorized-session",
        channel_id=1001,
    )


@pytest.fixture
def session_token(token_service, claims):
    return token_service.issue_session_token(
        user_id=claims.user_id,
        telegram_id=claims.telegram_id,
        session=claims.session,
        channel_id=claims.channel_id,
    )


# Repository mocks

@pytest.fixture
def file_repository():
    repo = MagicMock(spec=FileRepository)
    repo.to_object_id.side_effect = BaseRepository.to_object_id
    repo.create.side_effect = lambda file: file
    return repo


@pytest.fixture
def user_repository():
    return MagicMock(spec=UserRepository)


@pytest.fixture
def user_file_repository():
    repo = MagicMock(spec=UserFileRepository)
    repo.create.side_effect = lambda entry: entry
    return repo


@pytest.fixture
def abuse_flag_repository():
    repo = MagicMock(spec=AbuseFlagRepository)
    repo.create.side_effect = lambda flag: flag
    return repo


# Sample documents

@pytest.fixture
def sample_file():
    return FileDocument(
        id=ObjectId(),
        name="report.pdf",
        size=11,
        mimetype="application/pdf",
        slug="AbCdEf12",
        uploader_ip="203.0.113.7",
        telegram_file_id="555",
        telegram_message_id="77",
        created_at=CREATED_AT,
    )


@pytest.fixture
def sample_user():
    return UserDocument(
        id="tg_42",
        telegram_id=42,
        first_name="Ada",
        last_name="Lovelace",
        username="ada",
        channel_id=1001,
        created_at=CREATED_AT,
    )


@pytest.fixture
def sample_user_file():
    return UserFileDocument(
        id=ObjectId(),
        user_id="tg_42",
        name="report.pdf",
        slug="AbCdEf12",
        mimetype="application/pdf",
        size=11,
        created_at=CREATED_AT,
    )


# Application

@pytest.fixture
def app(token_service):
    """Application with the token service pinned to the test secret"""
    from src.dependencies import get_token_service
    from src.main import app as voidbox_app

    voidbox_app.dependency_overrides[get_token_service] = lambda: token_service
    yield voidbox_app
    voidbox_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # No context manager: the lifespan would connect to MongoDB
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers(session_token):
    return {"Authorization": f"Bearer {session_token}"}
