import io
import zipfile
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId

from src.core.exceptions import TelegramError, MessageNotFoundError, SessionExpiredError
from src.core.telegram import StoredMessage
from src.exceptions import (
    ValidationError,
    AuthenticationError,
    NotFoundError,
    GoneError,
    PayloadTooLargeError,
    InternalServerError,
    ExternalServiceError,
)
from src.models.mongo import FileDocument, UserFileDocument, AbuseFlagDocument
from src.models.schemas import FlagRequest
from src.services import FileService, UploadedFile, UploadOptions, resolve_expiry
from src.utils.date_utils import utc_now


@pytest.fixture
def file_service(gateway, file_repository, user_file_repository, abuse_flag_repository):
    return FileService(
        gateway=gateway,
        file_repository=file_repository,
        user_file_repository=user_file_repository,
        abuse_flag_repository=abuse_flag_repository,
        max_upload_bytes=1024,
    )


@pytest.fixture
def text_upload():
    return UploadedFile.from_bytes("notes.txt", "text/plain", b"remember the milk")


def zip_bytes(*names):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name in names:
            archive.writestr(name, "content")
    return buffer.getvalue()


# --- expiry ---

NOW = datetime(2026, 1, 1, 0, 0, 0)


def test_expiry_date_wins_over_days():
    assert resolve_expiry("2026-02-01T00:00:00Z", "3", NOW) == datetime(2026, 2, 1)


def test_expiry_year_is_a_date():
    assert resolve_expiry("2027", None, NOW) == datetime(2027, 1, 1)


def test_expiry_days():
    assert resolve_expiry(None, "1.5", NOW) == NOW + timedelta(days=1.5)


def test_invalid_expiry_date_falls_back_to_days():
    assert resolve_expiry("not a date", "2", NOW) == NOW + timedelta(days=2)


@pytest.mark.parametrize("expiry_days", [None, "", "abc", "nan", "inf", "1e308"])
def test_no_expiry(expiry_days):
    assert resolve_expiry(None, expiry_days, NOW) is None


# --- upload ---

async def test_upload(file_service, claims, text_upload, gateway, telegram_session,
                      file_repository, user_file_repository):
    response = await file_service.upload(
        claims, text_upload, UploadOptions(expiry_days="1", notes="shopping"), uploader_ip="203.0.113.7"
    )

    assert gateway.opened == ["authorized-session"]
    channel_id, data, storage_name, mimetype = telegram_session.send_file.await_args.args
    assert channel_id == 1001
    assert data == b"remember the milk"
    assert storage_name.endswith(".txt") and "notes" not in storage_name
    assert mimetype == "text/plain"

    file = file_repository.create.await_args.args[0]
    assert isinstance(file, FileDocument)
    assert file.name == "notes.txt"
    assert file.slug == response.slug
    assert file.size == 17
    assert file.uploader_ip == "203.0.113.7"
    assert file.telegram_file_id == "555"
    assert file.telegram_message_id == "77"
    assert file.expiry_at == file.created_at + timedelta(days=1)

    entry = user_file_repository.create.await_args.args[0]
    assert isinstance(entry, UserFileDocument)
    assert entry.user_id == "tg_42"
    assert entry.slug == response.slug
    assert entry.type == "file"
    assert entry.notes == "shopping"

    assert len(response.slug) == 8
    assert response.file.name == "notes.txt"


async def test_upload_note(file_service, claims, text_upload, user_file_repository):
    await file_service.upload(claims, text_upload, UploadOptions(is_note="true"))

    assert user_file_repository.create.await_args.args[0].type == "note"


async def test_upload_defaults_mimetype(file_service, claims, telegram_session):
    upload = UploadedFile.from_bytes("blob", None, b"\x00\x01")

    response = await file_service.upload(claims, upload, UploadOptions())

    assert telegram_session.send_file.await_args.args[3] == "application/octet-stream"
    assert response.file.mimetype == "application/octet-stream"


async def test_upload_requires_session(file_service, text_upload):
    with pytest.raises(AuthenticationError):
        await file_service.upload(None, text_upload, UploadOptions())


async def test_upload_requires_channel(file_service, claims, text_upload, telegram_session):
    claims.channel_id = None

    with pytest.raises(ValidationError, match="No VoidBox Drive channel"):
        await file_service.upload(claims, text_upload, UploadOptions())

    telegram_session.send_file.assert_not_awaited()


async def test_upload_requires_file(file_service, claims):
    with pytest.raises(ValidationError, match="No file uploaded."):
        await file_service.upload(claims, None, UploadOptions())


async def test_upload_too_large(file_service, claims, telegram_session):
    upload = UploadedFile.from_bytes("big.bin", None, b"x" * 1025)

    with pytest.raises(PayloadTooLargeError) as exc_info:
        await file_service.upload(claims, upload, UploadOptions())

    assert exc_info.value.status_code == 413
    telegram_session.send_file.assert_not_awaited()


async def test_upload_too_large_is_rejected_before_reading(file_service, claims, telegram_session):
    reader = AsyncMock(return_value=b"")
    upload = UploadedFile(filename="disk.iso", content_type=None, size=10 * 1024 ** 3, reader=reader)

    with pytest.raises(PayloadTooLargeError):
        await file_service.upload(claims, upload, UploadOptions())

    reader.assert_not_awaited()
    telegram_session.send_file.assert_not_awaited()


async def test_upload_without_declared_size(file_service, claims, telegram_session):
    upload = UploadedFile(
        filename="big.bin", content_type=None, size=None, reader=AsyncMock(return_value=b"x" * 1025)
    )

    with pytest.raises(PayloadTooLargeError):
        await file_service.upload(claims, upload, UploadOptions())

    telegram_session.send_file.assert_not_awaited()


async def test_upload_telegram_failure(file_service, claims, text_upload, telegram_session, file_repository):
    telegram_session.send_file.side_effect = TelegramError("CHANNEL_PRIVATE", rpc_error="CHANNEL_PRIVATE")

    with pytest.raises(ExternalServiceError, match="Failed to upload file: CHANNEL_PRIVATE"):
        await file_service.upload(claims, text_upload, UploadOptions())

    file_repository.create.assert_not_awaited()


async def test_upload_expired_session(file_service, claims, text_upload, telegram_session):
    telegram_session.send_file.side_effect = SessionExpiredError("Telegram session expired. Please re-login.")

    with pytest.raises(AuthenticationError) as exc_info:
        await file_service.upload(claims, text_upload, UploadOptions())

    assert exc_info.value.error_code == "SESSION_EXPIRED"


async def test_upload_without_file_id(file_service, claims, text_upload, telegram_session, file_repository):
    telegram_session.send_file.return_value = StoredMessage(file_id="", message_id="78")

    with pytest.raises(InternalServerError, match="Upload did not return a file_id."):
        await file_service.upload(claims, text_upload, UploadOptions())

    file_repository.create.assert_not_awaited()


# --- info / download ---

async def test_get_info(file_service, file_repository, sample_file):
    file_repository.get_by_slug.return_value = sample_file

    info = await file_service.get_info("AbCdEf12")

    assert info.name == "report.pdf"
    assert info.download_url == "/api/download/AbCdEf12"


async def test_get_info_unknown_slug(file_service, file_repository):
    file_repository.get_by_slug.return_value = None

    with pytest.raises(NotFoundError, match="File not found."):
        await file_service.get_info("missing")


async def test_download(file_service, claims, file_repository, telegram_session, sample_file):
    file_repository.get_by_slug.return_value = sample_file

    file, data = await file_service.download(claims, "AbCdEf12")

    assert file is sample_file
    assert data == b"hello world"
    file_repository.increment_download_count.assert_awaited_once_with(sample_file.id)
    telegram_session.download_file.assert_awaited_once_with(1001, 77)


async def test_download_requires_session(file_service, file_repository):
    with pytest.raises(AuthenticationError, match="Authentication required for downloads"):
        await file_service.download(None, "AbCdEf12")

    file_repository.get_by_slug.assert_not_awaited()


async def test_download_expired(file_service, claims, file_repository, telegram_session, sample_file):
    sample_file.expiry_at = utc_now() - timedelta(minutes=1)
    file_repository.get_by_slug.return_value = sample_file

    with pytest.raises(GoneError, match="File expired."):
        await file_service.download(claims, "AbCdEf12")

    file_repository.increment_download_count.assert_not_awaited()
    telegram_session.download_file.assert_not_awaited()


async def test_download_missing_message(file_service, claims, file_repository, telegram_session, sample_file):
    file_repository.get_by_slug.return_value = sample_file
    telegram_session.download_file.side_effect = MessageNotFoundError("Message not found")

    with pytest.raises(ExternalServiceError, match="Failed to download file."):
        await file_service.download(claims, "AbCdEf12")


async def test_download_bad_message_id(file_service, claims, file_repository, sample_file):
    sample_file.telegram_message_id = "not-a-number"
    file_repository.get_by_slug.return_value = sample_file

    with pytest.raises(InternalServerError):
        await file_service.download(claims, "AbCdEf12")


# --- note / zip ---

async def test_note_content(file_service, claims, file_repository, telegram_session, sample_file):
    file_repository.get_by_slug.return_value = sample_file
    telegram_session.download_file.return_value = "café".encode("utf-8") + b"\xff"

    text = await file_service.note_content(claims, "AbCdEf12")

    assert text == "café�"


async def test_note_content_requires_session(file_service):
    with pytest.raises(AuthenticationError):
        await file_service.note_content(None, "AbCdEf12")


async def test_zip_list(file_service, claims, file_repository, telegram_session, sample_file):
    sample_file.mimetype = "application/zip"
    file_repository.get_by_slug.return_value = sample_file
    telegram_session.download_file.return_value = zip_bytes("a.txt", "docs/b.md")

    response = await file_service.zip_list(claims, "AbCdEf12")

    assert response.files == ["a.txt", "docs/b.md"]


async def test_zip_list_rejects_other_types(file_service, claims, file_repository, telegram_session, sample_file):
    file_repository.get_by_slug.return_value = sample_file

    with pytest.raises(ValidationError, match="Not a ZIP file."):
        await file_service.zip_list(claims, "AbCdEf12")

    telegram_session.download_file.assert_not_awaited()


async def test_zip_list_corrupt_archive(file_service, claims, file_repository, telegram_session, sample_file):
    sample_file.mimetype = "application/x-zip-compressed"
    file_repository.get_by_slug.return_value = sample_file
    telegram_session.download_file.return_value = b"PK but not really"

    with pytest.raises(ValidationError, match="Not a valid ZIP archive."):
        await file_service.zip_list(claims, "AbCdEf12")


# --- flag ---

async def test_flag_by_file_id(file_service, abuse_flag_repository):
    file_id = ObjectId()

    response = await file_service.flag(FlagRequest(file_id=str(file_id), reason="Malware"), ip="198.51.100.1")

    assert response.success is True
    flag = abuse_flag_repository.create.await_args.args[0]
    assert isinstance(flag, AbuseFlagDocument)
    assert flag.file_id == file_id
    assert flag.reason == "Malware"
    assert flag.ip == "198.51.100.1"


async def test_flag_by_slug(file_service, file_repository, abuse_flag_repository, sample_file):
    file_repository.get_by_slug.return_value = sample_file

    await file_service.flag(FlagRequest(slug="AbCdEf12", reason="Spam"))

    assert abuse_flag_repository.create.await_args.args[0].file_id == sample_file.id


@pytest.mark.parametrize("request_fields", [
    {"reason": "Spam"},
    {"slug": "AbCdEf12"},
    {"file_id": str(ObjectId()), "reason": ""},
])
async def test_flag_missing_fields(file_service, request_fields, abuse_flag_repository):
    with pytest.raises(ValidationError, match="Missing file_id/slug or reason."):
        await file_service.flag(FlagRequest(**request_fields))

    abuse_flag_repository.create.assert_not_awaited()


async def test_flag_invalid_file_id(file_service):
    with pytest.raises(ValidationError, match="Invalid file_id."):
        await file_service.flag(FlagRequest(file_id="xyz", reason="Spam"))
