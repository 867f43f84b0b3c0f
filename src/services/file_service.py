"""
File Service

Moves file bytes between the browser and the user's storage channel and
keeps the metadata documents in step with the channel messages.
"""

import io
import math
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Optional, Tuple

from src.config.constants import DEFAULT_MIMETYPE, ZIP_MIMETYPES, UserFileType
from src.config.settings import get_settings
from src.core.exceptions import TelegramError
from src.core.telegram import TelegramGateway
from src.exceptions import (
    ValidationError,
    AuthenticationError,
    NotFoundError,
    GoneError,
    PayloadTooLargeError,
    InternalServerError,
)
from src.models.mongo import FileDocument, UserFileDocument, AbuseFlagDocument
from src.models.schemas import (
    FileInfo,
    FileInfoResponse,
    UploadResponse,
    ZipListResponse,
    FlagRequest,
    SuccessResponse,
)
from src.repositories import FileRepository, UserFileRepository, AbuseFlagRepository
from src.services.base_service import BaseService
from src.services.token_service import SessionClaims
from src.utils.date_utils import utc_now, parse_datetime, days_from_now
from src.utils.id_generator import generate_slug, generate_storage_name
from src.utils.metrics import metrics


@dataclass
class UploadedFile:
    """
    File received from a multipart form

    The content is read only after the upload passed validation, so a
    rejected file is never loaded into memory.
    """
    filename: str
    content_type: Optional[str]
    size: Optional[int]
    reader: Callable[[], Awaitable[bytes]] = field(repr=False, compare=False)

    @classmethod
    def from_bytes(cls, filename: str, content_type: Optional[str], data: bytes) -> "UploadedFile":
        async def read() -> bytes:
            return data

        return cls(filename=filename, content_type=content_type, size=len(data), reader=read)

    async def read(self) -> bytes:
        return await self.reader()


@dataclass
class UploadOptions:
    """Optional form fields sent with an upload"""
    expiry_at: Optional[str] = None
    expiry_days: Optional[str] = None
    is_note: Optional[str] = None
    notes: Optional[str] = None


def resolve_expiry(
        expiry_at: Optional[str],
        expiry_days: Optional[str],
        now: Optional[datetime] = None
) -> Optional[datetime]:
    """
    Work out the expiry date of an upload

    A valid ``expiry_at`` date wins over ``expiry_days``; anything that
    does not parse leaves the file without expiry.
    """
    parsed = parse_datetime(expiry_at) if expiry_at else None
    if parsed is not None:
        return parsed

    if expiry_days is None or not str(expiry_days).strip():
        return None
    try:
        days = float(expiry_days)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(days):
        return None

    try:
        return days_from_now(days, now)
    except OverflowError:
        return None


class FileService(BaseService):
    """Service for uploads, downloads and file metadata"""

    def __init__(
            self,
            gateway: TelegramGateway,
            file_repository: FileRepository,
            user_file_repository: UserFileRepository,
            abuse_flag_repository: AbuseFlagRepository,
            max_upload_bytes: Optional[int] = None
    ):
        super().__init__()
        self.gateway = gateway
        self.files = file_repository
        self.user_files = user_file_repository
        self.abuse_flags = abuse_flag_repository
        self.max_upload_bytes = max_upload_bytes or get_settings().max_upload_size_bytes

    async def upload(
            self,
            claims: Optional[SessionClaims],
            upload: Optional[UploadedFile],
            options: UploadOptions,
            uploader_ip: str = ""
    ) -> UploadResponse:
        """
        Store an uploaded file in the caller's channel

        Args:
            claims: Session of the caller
            upload: File from the form, None when missing
            options: Expiry and library fields
            uploader_ip: Client IP recorded with the file

        Returns:
            Slug and metadata of the stored file
        """
        if claims is None:
            raise AuthenticationError()
        if claims.channel_id is None:
            raise ValidationError("No VoidBox Drive channel. Please re-login.", error_code="NO_CHANNEL")
        if upload is None or not upload.filename:
            raise ValidationError("No file uploaded.", field="file")
        # Declared size first, the content is only read once it fits
        if upload.size is not None:
            self._check_size(upload.size)
        data = await upload.read()
        size = len(data)
        self._check_size(size)

        mimetype = upload.content_type or DEFAULT_MIMETYPE
        slug = generate_slug()
        storage_name = generate_storage_name(upload.filename)

        try:
            async with self.gateway.session(claims.session) as session:
                stored = await session.send_file(claims.channel_id, data, storage_name, mimetype)
        except TelegramError as e:
            raise self.telegram_http_error(
                e, "upload", fallback_message=f"Failed to upload file: {e.message or 'Unknown error'}"
            ) from e

        if not stored.file_id:
            raise InternalServerError("Upload did not return a file_id.", error_code="MISSING_FILE_ID")

        now = utc_now()
        file = await self.files.create(FileDocument(
            name=upload.filename,
            size=size,
            mimetype=mimetype,
            slug=slug,
            uploader_ip=uploader_ip,
            telegram_file_id=stored.file_id,
            telegram_message_id=stored.message_id,
            expiry_at=resolve_expiry(options.expiry_at, options.expiry_days, now),
            created_at=now,
        ))

        entry_type = UserFileType.NOTE if options.is_note == "true" else UserFileType.FILE
        await self.user_files.create(UserFileDocument(
            user_id=claims.user_id,
            name=upload.filename,
            slug=slug,
            mimetype=mimetype,
            size=size,
            notes=options.notes or None,
            type=entry_type,
            created_at=now,
        ))

        metrics.record_upload(entry_type.value, size)
        self.log_operation("upload", user_id=claims.user_id, slug=slug, size=size, type=entry_type.value)

        return UploadResponse(slug=slug, file=FileInfo.from_document(file))

    async def get_info(self, slug: str) -> FileInfoResponse:
        """Public metadata of a file"""
        file = await self._get_file(slug)
        return FileInfoResponse.from_document(file)

    async def download(self, claims: Optional[SessionClaims], slug: str) -> Tuple[FileDocument, bytes]:
        """
        Fetch the bytes of a file from the caller's channel

        Returns:
            The file document and its content

        Raises:
            GoneError: If the file has expired
        """
        if claims is None or not claims.session or claims.channel_id is None:
            raise AuthenticationError("Authentication required for downloads")

        file = await self._get_file(slug)
        if file.is_expired():
            metrics.record_download("expired")
            raise GoneError("File expired.", error_code="FILE_EXPIRED")

        await self.files.increment_download_count(file.id)

        data = await self._fetch_bytes(claims, file, "download", "Failed to download file.")
        metrics.record_download("success")
        return file, data

    async def note_content(self, claims: Optional[SessionClaims], slug: str) -> str:
        """Text content of a note"""
        self._require_channel(claims)
        file = await self._get_file(slug)
        data = await self._fetch_bytes(claims, file, "note_content", "Failed to fetch note content.")
        return data.decode("utf-8", errors="replace")

    async def zip_list(self, claims: Optional[SessionClaims], slug: str) -> ZipListResponse:
        """Entry names of a ZIP archive"""
        self._require_channel(claims)
        file = await self._get_file(slug)
        if file.mimetype not in ZIP_MIMETYPES:
            raise ValidationError("Not a ZIP file.", error_code="NOT_A_ZIP")

        data = await self._fetch_bytes(claims, file, "zip_list", "Failed to extract ZIP file list.")
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                names = archive.namelist()
        except zipfile.BadZipFile as e:
            self.logger.warning("Unreadable ZIP archive", slug=slug, error=str(e))
            raise ValidationError("Not a valid ZIP archive.", error_code="BAD_ZIP") from e

        return ZipListResponse(files=names)

    async def flag(self, request: FlagRequest, ip: str = "") -> SuccessResponse:
        """
        Record an abuse report against a file

        Args:
            request: File id or slug and the reason
            ip: Reporter IP
        """
        if not request.reason or (not request.file_id and not request.slug):
            raise ValidationError("Missing file_id/slug or reason.")

        if request.file_id:
            file_id = self.files.to_object_id(request.file_id)
            if file_id is None:
                raise ValidationError("Invalid file_id.", field="file_id")
        else:
            file = await self._get_file(request.slug)
            file_id = file.id

        await self.abuse_flags.create(AbuseFlagDocument(
            file_id=file_id,
            reason=request.reason,
            ip=ip,
        ))
        self.log_operation("flag", file_id=str(file_id))
        return SuccessResponse()

    def _check_size(self, size: int) -> None:
        if size > self.max_upload_bytes:
            raise PayloadTooLargeError("File too large", max_bytes=self.max_upload_bytes)

    @staticmethod
    def _require_channel(claims: Optional[SessionClaims]) -> None:
        if claims is None or not claims.session or claims.channel_id is None:
            raise AuthenticationError()

    async def _get_file(self, slug: str) -> FileDocument:
        file = await self.files.get_by_slug(slug)
        if file is None:
            raise NotFoundError("File not found.", resource_type="file", resource_id=slug)
        return file

    async def _fetch_bytes(
            self,
            claims: SessionClaims,
            file: FileDocument,
            operation: str,
            failure_message: str
    ) -> bytes:
        try:
            message_id = file.message_id
        except ValueError as e:
            raise InternalServerError(failure_message, error_code="BAD_MESSAGE_ID") from e

        try:
            async with self.gateway.session(claims.session) as session:
                return await session.download_file(claims.channel_id, message_id)
        except TelegramError as e:
            if operation == "download":
                metrics.record_download("failure")
            raise self.telegram_http_error(e, operation, fallback_message=failure_message) from e
