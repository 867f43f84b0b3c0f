# src/models/schemas/response_schemas.py
"""
Pydantic schemas for API responses.
Defines all response models used by the VoidBox API endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from src.models.base_model import BaseResponseModel
from src.models.mongo import FileDocument, UserDocument, UserFileDocument
from src.models.types import UTCDateTime


# ============================================================================
# AUTH RESPONSE SCHEMAS
# ============================================================================

class SendCodeResponse(BaseResponseModel):
    """Response schema for the first login step."""

    phone_code_hash: str = Field(..., alias="phoneCodeHash")
    timeout: int
    temp_token: str = Field(..., alias="tempToken")


class PasswordRequiredResponse(BaseResponseModel):
    """Returned when the account needs its two-step verification password."""

    requires_password: bool = Field(True, alias="requiresPassword")
    temp_token: str = Field(..., alias="tempToken")


class UserResponse(BaseResponseModel):
    """Public view of a user."""

    id: str
    telegram_id: int
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    photo_url: Optional[str] = None
    channel_id: Optional[int] = None
    created_at: UTCDateTime

    @classmethod
    def from_document(cls, user: UserDocument) -> "UserResponse":
        return cls(
            id=user.id,
            telegram_id=user.telegram_id,
            first_name=user.first_name,
            last_name=user.last_name,
            username=user.username,
            photo_url=user.photo_url,
            channel_id=user.channel_id,
            created_at=user.created_at,
        )


class LoginResponse(BaseResponseModel):
    """Response schema for a completed login."""

    token: str
    user: UserResponse


class MeResponse(BaseResponseModel):
    user: UserResponse


# ============================================================================
# FILE RESPONSE SCHEMAS
# ============================================================================

class FileInfo(BaseResponseModel):
    """File metadata returned after upload."""

    name: str
    size: int
    mimetype: str
    created_at: UTCDateTime
    download_count: int = 0
    expiry_at: Optional[UTCDateTime] = None

    @classmethod
    def from_document(cls, file: FileDocument) -> "FileInfo":
        return cls(**file.public_info())


class FileInfoResponse(FileInfo):
    """Public file metadata with the download link."""

    download_url: str

    @classmethod
    def from_document(cls, file: FileDocument) -> "FileInfoResponse":
        return cls(**file.public_info(), download_url=file.download_url)


class UploadResponse(BaseResponseModel):
    slug: str
    file: FileInfo


class ZipListResponse(BaseResponseModel):
    files: List[str] = Field(default_factory=list)


class SuccessResponse(BaseResponseModel):
    success: bool = True


# ============================================================================
# LIBRARY RESPONSE SCHEMAS
# ============================================================================

class UserFileResponse(BaseResponseModel):
    """Library entry."""

    id: str
    user_id: str
    name: str
    slug: str
    mimetype: str
    size: int
    notes: Optional[str] = None
    type: str
    created_at: UTCDateTime

    @classmethod
    def from_document(cls, entry: UserFileDocument) -> "UserFileResponse":
        return cls(
            id=entry.id_str or "",
            user_id=entry.user_id,
            name=entry.name,
            slug=entry.slug,
            mimetype=entry.mimetype,
            size=entry.size,
            notes=entry.notes,
            type=entry.type,
            created_at=entry.created_at,
        )


class UserFileListResponse(BaseResponseModel):
    files: List[UserFileResponse] = Field(default_factory=list)


# ============================================================================
# HEALTH RESPONSE SCHEMAS
# ============================================================================

class HealthResponse(BaseResponseModel):
    status: str
    service: str
    version: str
    timestamp: UTCDateTime
    details: Dict[str, Any] = Field(default_factory=dict)
