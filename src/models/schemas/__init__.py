# src/models/schemas/__init__.py
"""
Request and response schemas for the VoidBox API.
"""

from src.models.schemas.request_schemas import (
    SendCodeRequest,
    LoginRequest,
    FlagRequest,
)
from src.models.schemas.response_schemas import (
    SendCodeResponse,
    PasswordRequiredResponse,
    UserResponse,
    LoginResponse,
    MeResponse,
    FileInfo,
    FileInfoResponse,
    UploadResponse,
    ZipListResponse,
    SuccessResponse,
    UserFileResponse,
    UserFileListResponse,
    HealthResponse,
)

__all__ = [
    # Requests
    "SendCodeRequest",
    "LoginRequest",
    "FlagRequest",

    # Responses
    "SendCodeResponse",
    "PasswordRequiredResponse",
    "UserResponse",
    "LoginResponse",
    "MeResponse",
    "FileInfo",
    "FileInfoResponse",
    "UploadResponse",
    "ZipListResponse",
    "SuccessResponse",
    "UserFileResponse",
    "UserFileListResponse",
    "HealthResponse",
]
