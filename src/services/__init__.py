"""
Services Package

This package contains the service layer of VoidBox. Services orchestrate
business logic and coordinate between repositories and the Telegram
layer, and provide the main interface for API layer operations.

Service Architecture:
- BaseService: Common logging and Telegram error translation
- TokenService: Pending-login and session tokens
- AuthService: OTP / 2FA login flow
- FileService: Upload/download relay and file metadata
- LibraryService: Per-user library ("my drops")
- CleanupService: Expired file removal
"""

from .base_service import BaseService
from .exceptions import ServiceError, TokenError
from .token_service import TokenService, PendingLogin, SessionClaims
from .auth_service import AuthService
from .file_service import FileService, UploadedFile, UploadOptions, resolve_expiry
from .library_service import LibraryService
from .cleanup_service import CleanupService

__all__ = [
    "BaseService",
    "ServiceError",
    "TokenError",
    "TokenService",
    "PendingLogin",
    "SessionClaims",
    "AuthService",
    "FileService",
    "UploadedFile",
    "UploadOptions",
    "resolve_expiry",
    "LibraryService",
    "CleanupService",
]
