"""
Application constants and enumerations.

This module defines all constant values, enumerations, and
configuration defaults used throughout VoidBox.
"""

from enum import Enum

# Service Information
SERVICE_NAME = "voidbox-api"
SERVICE_VERSION = "1.0.0"
SERVICE_DESCRIPTION = "Personal file vault API backed by Telegram channel storage"

# API Configuration
API_PREFIX = "/api"
DOWNLOAD_PATH = f"{API_PREFIX}/download"

# Health Check Configuration
HEALTH_CHECK_INTERVAL = 30  # seconds

# Identifier sizes
SLUG_BYTES = 6              # 8 url-safe base64 characters
STORAGE_NAME_BYTES = 16     # 32 hex characters

# Telegram
DEFAULT_CODE_TIMEOUT = 60   # seconds, when the API does not report one
USER_ID_PREFIX = "tg_"
USERPIC_URL_TEMPLATE = "https://t.me/i/userpic/320/{handle}.jpg"

# MIME types
DEFAULT_MIMETYPE = "application/octet-stream"
INLINE_MIMETYPES = {"application/pdf"}
ZIP_MIMETYPES = {"application/zip", "application/x-zip-compressed"}

# Collection names
FILES_COLLECTION = "files"
USERS_COLLECTION = "users"
USER_FILES_COLLECTION = "user_files"
ABUSE_FLAGS_COLLECTION = "abuse_flags"

# Paths excluded from request logging and rate limiting
UNTRACKED_PATHS = {"/health", "/health/detailed", "/metrics"}


class TokenType(str, Enum):
    """Kinds of signed tokens issued by the auth flow."""
    PENDING = "pending"
    SESSION = "session"


class UserFileType(str, Enum):
    """Kinds of entries in a user's library."""
    FILE = "file"
    NOTE = "note"


class RateLimitScope(str, Enum):
    """Rate limit buckets."""
    GLOBAL = "global"
    API = "api"


# Error Categories
class ErrorCategory(str, Enum):
    """Error categorization for monitoring."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    GONE = "gone"
    RATE_LIMIT = "rate_limit"
    INTERNAL = "internal"
    EXTERNAL = "external"
    TIMEOUT = "timeout"

