"""
Configuration package for VoidBox.

This package provides centralized configuration management with
environment-based settings, validation, and constants.
"""

from src.config.settings import get_settings, reload_settings, Settings
from src.config.constants import (
    SERVICE_NAME,
    SERVICE_VERSION,
    API_PREFIX,
    HEALTH_CHECK_INTERVAL,
    TokenType,
    UserFileType,
    RateLimitScope,
)

__all__ = [
    "get_settings",
    "reload_settings",
    "Settings",
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "API_PREFIX",
    "HEALTH_CHECK_INTERVAL",
    "TokenType",
    "UserFileType",
    "RateLimitScope",
]
