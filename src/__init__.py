"""
VoidBox - Personal file vault backed by Telegram channel storage.

This package provides the API server for the VoidBox single-page application:
phone-number login against Telegram, an upload/download relay to a per-user
private channel, and file metadata bookkeeping in MongoDB.
"""

__version__ = "1.0.0"
__author__ = "VoidBox Team"
__description__ = "Personal file vault API backed by Telegram channel storage"

# Package metadata
__title__ = "voidbox"
__license__ = "MIT"

# Semantic version components
VERSION_INFO = (1, 0, 0)

# Service identification
SERVICE_NAME = "voidbox-api"
API_PREFIX = "/api"

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "VERSION_INFO",
    "SERVICE_NAME",
    "API_PREFIX",
]
