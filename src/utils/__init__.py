"""
Utilities package for VoidBox.

This package provides common utility functions and helpers
used throughout the VoidBox application.
"""

from src.utils.logger import setup_logging, get_logger
from src.utils.dependencies import (
    get_request_id,
    get_client_ip,
    get_bearer_token,
)
from src.utils.id_generator import generate_slug, generate_storage_name

# Re-export commonly used utilities
__all__ = [
    # Logging utilities
    "setup_logging",
    "get_logger",

    # Request helpers
    "get_request_id",
    "get_client_ip",
    "get_bearer_token",

    # Identifiers
    "generate_slug",
    "generate_storage_name",
]
