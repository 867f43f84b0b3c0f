"""
ID generation utilities for VoidBox.

Public slugs for uploaded files, storage file names for the Telegram
channel, and request identifiers.
"""

import base64
import os
import secrets
import uuid

from src.config.constants import SLUG_BYTES, STORAGE_NAME_BYTES


class IDGenerator:
    """
    ID generation utilities.

    All identifiers come from the ``secrets`` module so they are not
    guessable from previously issued ones.
    """

    @staticmethod
    def generate_uuid() -> str:
        """
        Generate a standard UUID4.

        Returns:
            UUID4 string
        """
        return str(uuid.uuid4())

    @staticmethod
    def generate_slug(num_bytes: int = SLUG_BYTES) -> str:
        """
        Generate a public file slug.

        Random bytes encoded as URL-safe base64 without padding, so the
        default 6 bytes give an 8 character slug.

        Args:
            num_bytes: Amount of randomness in bytes

        Returns:
            URL-safe slug
        """
        raw = secrets.token_bytes(num_bytes)
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    @staticmethod
    def generate_storage_name(original_name: str, num_bytes: int = STORAGE_NAME_BYTES) -> str:
        """
        Generate the file name used inside the storage channel.

        The original name never leaves the database; only its extension
        is kept so the channel still shows a sensible file type.

        Args:
            original_name: Name of the uploaded file
            num_bytes: Amount of randomness in bytes

        Returns:
            Random hex name with the original extension
        """
        _, ext = os.path.splitext(original_name or "")
        return f"{secrets.token_hex(num_bytes)}{ext}"


# Convenience functions
def generate_slug() -> str:
    """Generate a public file slug."""
    return IDGenerator.generate_slug()


def generate_storage_name(original_name: str) -> str:
    """Generate a random storage file name keeping the extension."""
    return IDGenerator.generate_storage_name(original_name)


def generate_request_id() -> str:
    """Generate a request ID."""
    return IDGenerator.generate_uuid()
