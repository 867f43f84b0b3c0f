"""
Formatting helpers for HTTP responses.
"""

import os
import re

from src.config.constants import INLINE_MIMETYPES

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_\-.]")


def safe_filename(name: str) -> str:
    """
    Reduce a file name to a header-safe form.

    Directory components are dropped and every character outside
    ``[A-Za-z0-9_.-]`` becomes an underscore.
    """
    base = os.path.basename((name or "").replace("\\", "/"))
    return _UNSAFE_FILENAME_CHARS.sub("_", base) or "file"


def content_disposition(name: str, mimetype: str) -> str:
    """Build a Content-Disposition header; PDFs open inline, the rest download."""
    disposition = "inline" if mimetype in INLINE_MIMETYPES else "attachment"
    return f'{disposition}; filename="{safe_filename(name)}"'
