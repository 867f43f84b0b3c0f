"""
Common type definitions and type aliases used across the application.
"""

from datetime import datetime
from typing import Annotated

from pydantic import PlainSerializer

from src.utils.date_utils import to_naive_utc

# ============================================================================
# TYPE ALIASES
# ============================================================================

UserId = str
Slug = str
TelegramId = int
ChannelId = int


def isoformat_utc(value: datetime) -> str:
    """Render a UTC datetime the way JavaScript's toISOString does."""
    return to_naive_utc(value).isoformat(timespec="milliseconds") + "Z"


# Naive UTC datetime rendered with a trailing "Z" in JSON responses
UTCDateTime = Annotated[
    datetime,
    PlainSerializer(isoformat_utc, return_type=str, when_used="json"),
]
