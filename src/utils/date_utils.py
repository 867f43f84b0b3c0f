"""
Date and time utilities for VoidBox.

MongoDB hands back naive datetimes in UTC, so the service keeps every
datetime naive UTC and normalizes user input to match.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

# ISO 8601 reduced precision dates: "2026" or "2026-05"
YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})(?:-(\d{2}))?$")


def utc_now() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a user supplied date.

    Accepts ISO 8601 strings (with or without ``Z``), date-only strings,
    bare years or year-months, and epoch milliseconds.

    Args:
        value: Raw value from a form field

    Returns:
        Naive UTC datetime, or None when the value is not a valid date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)

    text = str(value).strip()
    if not text:
        return None

    match = YEAR_MONTH_PATTERN.match(text)
    if match:
        try:
            return datetime(int(match.group(1)), int(match.group(2) or 1), 1)
        except ValueError:
            return None

    if text.lstrip("-").isdigit():
        try:
            return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def days_from_now(days: float, now: Optional[datetime] = None) -> datetime:
    """Return ``now`` shifted by a (possibly fractional) number of days."""
    return (now or utc_now()) + timedelta(days=days)
