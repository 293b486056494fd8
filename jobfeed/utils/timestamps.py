"""Timestamp utilities for UTC handling and feed date parsing.

Feeds publish dates in several shapes: ISO 8601 from JSON-ish APIs, plain
``YYYY-MM-DD`` dates, and RFC 822 dates in RSS ``pubDate`` elements. All
parsing helpers here return timezone-aware UTC datetimes or None.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware datetimes are converted.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a feed-supplied date string to a UTC datetime.

    Supported formats, tried in order:
    - ISO 8601 (``2025-11-04T12:00:00Z``, ``2025-11-04T12:00:00+02:00``)
    - Date only (``2025-11-04``)
    - RFC 822 as used by RSS (``Tue, 04 Nov 2025 12:00:00 GMT``)

    Args:
        value: Date string from a feed

    Returns:
        Timezone-aware datetime in UTC, or None if the value is empty or unparseable

    Example:
        >>> parse_datetime("Tue, 04 Nov 2025 12:00:00 GMT").day
        4
    """
    if not value or not value.strip():
        return None

    cleaned = value.strip()

    iso_candidate = cleaned[:-1] + "+00:00" if cleaned.endswith("Z") else cleaned
    try:
        return ensure_utc(datetime.fromisoformat(iso_candidate))
    except ValueError:
        pass

    try:
        return ensure_utc(datetime.strptime(cleaned, "%Y-%m-%d"))
    except ValueError:
        pass

    try:
        return ensure_utc(parsedate_to_datetime(cleaned))
    except (TypeError, ValueError, IndexError):
        return None


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as an ISO 8601 UTC string with microseconds and 'Z' suffix.

    This is the storage format used by the persistence layer.
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp previously written by format_timestamp()."""
    if not value:
        return None

    stripped = value.rstrip("Z")
    try:
        dt = datetime.strptime(stripped, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(stripped, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)
