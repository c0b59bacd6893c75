"""
DateTime utilities for consistent timezone handling.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get the current UTC time with timezone awareness.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def format_iso8601(dt: datetime) -> str:
    """Format a datetime as ISO 8601 with millisecond precision and a ``Z`` suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
