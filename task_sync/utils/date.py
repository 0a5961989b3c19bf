"""
Timestamp parsing and comparison utilities.

Snapshot timestamps are ISO 8601 strings as produced by the app
(``2024-01-31T09:30:00.000Z``) or plain dates (``2024-01-31``).
"""

from datetime import date, datetime, timezone
from typing import Optional


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or datetime string.

    Naive values are taken as UTC so that date-only and zoned values
    compare against each other.

    Args:
        value: Timestamp string to parse

    Returns:
        Timezone-aware datetime or None if missing or invalid
    """
    if not value:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def later_timestamp(first: Optional[str], second: Optional[str]) -> Optional[str]:
    """
    Return whichever of two timestamps is later.

    If only one is set, that one is returned. Ties go to ``second``.
    If either value cannot be parsed, ``second`` is returned.

    Args:
        first: First timestamp
        second: Second timestamp

    Returns:
        The later of the two original strings, or None if neither is set
    """
    if first and second:
        first_time = parse_timestamp(first)
        second_time = parse_timestamp(second)
        if first_time is not None and second_time is not None:
            return first if first_time > second_time else second
        return second
    return first or second or None
