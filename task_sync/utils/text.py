"""
Text normalization utilities.
"""

from typing import Any


def identity_key(value: Any) -> str:
    """
    Normalize a task title, subtask title or group name into a match key.

    Matching is case-insensitive and otherwise exact. ``None`` maps to the
    empty-string key and other non-string values are converted with
    ``str()``, so records without a usable title collapse into one key
    instead of raising.

    Args:
        value: Title or name to normalize

    Returns:
        Lower-cased identity key
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.lower()
