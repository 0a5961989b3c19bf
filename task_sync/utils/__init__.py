"""
Utility functions for task-sync.
"""

from .io import safe_read_json, safe_write_json, locked_json_update, file_lock
from .date import now_iso, parse_timestamp, later_timestamp
from .text import identity_key

__all__ = [
    # I/O utilities
    'safe_read_json',
    'safe_write_json',
    'locked_json_update',
    'file_lock',
    # Date utilities
    'now_iso',
    'parse_timestamp',
    'later_timestamp',
    # Text utilities
    'identity_key',
]
