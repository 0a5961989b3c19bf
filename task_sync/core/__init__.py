"""
Core module for task-sync - contains domain models, configuration, and exceptions.
"""

from .models import (
    Task,
    Subtask,
    Group,
    Settings,
    Snapshot,
    MergeMode,
    UNSET,
    DEFAULT_PRIORITY,
    DEFAULT_SUBTASKS_TO_SHOW,
    UNGROUPED_FILTER_KEY,
)

from .exceptions import (
    TaskSyncError,
    ConfigurationError,
    SnapshotError,
    SnapshotValidationError,
    MergeError
)

__all__ = [
    # Models
    'Task',
    'Subtask',
    'Group',
    'Settings',
    'Snapshot',
    'MergeMode',
    'UNSET',
    # Defaults
    'DEFAULT_PRIORITY',
    'DEFAULT_SUBTASKS_TO_SHOW',
    'UNGROUPED_FILTER_KEY',
    # Exceptions
    'TaskSyncError',
    'ConfigurationError',
    'SnapshotError',
    'SnapshotValidationError',
    'MergeError'
]
