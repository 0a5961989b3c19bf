"""
Exception classes for task-sync.
"""


class TaskSyncError(Exception):
    """Base exception for all task-sync errors."""
    pass


class ConfigurationError(TaskSyncError):
    """Raised when configuration is invalid or missing."""
    pass


class SnapshotError(TaskSyncError):
    """Raised when a snapshot file cannot be read or written."""
    pass


class SnapshotValidationError(SnapshotError):
    """Raised when snapshot data does not have the expected structure."""
    pass


class MergeError(TaskSyncError):
    """Raised when a merge is requested with invalid parameters."""
    pass
