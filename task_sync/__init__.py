"""
task-sync - field-level reconciliation of task snapshots from two devices.
"""

from .core.models import MergeMode, Snapshot, Task, Subtask, Group, Settings
from .sync.engine import MergeEngine, MergeResult, merge_snapshots, merge_data

__version__ = "1.0.0"

__all__ = [
    'MergeMode',
    'Snapshot',
    'Task',
    'Subtask',
    'Group',
    'Settings',
    'MergeEngine',
    'MergeResult',
    'merge_snapshots',
    'merge_data',
]
