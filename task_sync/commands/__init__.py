"""
Command implementations for task-sync.
"""

from .merge import MergeCommand
from .suggest import SuggestCommand
from .validate import ValidateCommand

__all__ = [
    'MergeCommand',
    'SuggestCommand',
    'ValidateCommand',
]
