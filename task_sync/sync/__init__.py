"""Sync module for reconciling snapshots from two devices."""

from .engine import MergeEngine, MergeResult, merge_snapshots, merge_data, merge_settings
from .reconciler import (
    CollectionReconciler,
    ReconcileStats,
    merge_groups,
    merge_tasks,
    merge_subtasks,
)
from .resolver import FieldResolver

__all__ = [
    'MergeEngine',
    'MergeResult',
    'merge_snapshots',
    'merge_data',
    'merge_settings',
    'CollectionReconciler',
    'ReconcileStats',
    'merge_groups',
    'merge_tasks',
    'merge_subtasks',
    'FieldResolver',
]
