"""Set reconciliation of task, group and subtask collections.

Records are matched across the two sides by a case-insensitive identity key
(task title, subtask title, group name) rather than by id. When one side
holds two records with the same key, the later one in list order wins.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, TypeVar, Union

from ..core.models import Group, MergeMode, Subtask, Task
from ..utils.text import identity_key
from .resolver import FieldResolver

T = TypeVar('T')


@dataclass
class ReconcileStats:
    """Counts of what happened to one collection during a merge."""
    kept_local: int = 0
    kept_incoming: int = 0
    merged: int = 0
    dropped: int = 0

    @property
    def total(self) -> int:
        return self.kept_local + self.kept_incoming + self.merged

    def add(self, other: 'ReconcileStats') -> None:
        self.kept_local += other.kept_local
        self.kept_incoming += other.kept_incoming
        self.merged += other.merged
        self.dropped += other.dropped

    def to_dict(self) -> Dict[str, int]:
        return {
            "kept_local": self.kept_local,
            "kept_incoming": self.kept_incoming,
            "merged": self.merged,
            "dropped": self.dropped,
        }


def index_by_key(records: Iterable[T], key_func: Callable[[T], str]) -> Dict[str, T]:
    """Map identity key to record; a later duplicate overwrites an earlier one."""
    index: Dict[str, T] = {}
    for record in records:
        index[key_func(record)] = record
    return index


def reconcile(local: Iterable[T],
              incoming: Iterable[T],
              key_func: Callable[[T], str],
              merge_pair: Callable[[T, T], T],
              drop_local_only: bool,
              stats: Optional[ReconcileStats] = None,
              logger: Optional[logging.Logger] = None,
              kind: str = "record") -> List[T]:
    """
    Reconcile two collections of keyed records.

    Keys are visited in order of first appearance, local keys first.

    Args:
        local: Records from this device
        incoming: Records from the other device
        key_func: Returns the identity key of a record
        merge_pair: Combines a (local, incoming) pair sharing a key
        drop_local_only: Treat a record missing from incoming as deleted
        stats: Optional counters to update
        logger: Logger for per-record decisions
        kind: Record type name used in log messages

    Returns:
        New list of reconciled records
    """
    logger = logger or logging.getLogger(__name__)
    if stats is None:
        stats = ReconcileStats()

    local_by_key = index_by_key(local, key_func)
    incoming_by_key = index_by_key(incoming, key_func)

    # dict preserves insertion order, local keys first
    all_keys = dict.fromkeys(list(local_by_key) + list(incoming_by_key))

    merged: List[T] = []
    for key in all_keys:
        local_record = local_by_key.get(key)
        incoming_record = incoming_by_key.get(key)

        if incoming_record is None:
            if drop_local_only:
                logger.debug(f"Dropping {kind} '{key}': missing from incoming")
                stats.dropped += 1
                continue
            logger.debug(f"Keeping local-only {kind} '{key}'")
            merged.append(copy.deepcopy(local_record))
            stats.kept_local += 1
            continue

        if local_record is None:
            merged.append(copy.deepcopy(incoming_record))
            stats.kept_incoming += 1
            continue

        merged.append(merge_pair(local_record, incoming_record))
        stats.merged += 1

    return merged


class CollectionReconciler:
    """Reconciles the group, task and subtask collections of two snapshots."""

    def __init__(self, resolver: Optional[FieldResolver] = None,
                 logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.resolver = resolver or FieldResolver(logger=self.logger)
        self.stats: Dict[str, ReconcileStats] = {
            "groups": ReconcileStats(),
            "tasks": ReconcileStats(),
            "subtasks": ReconcileStats(),
        }

    def merge_groups(self, local: List[Group], incoming: List[Group],
                     mode: Union[MergeMode, str] = MergeMode.SYNC) -> List[Group]:
        """Merge groups by name; incoming wins for groups on both sides."""
        mode = MergeMode.parse(mode)
        return reconcile(
            local,
            incoming,
            key_func=lambda group: identity_key(group.name),
            merge_pair=self.resolver.merge_group,
            drop_local_only=mode is MergeMode.CONFLICT,
            stats=self.stats["groups"],
            logger=self.logger,
            kind="group",
        )

    def merge_tasks(self, local: List[Task], incoming: List[Task],
                    mode: Union[MergeMode, str] = MergeMode.SYNC) -> List[Task]:
        """Merge tasks by title; tasks on both sides are merged field by field."""
        mode = MergeMode.parse(mode)
        return reconcile(
            local,
            incoming,
            key_func=lambda task: identity_key(task.title),
            merge_pair=self._merge_task_pair,
            drop_local_only=mode is MergeMode.CONFLICT,
            stats=self.stats["tasks"],
            logger=self.logger,
            kind="task",
        )

    def merge_subtasks(self, local: List[Subtask], incoming: List[Subtask]) -> List[Subtask]:
        """Merge subtasks by title.

        There is no mode: a subtask missing from incoming is always dropped.
        """
        return reconcile(
            local,
            incoming,
            key_func=lambda subtask: identity_key(subtask.title),
            merge_pair=self.resolver.merge_subtask,
            drop_local_only=True,
            stats=self.stats["subtasks"],
            logger=self.logger,
            kind="subtask",
        )

    def _merge_task_pair(self, local: Task, incoming: Task) -> Task:
        subtasks = self.merge_subtasks(local.subtasks or [], incoming.subtasks or [])
        return self.resolver.merge_task(local, incoming, subtasks=subtasks)


def merge_groups(local: List[Group], incoming: List[Group],
                 mode: Union[MergeMode, str] = MergeMode.SYNC) -> List[Group]:
    return CollectionReconciler().merge_groups(local, incoming, mode)


def merge_tasks(local: List[Task], incoming: List[Task],
                mode: Union[MergeMode, str] = MergeMode.SYNC) -> List[Task]:
    return CollectionReconciler().merge_tasks(local, incoming, mode)


def merge_subtasks(local: List[Subtask], incoming: List[Subtask]) -> List[Subtask]:
    return CollectionReconciler().merge_subtasks(local, incoming)
