"""
Domain models for task-sync.

This module contains the snapshot data structures exchanged between devices
and consumed by the merge engine. Records serialize to the camelCase JSON
layout used by snapshot files; keys this module does not know about are
kept in ``extra`` so they survive a load/merge/save cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .exceptions import MergeError


# Defaults shared by the merge rules and task creation
DEFAULT_PRIORITY = 3
DEFAULT_SUBTASKS_TO_SHOW = 2
UNGROUPED_FILTER_KEY = "ungrouped"


class _Unset:
    """Marker for a field that is absent from the source record.

    Distinct from ``None``, which is an explicit JSON ``null``.
    """

    _instance: Optional[_Unset] = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> _Unset:
        return self


UNSET: Any = _Unset()


def is_set(value: Any) -> bool:
    """Return True when ``value`` was present in the source record."""
    return value is not UNSET


class MergeMode(Enum):
    """Deletion semantics for task and group reconciliation."""

    # No shared ancestor: a record missing on one side has not propagated yet
    SYNC = "sync"
    # Shared ancestor: a record missing on one side was deleted there
    CONFLICT = "conflict"

    @classmethod
    def parse(cls, value: Union[MergeMode, str, None]) -> MergeMode:
        """Accept a MergeMode, its string value, or None (meaning SYNC)."""
        if value is None:
            return cls.SYNC
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise MergeError(f"Unknown merge mode '{value}' (expected one of: {choices})")


def _split_extra(data: Dict[str, Any], known: frozenset) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


@dataclass
class Subtask:
    """A checklist item inside a task."""

    title: str
    completed: bool = False
    id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset({"id", "title", "completed"})

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        if self.id is not None:
            data["id"] = self.id
        data["title"] = self.title
        data["completed"] = self.completed
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Subtask:
        return cls(
            title=data.get("title", ""),
            completed=bool(data.get("completed", False)),
            id=data.get("id"),
            extra=_split_extra(data, cls._KEYS),
        )


@dataclass
class Group:
    """A named, colored collection of tasks."""

    name: str
    color: Optional[str] = None
    id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset({"id", "name", "color"})

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        if self.id is not None:
            data["id"] = self.id
        data["name"] = self.name
        data["color"] = self.color
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Group:
        return cls(
            name=data.get("name", ""),
            color=data.get("color"),
            id=data.get("id"),
            extra=_split_extra(data, cls._KEYS),
        )


@dataclass
class Task:
    """A to-do item.

    ``description``, ``group_id`` and ``previous_group_id`` default to
    ``UNSET`` rather than ``None``: the merge rules treat an explicit
    ``None`` from the other device as a value to adopt, while an absent
    field leaves the local value in place.
    """

    title: str
    id: Optional[str] = None
    description: Any = UNSET
    group_id: Any = UNSET
    subtasks: List[Subtask] = field(default_factory=list)
    due_date: Optional[str] = None
    priority: int = DEFAULT_PRIORITY
    completed: bool = False
    completed_at: Optional[str] = None
    previous_group_id: Any = UNSET
    worked_on_dates: List[str] = field(default_factory=list)
    subtasks_to_show: Optional[int] = None
    created_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset({
        "id", "title", "description", "groupId", "subtasks", "dueDate",
        "priority", "completed", "completedAt", "previousGroupId",
        "workedOnDates", "subtasksToShow", "createdAt",
    })

    @property
    def is_grouped(self) -> bool:
        return bool(self.group_id)

    def incomplete_subtasks(self, limit: Optional[int] = None) -> List[Subtask]:
        """Open subtasks in order, optionally capped at ``limit``."""
        incomplete = [subtask for subtask in self.subtasks if not subtask.completed]
        return incomplete[:limit] if limit else incomplete

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        if self.id is not None:
            data["id"] = self.id
        data["title"] = self.title
        if is_set(self.description):
            data["description"] = self.description
        if is_set(self.group_id):
            data["groupId"] = self.group_id
        data["subtasks"] = [subtask.to_dict() for subtask in self.subtasks]
        data["subtasksToShow"] = self.subtasks_to_show
        data["dueDate"] = self.due_date
        data["priority"] = self.priority
        data["completed"] = self.completed
        data["completedAt"] = self.completed_at
        if is_set(self.previous_group_id):
            data["previousGroupId"] = self.previous_group_id
        data["workedOnDates"] = list(self.worked_on_dates)
        data["createdAt"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Task:
        priority = data.get("priority")
        return cls(
            title=data.get("title", ""),
            id=data.get("id"),
            description=data.get("description", UNSET),
            group_id=data.get("groupId", UNSET),
            subtasks=[Subtask.from_dict(entry) for entry in data.get("subtasks") or []],
            due_date=data.get("dueDate"),
            priority=DEFAULT_PRIORITY if priority is None else priority,
            completed=bool(data.get("completed", False)),
            completed_at=data.get("completedAt"),
            previous_group_id=data.get("previousGroupId", UNSET),
            worked_on_dates=list(data.get("workedOnDates") or []),
            subtasks_to_show=data.get("subtasksToShow"),
            created_at=data.get("createdAt"),
            extra=_split_extra(data, cls._KEYS),
        )


@dataclass
class Settings:
    """Per-device settings carried inside a snapshot."""

    current_task_id: Optional[str] = None
    suggestion_group_filter: Optional[List[str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KEYS = frozenset({"currentTaskId", "suggestionGroupFilter"})

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data["currentTaskId"] = self.current_task_id
        data["suggestionGroupFilter"] = (
            list(self.suggestion_group_filter)
            if self.suggestion_group_filter is not None
            else None
        )
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Settings:
        data = data or {}
        group_filter = data.get("suggestionGroupFilter")
        return cls(
            current_task_id=data.get("currentTaskId"),
            suggestion_group_filter=list(group_filter) if group_filter is not None else None,
            extra=_split_extra(data, cls._KEYS),
        )


@dataclass
class Snapshot:
    """A full ``{tasks, groups, settings}`` dataset from one device."""

    tasks: List[Task] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)

    def task_by_id(self, task_id: Optional[str]) -> Optional[Task]:
        if not task_id:
            return None
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def group_by_id(self, group_id: Optional[str]) -> Optional[Group]:
        if not group_id:
            return None
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def current_task(self) -> Optional[Task]:
        """The task the user is currently working on, if it still exists."""
        return self.task_by_id(self.settings.current_task_id)

    def active_tasks(self) -> List[Task]:
        return [task for task in self.tasks if not task.completed]

    def archived_tasks(self) -> List[Task]:
        return [task for task in self.tasks if task.completed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tasks": [task.to_dict() for task in self.tasks],
            "groups": [group.to_dict() for group in self.groups],
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Snapshot:
        """Build a snapshot; absent data or collections become empty."""
        data = data or {}
        return cls(
            tasks=[Task.from_dict(entry) for entry in data.get("tasks") or []],
            groups=[Group.from_dict(entry) for entry in data.get("groups") or []],
            settings=Settings.from_dict(data.get("settings")),
        )
