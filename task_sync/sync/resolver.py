"""Field-level conflict resolution for records present on both devices."""

import copy
import dataclasses
import logging
from typing import List, Optional

from ..core.models import (
    DEFAULT_PRIORITY,
    Group,
    Settings,
    Subtask,
    Task,
    is_set,
)
from ..utils.date import later_timestamp


class FieldResolver:
    """Resolves field-level conflicts between two versions of one record.

    The local record is the base; each rule below overrides one field.
    None of the rules look at modification times: snapshots carry none, so
    every decision is made from the two values alone.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def merge_task(self, local: Task, incoming: Task,
                   subtasks: Optional[List[Subtask]] = None) -> Task:
        """
        Merge two versions of the same task.

        Args:
            local: Task from this device (id and createdAt are kept)
            incoming: Task from the other device
            subtasks: Already reconciled subtasks; copied from local if omitted

        Returns:
            A new Task; neither input is modified
        """
        # Completion is sticky on either side
        completed = local.completed or incoming.completed
        completed_at = (local.completed_at or incoming.completed_at) if completed else None

        priority = max(local.priority or DEFAULT_PRIORITY,
                       incoming.priority or DEFAULT_PRIORITY)

        due_date = later_timestamp(local.due_date, incoming.due_date)

        worked_on_dates = sorted(set(local.worked_on_dates) | set(incoming.worked_on_dates))

        self._log_differences(local, incoming)

        return dataclasses.replace(
            local,
            title=incoming.title or local.title,
            description=self._prefer_incoming(local.description, incoming.description),
            group_id=self._prefer_incoming(local.group_id, incoming.group_id),
            previous_group_id=self._prefer_incoming(local.previous_group_id,
                                                    incoming.previous_group_id),
            priority=priority,
            due_date=due_date,
            completed=completed,
            completed_at=completed_at,
            worked_on_dates=worked_on_dates,
            subtasks=subtasks if subtasks is not None else copy.deepcopy(local.subtasks),
            subtasks_to_show=incoming.subtasks_to_show or local.subtasks_to_show,
            extra=copy.deepcopy(local.extra),
        )

    def merge_subtask(self, local: Subtask, incoming: Subtask) -> Subtask:
        """Merge two versions of the same subtask: a check on either side wins."""
        return dataclasses.replace(
            local,
            completed=local.completed or incoming.completed,
            title=incoming.title or local.title,
            extra=copy.deepcopy(local.extra),
        )

    def merge_group(self, local: Group, incoming: Group) -> Group:
        """Incoming group configuration replaces the local one outright."""
        if local.color != incoming.color or local.name != incoming.name:
            self.logger.debug(
                f"Group '{local.name}' replaced by incoming: color '{local.color}' -> '{incoming.color}'"
            )
        return copy.deepcopy(incoming)

    def merge_settings(self, local: Settings, incoming: Settings) -> Settings:
        """
        Merge settings records.

        The working task follows incoming whenever incoming has one. The
        suggestion group filter is a per-device preference and always stays
        local. Any other key keeps the local value; keys only incoming knows
        about are adopted.
        """
        current_task_id = (
            incoming.current_task_id
            if incoming.current_task_id is not None
            else local.current_task_id
        )

        extra = copy.deepcopy(incoming.extra)
        extra.update(copy.deepcopy(local.extra))

        if current_task_id != local.current_task_id:
            self.logger.debug(
                f"Current task changed by incoming: '{local.current_task_id}' -> '{current_task_id}'"
            )

        return Settings(
            current_task_id=current_task_id,
            suggestion_group_filter=copy.deepcopy(local.suggestion_group_filter),
            extra=extra,
        )

    @staticmethod
    def _prefer_incoming(local_value, incoming_value):
        """Incoming wins when present, including an explicit None."""
        return copy.deepcopy(incoming_value) if is_set(incoming_value) else copy.deepcopy(local_value)

    def _log_differences(self, local: Task, incoming: Task) -> None:
        """Log the fields on which the two versions disagree."""
        differing = []
        if local.completed != incoming.completed:
            differing.append('completed')
        if (local.priority or DEFAULT_PRIORITY) != (incoming.priority or DEFAULT_PRIORITY):
            differing.append('priority')
        if local.due_date != incoming.due_date:
            differing.append('dueDate')
        if is_set(incoming.group_id) and local.group_id != incoming.group_id:
            differing.append('groupId')
        if is_set(incoming.description) and local.description != incoming.description:
            differing.append('description')

        if differing:
            self.logger.debug(f"Field conflicts for task '{local.title}': {differing}")
