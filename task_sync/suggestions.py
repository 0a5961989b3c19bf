"""
Task suggestion ordering.

Suggests what to work on next:

1. Only incomplete tasks are considered.
2. Tasks with a due date come first, earliest date first.
3. Ties on due date, and tasks without one, go by priority (5 = highest first).
"""

import random
import string
import time
from typing import Iterable, List, Optional, Sequence

from .core.models import UNGROUPED_FILTER_KEY, Task
from .utils.date import parse_timestamp

_BASE36 = string.digits + string.ascii_lowercase


def _matches_filter(task: Task, filter_group_ids: Sequence[str]) -> bool:
    if not task.is_grouped:
        return UNGROUPED_FILTER_KEY in filter_group_ids
    return task.group_id in filter_group_ids


def _sort_key(task: Task):
    due = parse_timestamp(task.due_date)
    priority = task.priority or 0
    if due is not None:
        return (0, due.timestamp(), -priority)
    return (1, 0.0, -priority)


def get_suggested_tasks(tasks: Iterable[Task],
                        filter_group_ids: Optional[Sequence[str]] = None) -> List[Task]:
    """
    Order incomplete tasks by suggestion rank.

    Args:
        tasks: Candidate tasks
        filter_group_ids: Group ids to restrict to, with ``"ungrouped"``
            standing for tasks without a group; None means all groups

    Returns:
        New list of tasks, best suggestion first
    """
    available = [task for task in tasks if not task.completed]

    if filter_group_ids is not None:
        available = [task for task in available if _matches_filter(task, filter_group_ids)]

    return sorted(available, key=_sort_key)


def get_next_suggestion(tasks: Iterable[Task],
                        filter_group_ids: Optional[Sequence[str]] = None,
                        skipped_ids: Iterable[str] = ()) -> Optional[Task]:
    """Return the best suggestion whose id has not been skipped, or None."""
    skipped = set(skipped_ids)
    for task in get_suggested_tasks(tasks, filter_group_ids):
        if task.id not in skipped:
            return task
    return None


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Generate an id for a new task, subtask or group.

    Base-36 millisecond timestamp followed by nine random base-36 characters.
    """
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=9))
    return timestamp + suffix
