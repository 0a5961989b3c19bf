"""Suggest command - show what to work on next."""

import logging
from typing import List, Optional

from ..core.config import SyncConfig
from ..core.exceptions import SnapshotError
from ..core.models import DEFAULT_SUBTASKS_TO_SHOW, Snapshot, Task
from ..snapshot import load_snapshot
from ..suggestions import get_next_suggestion, get_suggested_tasks


class SuggestCommand:
    """Command for suggesting the next task from a snapshot."""

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)
        if verbose:
            self.logger.setLevel(logging.DEBUG)

    def run(self, snapshot_path: Optional[str] = None, show_all: bool = False,
            skipped_ids: Optional[List[str]] = None) -> bool:
        """Run the suggest command."""
        snapshot_path = snapshot_path or self.config.local_snapshot_path
        try:
            snapshot = load_snapshot(snapshot_path, lock_timeout=self.config.lock_timeout)
        except SnapshotError as exc:
            print(f"Cannot read snapshot: {exc}")
            return False

        group_filter = snapshot.settings.suggestion_group_filter
        self.logger.debug(f"Suggestion group filter: {group_filter}")

        if show_all:
            ranked = get_suggested_tasks(snapshot.tasks, group_filter)
            if not ranked:
                print("No open tasks to suggest.")
                return True
            for index, task in enumerate(ranked, 1):
                print(f"{index:3d}. {self._format_task(task, snapshot)}")
            return True

        task = get_next_suggestion(snapshot.tasks, group_filter, skipped_ids or [])
        if task is None:
            print("No open tasks to suggest.")
            return True

        print(f"👉 {self._format_task(task, snapshot)}")
        limit = task.subtasks_to_show or DEFAULT_SUBTASKS_TO_SHOW
        open_subtasks = task.incomplete_subtasks()
        for subtask in open_subtasks[:limit]:
            print(f"     - [ ] {subtask.title}")
        if len(open_subtasks) > limit:
            print(f"     +{len(open_subtasks) - limit} more subtasks")
        return True

    @staticmethod
    def _format_task(task: Task, snapshot: Snapshot) -> str:
        parts = [task.title, f"(P{task.priority})"]
        if task.due_date:
            parts.append(f"due {task.due_date[:10]}")
        group = snapshot.group_by_id(task.group_id)
        if group is not None:
            parts.append(f"[{group.name}]")
        return " ".join(parts)
