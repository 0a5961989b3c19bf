"""Merge command - reconcile an incoming snapshot into the local one."""

import logging
from typing import Optional

from ..core.config import SyncConfig
from ..core.exceptions import SnapshotError, SnapshotValidationError
from ..core.models import MergeMode, Snapshot
from ..snapshot import (
    build_export_data,
    detect_merge_mode,
    load_snapshot,
    save_snapshot,
    snapshot_from_data,
)
from ..sync.engine import MergeEngine, MergeResult
from ..utils.io import locked_json_update


class MergeCommand:
    """Command for merging a snapshot from another device into local data."""

    def __init__(self, config: SyncConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)
        if verbose:
            self.logger.setLevel(logging.DEBUG)
        self.engine = MergeEngine(logger=self.logger)

    def resolve_mode(self, incoming_path: str, mode: Optional[str] = None) -> MergeMode:
        """Explicit mode first, then conflict-file detection, then the configured default."""
        if mode:
            return MergeMode.parse(mode)
        return detect_merge_mode(
            incoming_path,
            conflict_marker=self.config.conflict_marker,
            default=self.config.default_mode,
        )

    def run(self, incoming_path: str, local_path: Optional[str] = None,
            mode: Optional[str] = None, output_path: Optional[str] = None,
            dry_run: bool = False) -> bool:
        """Run the merge command."""
        local_path = local_path or self.config.local_snapshot_path
        merge_mode = self.resolve_mode(incoming_path, mode)

        try:
            incoming = load_snapshot(incoming_path, validate=True,
                                     lock_timeout=self.config.lock_timeout)
        except SnapshotError as exc:
            print(f"Cannot read incoming snapshot: {exc}")
            return False

        print(f"\n🔄 Merging {incoming_path} into {local_path} ({merge_mode.value} mode)")

        if dry_run or output_path:
            result = self._merge_without_writing_local(local_path, incoming, merge_mode)
            if result is None:
                return False
            if output_path and not dry_run:
                save_snapshot(output_path, result.snapshot, lock_timeout=self.config.lock_timeout)
                print(f"   Wrote merged snapshot to {output_path}")
        else:
            result = self._merge_into_local(local_path, incoming, merge_mode)

        self._show_summary(result, dry_run)
        return True

    def _merge_without_writing_local(self, local_path: str, incoming: Snapshot,
                                     merge_mode: MergeMode) -> Optional[MergeResult]:
        try:
            local = load_snapshot(local_path, lock_timeout=self.config.lock_timeout)
        except SnapshotError as exc:
            print(f"Cannot read local snapshot: {exc}")
            return None
        return self.engine.merge(local, incoming, merge_mode)

    def _merge_into_local(self, local_path: str, incoming: Snapshot,
                          merge_mode: MergeMode) -> MergeResult:
        """Read, merge and rewrite the local snapshot under one exclusive lock."""
        outcome = {}

        def apply_merge(current):
            try:
                local = snapshot_from_data(current)
            except SnapshotValidationError as exc:
                raise SnapshotValidationError(f"Local snapshot {local_path}: {exc}") from exc
            result = self.engine.merge(local, incoming, merge_mode)
            outcome["result"] = result
            return build_export_data(result.snapshot)

        try:
            locked_json_update(
                local_path,
                apply_merge,
                lock_timeout=self.config.lock_timeout,
                backup=self.config.backup_before_merge,
            )
        except (OSError, TimeoutError, ValueError) as exc:
            raise SnapshotError(f"Failed to update {local_path}: {exc}") from exc

        self.logger.info("Local snapshot %s updated", local_path)
        return outcome["result"]

    def _show_summary(self, result: MergeResult, dry_run: bool) -> None:
        print("\n📊 Merge Summary")
        for name in ("tasks", "groups", "subtasks"):
            stats = result.stats.get(name)
            if stats is None:
                continue
            print(f"   {name.capitalize()}: {stats.merged} merged, "
                  f"{stats.kept_local} local-only kept, "
                  f"{stats.kept_incoming} incoming-only added, "
                  f"{stats.dropped} dropped")

        snapshot = result.snapshot
        print(f"   Result: {len(snapshot.tasks)} tasks, {len(snapshot.groups)} groups")
        if dry_run:
            print("\n💡 Dry run - no files were changed.")
