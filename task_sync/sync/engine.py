"""Snapshot merge engine reconciling two devices' data sets."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union
import logging

from ..core.models import MergeMode, Settings, Snapshot
from .reconciler import CollectionReconciler, ReconcileStats
from .resolver import FieldResolver

SnapshotLike = Union[Snapshot, Dict[str, Any], None]


@dataclass
class MergeResult:
    """Merged snapshot plus what the merge did to each collection."""
    snapshot: Snapshot
    mode: MergeMode
    stats: Dict[str, ReconcileStats] = field(default_factory=dict)

    @property
    def dropped(self) -> int:
        return sum(s.dropped for s in self.stats.values())

    def summary(self) -> str:
        parts = []
        for name in ("tasks", "groups", "subtasks"):
            s = self.stats.get(name)
            if s is None:
                continue
            parts.append(
                f"{name}: {s.merged} merged, {s.kept_local} local-only kept, "
                f"{s.kept_incoming} incoming-only kept, {s.dropped} dropped"
            )
        return f"[{self.mode.value}] " + "; ".join(parts)


class MergeEngine:
    """Merges a local snapshot with an incoming one.

    The merge is a pure computation: inputs are never modified and the
    result shares no mutable state with them. Callers that apply the
    result to stored local state must serialize read-merge-write cycles
    themselves (see ``utils.io.locked_json_update``).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def merge(self, local: SnapshotLike, incoming: SnapshotLike,
              mode: Union[MergeMode, str, None] = MergeMode.SYNC) -> MergeResult:
        """
        Merge two snapshots.

        Args:
            local: This device's snapshot (Snapshot, raw dict, or None)
            incoming: The other device's snapshot (Snapshot, raw dict, or None)
            mode: MergeMode or its string value; None means sync

        Returns:
            MergeResult holding the merged snapshot and per-collection stats

        Raises:
            MergeError: If ``mode`` is not a known merge mode
        """
        merge_mode = MergeMode.parse(mode)
        local_snapshot = self._coerce(local)
        incoming_snapshot = self._coerce(incoming)

        self.logger.debug(
            "Merging %d local / %d incoming tasks, %d local / %d incoming groups (mode=%s)",
            len(local_snapshot.tasks), len(incoming_snapshot.tasks),
            len(local_snapshot.groups), len(incoming_snapshot.groups),
            merge_mode.value,
        )

        # Fresh reconciler per call so concurrent merges share no counters
        resolver = FieldResolver(logger=self.logger)
        reconciler = CollectionReconciler(resolver=resolver, logger=self.logger)

        groups = reconciler.merge_groups(local_snapshot.groups, incoming_snapshot.groups, merge_mode)
        tasks = reconciler.merge_tasks(local_snapshot.tasks, incoming_snapshot.tasks, merge_mode)
        settings = resolver.merge_settings(local_snapshot.settings, incoming_snapshot.settings)

        result = MergeResult(
            snapshot=Snapshot(tasks=tasks, groups=groups, settings=settings),
            mode=merge_mode,
            stats=reconciler.stats,
        )
        self.logger.info("Merge complete %s", result.summary())
        return result

    @staticmethod
    def _coerce(value: SnapshotLike) -> Snapshot:
        if isinstance(value, Snapshot):
            return value
        return Snapshot.from_dict(value)


def merge_snapshots(local: SnapshotLike, incoming: SnapshotLike,
                    mode: Union[MergeMode, str, None] = MergeMode.SYNC) -> Snapshot:
    """Merge two snapshots and return the merged Snapshot."""
    return MergeEngine().merge(local, incoming, mode).snapshot


def merge_data(local: Optional[Dict[str, Any]], incoming: Optional[Dict[str, Any]],
               mode: Union[MergeMode, str, None] = MergeMode.SYNC) -> Dict[str, Any]:
    """Merge two raw ``{tasks, groups, settings}`` dicts into a new dict."""
    return merge_snapshots(local, incoming, mode).to_dict()


def merge_settings(local: Union[Settings, Dict[str, Any], None],
                   incoming: Union[Settings, Dict[str, Any], None]) -> Settings:
    """Merge two settings records (Settings objects or raw dicts)."""
    if not isinstance(local, Settings):
        local = Settings.from_dict(local)
    if not isinstance(incoming, Settings):
        incoming = Settings.from_dict(incoming)
    return FieldResolver().merge_settings(local, incoming)
