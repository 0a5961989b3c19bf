"""
Tests for the snapshot merge engine (task_sync/sync/engine.py).

Covers whole-snapshot behavior: mode handling, idempotence, missing
collections and input immutability.
"""

import copy
import logging

import pytest

from task_sync.core.exceptions import MergeError
from task_sync.core.models import MergeMode, Snapshot
from task_sync.sync.engine import MergeEngine, merge_data, merge_settings, merge_snapshots
from tests.conftest import make_task


def by_title(snapshot_dict):
    return {task["title"].lower(): task for task in snapshot_dict["tasks"]}


class TestMergeData:
    """End-to-end merge of raw snapshot dicts."""

    def test_sync_merge(self, local_data, incoming_data):
        merged = merge_data(local_data, incoming_data, "sync")
        tasks = by_title(merged)

        assert set(tasks) == {"buy milk", "write report", "call mom"}

        milk = tasks["buy milk"]
        assert milk["id"] == "local-1"
        assert milk["title"] == "buy milk"
        assert milk["priority"] == 4
        assert milk["dueDate"] == "2024-02-01T00:00:00.000Z"
        assert milk["workedOnDates"] == [
            "2024-01-02T10:00:00.000Z",
            "2024-01-03T10:00:00.000Z",
        ]
        # "Check fridge" is missing from incoming and is deleted
        assert [(s["title"], s["completed"]) for s in milk["subtasks"]] == [
            ("go to store", True),
            ("Pay", False),
        ]

        assert [g["name"] for g in merged["groups"]] == ["work", "Home"]
        assert merged["groups"][0]["color"] == "#0000FF"

        assert merged["settings"] == {
            "currentTaskId": "local-1",
            "suggestionGroupFilter": ["g-work"],
            "theme": "dark",
        }

    def test_conflict_merge_drops_local_only(self, local_data, incoming_data):
        merged = merge_data(local_data, incoming_data, "conflict")

        assert set(by_title(merged)) == {"buy milk", "call mom"}
        assert [g["name"] for g in merged["groups"]] == ["work"]

    def test_default_mode_is_sync(self, local_data):
        merged = merge_data(local_data, {})
        assert len(merged["tasks"]) == 2

    def test_missing_collections_treated_as_empty(self, local_data):
        merged = merge_data(None, local_data, "conflict")
        assert len(merged["tasks"]) == 2
        assert len(merged["groups"]) == 2

        merged = merge_data({"tasks": None}, {"groups": [{"name": "X"}]})
        assert merged["tasks"] == []
        assert [g["name"] for g in merged["groups"]] == ["X"]

    def test_inputs_not_mutated(self, local_data, incoming_data):
        local_before = copy.deepcopy(local_data)
        incoming_before = copy.deepcopy(incoming_data)

        merged = merge_data(local_data, incoming_data, "sync")
        merged["tasks"][0]["subtasks"].clear()
        merged["settings"]["suggestionGroupFilter"].append("x")

        assert local_data == local_before
        assert incoming_data == incoming_before

    def test_unknown_mode_raises(self, local_data):
        with pytest.raises(MergeError):
            merge_data(local_data, local_data, "newest")


class TestIdempotence:
    """merge(S, S) reproduces S."""

    @pytest.mark.parametrize("mode", list(MergeMode))
    def test_self_merge_is_identity(self, local_data, mode):
        merged = merge_data(local_data, local_data, mode)
        assert merged == Snapshot.from_dict(local_data).to_dict()

    def test_self_merge_of_snapshot_objects(self, local_data):
        snapshot = Snapshot.from_dict(local_data)
        assert merge_snapshots(snapshot, snapshot, MergeMode.CONFLICT) == snapshot


class TestTestableProperties:
    """Properties stated for the merge as a whole."""

    def test_completion_is_monotonic(self):
        local = {"tasks": [make_task("A", completed=True, completedAt="2024-01-01")]}
        incoming = {"tasks": [make_task("A", completed=False)]}

        merged = merge_data(local, incoming)

        assert merged["tasks"][0]["completed"] is True
        assert merged["tasks"][0]["completedAt"] == "2024-01-01"

    def test_priority_is_max_with_default(self):
        local = {"tasks": [make_task("A", priority=None)]}
        incoming = {"tasks": [make_task("A", priority=2)]}
        assert merge_data(local, incoming)["tasks"][0]["priority"] == 3

    def test_worked_on_dates_union_size(self):
        local_dates = ["2024-01-01", "2024-01-02"]
        incoming_dates = ["2024-01-02", "2024-01-03"]
        merged = merge_data(
            {"tasks": [make_task("A", workedOnDates=local_dates)]},
            {"tasks": [make_task("A", workedOnDates=incoming_dates)]},
        )
        dates = merged["tasks"][0]["workedOnDates"]
        assert dates == sorted(set(local_dates) | set(incoming_dates))
        assert len(dates) <= len(local_dates) + len(incoming_dates)

    def test_settings_filter_locality(self):
        merged = merge_settings(
            {"suggestionGroupFilter": ["g1"]},
            {"suggestionGroupFilter": ["g2"]},
        )
        assert merged.suggestion_group_filter == ["g1"]


class TestMergeEngine:
    """MergeEngine result details."""

    def test_stats_and_summary(self, local_data, incoming_data):
        result = MergeEngine().merge(local_data, incoming_data, MergeMode.CONFLICT)

        assert result.mode is MergeMode.CONFLICT
        assert result.stats["tasks"].merged == 1
        assert result.stats["tasks"].dropped == 1
        assert result.stats["tasks"].kept_incoming == 1
        assert result.stats["groups"].dropped == 1
        assert result.stats["subtasks"].dropped == 1
        assert result.dropped == 3
        assert result.summary().startswith("[conflict] tasks: 1 merged")

    def test_logs_summary(self, local_data, incoming_data, caplog):
        with caplog.at_level(logging.INFO, logger="task_sync.sync.engine"):
            MergeEngine().merge(local_data, incoming_data)
        assert any("Merge complete" in record.message for record in caplog.records)

    def test_repeated_merges_do_not_share_stats(self, local_data, incoming_data):
        engine = MergeEngine()
        first = engine.merge(local_data, incoming_data)
        second = engine.merge(local_data, incoming_data)
        assert first.stats["tasks"] is not second.stats["tasks"]
        assert second.stats["tasks"].merged == 1
