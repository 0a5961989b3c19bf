"""
Tests for snapshot export/import (task_sync/snapshot.py).
"""

import json
from pathlib import Path

import pytest

from task_sync.core.exceptions import SnapshotError, SnapshotValidationError
from task_sync.core.models import MergeMode, Snapshot
from task_sync.snapshot import (
    EXPORT_VERSION,
    build_export_data,
    detect_merge_mode,
    import_snapshot,
    load_snapshot,
    save_snapshot,
    snapshot_from_data,
    validate_import_data,
)
from tests.conftest import export_document, write_json


class TestValidateImportData:
    """Structure checks on imported JSON."""

    @pytest.mark.parametrize("data,error", [
        (None, "Not a valid JSON object"),
        ([], "Not a valid JSON object"),
        ("text", "Not a valid JSON object"),
        ({"groups": [], "settings": {}}, "Missing or invalid tasks array"),
        ({"tasks": [], "groups": {}, "settings": {}}, "Missing or invalid groups array"),
        ({"tasks": [], "groups": []}, "Missing or invalid settings"),
        ({"tasks": [], "groups": [], "settings": []}, "Missing or invalid settings"),
    ])
    def test_invalid(self, data, error):
        assert validate_import_data(data) == (False, error)

    def test_valid(self, local_data):
        assert validate_import_data(local_data) == (True, None)
        assert validate_import_data({"tasks": [], "groups": [], "settings": {}}) == (True, None)


class TestImportExport:
    """Export envelope and import defaults."""

    def test_build_export_data(self, local_data):
        exported = build_export_data(Snapshot.from_dict(local_data))

        assert exported["version"] == EXPORT_VERSION
        assert exported["exportedAt"].endswith("Z")
        assert len(exported["tasks"]) == 2
        assert exported["settings"]["theme"] == "dark"

    def test_import_applies_default_settings(self):
        snapshot = import_snapshot({"tasks": [], "groups": [], "settings": {"theme": "dark"}})
        assert snapshot.settings.current_task_id is None
        assert snapshot.settings.suggestion_group_filter is None
        assert snapshot.settings.extra == {"theme": "dark"}

    def test_import_rejects_invalid(self):
        with pytest.raises(SnapshotValidationError, match="tasks array"):
            import_snapshot({"groups": [], "settings": {}})

    @pytest.mark.parametrize("data", [
        {"tasks": [None]},
        {"tasks": "x"},
        {"groups": [42]},
        {"settings": "dark"},
    ])
    def test_malformed_entries_rejected(self, data):
        with pytest.raises(SnapshotValidationError, match="Malformed snapshot entry"):
            snapshot_from_data(data)

    def test_import_rejects_malformed_task(self):
        with pytest.raises(SnapshotValidationError):
            import_snapshot({"tasks": [None], "groups": [], "settings": {}})


class TestSnapshotFiles:
    """Loading and saving snapshot files."""

    def test_save_then_load(self, tmp_path, local_data):
        path = tmp_path / "out" / "snapshot.json"
        snapshot = Snapshot.from_dict(local_data)

        save_snapshot(path, snapshot)
        loaded = load_snapshot(path, validate=True)

        assert loaded == snapshot
        raw = json.loads(path.read_text())
        assert raw["version"] == EXPORT_VERSION

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError, match="not found"):
            load_snapshot(tmp_path / "nope.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"tasks": [')
        with pytest.raises(SnapshotError, match="Invalid JSON"):
            load_snapshot(path)

    def test_load_with_validation(self, tmp_path):
        path = write_json(str(tmp_path / "partial.json"), {"tasks": []})

        assert load_snapshot(path).tasks == []
        with pytest.raises(SnapshotValidationError):
            load_snapshot(path, validate=True)

    def test_load_non_object(self, tmp_path):
        path = write_json(str(tmp_path / "list.json"), [1, 2])
        with pytest.raises(SnapshotValidationError):
            load_snapshot(path)

    def test_load_export_document(self, tmp_path, incoming_data):
        path = write_json(str(tmp_path / "remote.json"), export_document(incoming_data))
        snapshot = load_snapshot(path, validate=True)
        assert [t.title for t in snapshot.tasks] == ["buy milk", "Call mom"]


class TestDetectMergeMode:
    """Mode selection from the incoming file name."""

    def test_conflict_copy(self):
        path = "/sync/data.sync-conflict-20240101-120000-ABCDEFG.json"
        assert detect_merge_mode(path) is MergeMode.CONFLICT

    def test_regular_file_uses_default(self):
        assert detect_merge_mode(Path("/sync/data.json")) is MergeMode.SYNC
        assert detect_merge_mode("/sync/data.json", default="conflict") is MergeMode.CONFLICT

    def test_marker_only_checked_in_file_name(self):
        path = "/home/.sync-conflict-dir/data.json"
        assert detect_merge_mode(path) is MergeMode.SYNC

    def test_custom_marker(self):
        assert detect_merge_mode("data (conflicted copy).json",
                                 conflict_marker="conflicted copy") is MergeMode.CONFLICT
