"""
Snapshot export and import.

A snapshot file is the JSON document one device writes for another:
``{version, exportedAt, tasks, groups, settings}``.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .core.exceptions import SnapshotError, SnapshotValidationError
from .core.models import MergeMode, Snapshot
from .utils.date import now_iso
from .utils.io import DEFAULT_LOCK_TIMEOUT, file_lock, safe_write_json

EXPORT_VERSION = 1
DEFAULT_SETTINGS = {
    "suggestionGroupFilter": None,  # None = all groups
    "currentTaskId": None,
}

logger = logging.getLogger(__name__)


def build_export_data(snapshot: Union[Snapshot, Dict[str, Any]]) -> Dict[str, Any]:
    """Build the export document for a snapshot."""
    if isinstance(snapshot, Snapshot):
        snapshot = snapshot.to_dict()
    return {
        "version": EXPORT_VERSION,
        "exportedAt": now_iso(),
        "tasks": snapshot.get("tasks") or [],
        "groups": snapshot.get("groups") or [],
        "settings": snapshot.get("settings") or {},
    }


def validate_import_data(data: Any) -> Tuple[bool, Optional[str]]:
    """
    Check that imported JSON has the expected structure.

    Returns:
        (True, None) when valid, otherwise (False, reason)
    """
    if not data or not isinstance(data, dict):
        return False, "Not a valid JSON object"
    if not isinstance(data.get("tasks"), list):
        return False, "Missing or invalid tasks array"
    if not isinstance(data.get("groups"), list):
        return False, "Missing or invalid groups array"
    if not isinstance(data.get("settings"), dict):
        return False, "Missing or invalid settings"
    return True, None


def snapshot_from_data(data: Any) -> Snapshot:
    """
    Build a Snapshot from raw JSON data.

    Raises:
        SnapshotValidationError: If the data or one of its entries has the wrong shape
    """
    if data is not None and not isinstance(data, dict):
        raise SnapshotValidationError("Not a valid JSON object")
    try:
        return Snapshot.from_dict(data)
    except (AttributeError, TypeError) as exc:
        raise SnapshotValidationError(f"Malformed snapshot entry: {exc}") from exc


def import_snapshot(data: Any) -> Snapshot:
    """
    Validate import data and build a Snapshot with default settings applied.

    Raises:
        SnapshotValidationError: If the data is not a valid snapshot document
    """
    valid, error = validate_import_data(data)
    if not valid:
        raise SnapshotValidationError(error)

    settings = dict(DEFAULT_SETTINGS)
    settings.update(data["settings"])
    return snapshot_from_data({
        "tasks": data["tasks"],
        "groups": data["groups"],
        "settings": settings,
    })


def load_snapshot(file_path: Union[str, Path], validate: bool = False,
                  lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Snapshot:
    """
    Load a snapshot from a JSON file.

    Args:
        file_path: Path to the snapshot file
        validate: Require the full export structure (tasks, groups, settings)
        lock_timeout: Seconds to wait for a shared lock on the file

    Raises:
        SnapshotError: If the file is missing, unreadable or not JSON
        SnapshotValidationError: If the document or one of its entries has the wrong shape
    """
    path_obj = Path(os.path.expanduser(str(file_path)))
    if not path_obj.exists():
        raise SnapshotError(f"Snapshot file not found: {path_obj}")

    try:
        with file_lock(path_obj, exclusive=False, timeout=lock_timeout):
            with path_obj.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Invalid JSON in {path_obj}: {exc}") from exc
    except (OSError, TimeoutError) as exc:
        raise SnapshotError(f"Failed to read {path_obj}: {exc}") from exc

    if validate:
        return import_snapshot(data)

    snapshot = snapshot_from_data(data)
    logger.debug(f"Loaded snapshot from {path_obj}")
    return snapshot


def save_snapshot(file_path: Union[str, Path], snapshot: Snapshot,
                  lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
    """
    Atomically write a snapshot as an export document.

    Raises:
        SnapshotError: If the file could not be written
    """
    if not safe_write_json(str(file_path), build_export_data(snapshot), lock_timeout=lock_timeout):
        raise SnapshotError(f"Failed to write snapshot to {file_path}")


def detect_merge_mode(incoming_path: Union[str, Path],
                      conflict_marker: str = ".sync-conflict-",
                      default: Union[MergeMode, str] = MergeMode.SYNC) -> MergeMode:
    """
    Choose the merge mode for an incoming file from its name.

    A conflict copy (e.g. ``data.sync-conflict-20240101-120000-ABCDEF.json``)
    shares an ancestor with the local data, so it is merged in conflict mode.
    """
    if conflict_marker and conflict_marker in Path(str(incoming_path)).name:
        return MergeMode.CONFLICT
    return MergeMode.parse(default)
