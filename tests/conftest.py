#!/usr/bin/env python3
"""
Global pytest configuration and fixtures.

This module provides:
- Sample snapshot data shared by merge and CLI tests
- Config and data directory isolation
"""

import json
import os
import sys
from typing import Any, Dict

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config and default snapshot paths inside the test's temp dir."""
    home = tmp_path / "task-sync-home"
    monkeypatch.setenv("TASK_SYNC_HOME", str(home))
    return home


def make_task(title: str, **fields: Any) -> Dict[str, Any]:
    """Build a raw task dict with the fields a freshly created task has."""
    task = {
        "id": fields.pop("id", f"id-{title.lower().replace(' ', '-')}"),
        "title": title,
        "description": None,
        "groupId": None,
        "subtasks": [],
        "subtasksToShow": 2,
        "dueDate": None,
        "priority": 3,
        "completed": False,
        "completedAt": None,
        "previousGroupId": None,
        "workedOnDates": [],
        "createdAt": "2024-01-01T08:00:00.000Z",
    }
    task.update(fields)
    return task


@pytest.fixture
def local_data() -> Dict[str, Any]:
    """Snapshot as exported by the local device."""
    return {
        "tasks": [
            make_task(
                "Buy milk",
                id="local-1",
                priority=2,
                dueDate="2024-01-01T00:00:00.000Z",
                workedOnDates=["2024-01-03T10:00:00.000Z"],
                subtasks=[
                    {"id": "s1", "title": "Check fridge", "completed": True},
                    {"id": "s2", "title": "Go to store", "completed": False},
                ],
            ),
            make_task("Write report", id="local-2", groupId="g-work"),
        ],
        "groups": [
            {"id": "g-work", "name": "Work", "color": "#FF0000"},
            {"id": "g-home", "name": "Home", "color": "#00FF00"},
        ],
        "settings": {
            "currentTaskId": "local-1",
            "suggestionGroupFilter": ["g-work"],
            "theme": "dark",
        },
    }


@pytest.fixture
def incoming_data() -> Dict[str, Any]:
    """Snapshot of the same data as edited on the other device."""
    return {
        "tasks": [
            make_task(
                "buy milk",
                id="remote-1",
                priority=4,
                dueDate="2024-02-01T00:00:00.000Z",
                workedOnDates=["2024-01-02T10:00:00.000Z", "2024-01-03T10:00:00.000Z"],
                subtasks=[
                    {"id": "r1", "title": "go to store", "completed": True},
                    {"id": "r2", "title": "Pay", "completed": False},
                ],
            ),
            make_task("Call mom", id="remote-3"),
        ],
        "groups": [
            {"id": "g-work-remote", "name": "work", "color": "#0000FF"},
        ],
        "settings": {
            "currentTaskId": None,
            "suggestionGroupFilter": ["g-other"],
        },
    }


def write_json(path: str, data: Any) -> str:
    """Write data as JSON and return the path."""
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(data, handle)
    return path


def export_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap raw snapshot data in the export envelope."""
    return {"version": 1, "exportedAt": "2024-03-01T00:00:00.000Z", **data}
