"""Validate command - check whether a file is an importable snapshot."""

import logging

from ..core.exceptions import SnapshotError
from ..snapshot import load_snapshot


class ValidateCommand:
    """Command for validating snapshot files before import."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def run(self, file_path: str) -> bool:
        """Run the validate command."""
        try:
            snapshot = load_snapshot(file_path, validate=True)
        except SnapshotError as exc:
            print(f"❌ {file_path}: {exc}")
            return False

        print(f"✅ {file_path}: {len(snapshot.tasks)} tasks, {len(snapshot.groups)} groups")
        return True
