"""
Centralized path management for task-sync.

Resolves the per-user directory that holds the configuration file and the
default local snapshot.
"""

import os
import sys
from pathlib import Path
from typing import Optional
import logging


class PathManager:
    """Manages task-sync file paths."""

    APP_DIR_NAME = "task-sync"
    HOME_ENV_VAR = "TASK_SYNC_HOME"

    # File names
    CONFIG_FILE = "config.json"
    SNAPSHOT_FILE = "snapshot.json"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def _default_user_dir(self) -> Path:
        """Platform-appropriate per-user data directory."""
        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / self.APP_DIR_NAME
        if sys.platform.startswith("win"):
            appdata = os.environ.get("APPDATA")
            if appdata:
                return Path(appdata) / self.APP_DIR_NAME
            return Path.home() / "AppData" / "Roaming" / self.APP_DIR_NAME
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / self.APP_DIR_NAME
        return Path.home() / ".config" / self.APP_DIR_NAME

    @property
    def working_dir(self) -> Path:
        """Directory for config and data; ``$TASK_SYNC_HOME`` overrides the default."""
        override = os.environ.get(self.HOME_ENV_VAR)
        if override:
            return Path(os.path.expanduser(override))
        return self._default_user_dir()

    def ensure_directories(self) -> None:
        """Create the working directory if needed."""
        self.working_dir.mkdir(parents=True, exist_ok=True)
        self.logger.debug(f"Ensured working directory: {self.working_dir}")

    @property
    def config_path(self) -> Path:
        return self.working_dir / self.CONFIG_FILE

    @property
    def snapshot_path(self) -> Path:
        return self.working_dir / self.SNAPSHOT_FILE


def get_path_manager() -> PathManager:
    """Return a path manager for the current environment."""
    return PathManager()
