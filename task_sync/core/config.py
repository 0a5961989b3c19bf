"""
Configuration management for task-sync.
"""

from dataclasses import dataclass
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError
from .models import MergeMode
from .paths import get_path_manager


DEFAULT_CONFLICT_MARKER = ".sync-conflict-"
DEFAULT_LOCK_TIMEOUT = 8.0


@dataclass
class SyncConfig:
    """Configuration for merge operations."""

    local_snapshot_path: Optional[str] = None
    default_mode: str = MergeMode.SYNC.value
    # Filename fragment marking a conflict copy (Syncthing convention)
    conflict_marker: str = DEFAULT_CONFLICT_MARKER
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    backup_before_merge: bool = True

    def __post_init__(self) -> None:
        if self.local_snapshot_path is None:
            self.local_snapshot_path = str(get_path_manager().snapshot_path)
        else:
            self.local_snapshot_path = os.path.abspath(os.path.expanduser(self.local_snapshot_path))

    @property
    def merge_mode(self) -> MergeMode:
        """The configured default mode as a MergeMode."""
        return MergeMode.parse(self.default_mode)

    def validate(self) -> None:
        """Raise ConfigurationError if any value is unusable."""
        try:
            MergeMode(self.default_mode)
        except ValueError:
            raise ConfigurationError(f"Invalid default_mode '{self.default_mode}'")
        if not self.conflict_marker:
            raise ConfigurationError("conflict_marker cannot be empty")
        if self.lock_timeout <= 0:
            raise ConfigurationError("lock_timeout must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "local_snapshot_path": self.local_snapshot_path,
            "merge": {
                "default_mode": self.default_mode,
                "conflict_marker": self.conflict_marker,
                "lock_timeout": self.lock_timeout,
                "backup_before_merge": self.backup_before_merge,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncConfig":
        merge_settings = data.get("merge")
        if not isinstance(merge_settings, dict):
            merge_settings = {}
        return cls(
            local_snapshot_path=data.get("local_snapshot_path"),
            default_mode=merge_settings.get("default_mode", MergeMode.SYNC.value),
            conflict_marker=merge_settings.get("conflict_marker", DEFAULT_CONFLICT_MARKER),
            lock_timeout=float(merge_settings.get("lock_timeout", DEFAULT_LOCK_TIMEOUT)),
            backup_before_merge=merge_settings.get("backup_before_merge", True),
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> "SyncConfig":
        config_path = os.path.abspath(os.path.expanduser(config_path))
        if not os.path.exists(config_path):
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError):
            return cls()

        if not isinstance(data, dict):
            return cls()

        try:
            return cls.from_dict(data)
        except (TypeError, ValueError):
            return cls()

    def save_to_file(self, config_path: str) -> None:
        config_path = os.path.abspath(os.path.expanduser(config_path))
        os.makedirs(os.path.dirname(config_path), exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as handle:
            json.dump(self.to_dict(), handle, indent=2, ensure_ascii=False)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return get_path_manager().config_path


def load_config(config_path: Optional[str] = None) -> SyncConfig:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        SyncConfig object
    """
    if config_path is None:
        config_path = str(get_default_config_path())

    return SyncConfig.load_from_file(config_path)


def save_config(config: SyncConfig, config_path: Optional[str] = None):
    """
    Save configuration to file.

    Args:
        config: SyncConfig object to save
        config_path: Optional path to save to. Uses default if not provided.
    """
    if config_path is None:
        manager = get_path_manager()
        manager.ensure_directories()
        config_path = str(manager.config_path)

    config.save_to_file(config_path)
