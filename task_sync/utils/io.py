"""
Safe I/O operations with atomic writes and cooperative file locking.
"""

import contextlib
import errno
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

try:  # fcntl is only available on POSIX platforms
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - Windows fallback
    fcntl = None  # type: ignore


DEFAULT_LOCK_TIMEOUT = 8.0  # seconds
LOCK_SLEEP_INTERVAL = 0.05  # seconds

logger = logging.getLogger(__name__)


def _lock_file_path(path: Path) -> Path:
    """Return the companion lock file path for the target file."""
    lock_name = f"{path.name}.lock"
    return path.parent / lock_name


@contextlib.contextmanager
def file_lock(target_path: Path, exclusive: bool, timeout: Optional[float] = DEFAULT_LOCK_TIMEOUT) -> Iterator[None]:
    """Acquire a cooperative file lock around the target path.

    Uses POSIX advisory locking via fcntl when available; otherwise acts as a no-op.
    Raises TimeoutError if the lock cannot be taken within ``timeout`` seconds.
    """
    if fcntl is None:
        yield
        return

    lock_path = _lock_file_path(target_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
    deadline = time.monotonic() + timeout if timeout is not None else None

    with open(lock_path, "a") as lock_file:
        while True:
            try:
                flags = lock_type | fcntl.LOCK_NB if deadline is not None else lock_type
                fcntl.flock(lock_file.fileno(), flags)
                break
            except OSError as exc:
                if exc.errno not in (errno.EACCES, errno.EAGAIN):
                    raise
                if deadline is not None and time.monotonic() >= deadline:
                    raise TimeoutError(
                        f"Timed out after {timeout:g}s waiting for lock on {target_path}"
                    ) from exc
                time.sleep(LOCK_SLEEP_INTERVAL)

        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


def _read_json(path_obj: Path) -> Any:
    with path_obj.open('r', encoding='utf-8') as handle:
        return json.load(handle)


def _replace_with_json(path_obj: Path, data: Any, indent: int) -> None:
    """Write JSON to a temp file beside the target and atomically swap it in."""
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            dir=str(path_obj.parent),
            prefix='.tmp_',
            suffix='.json',
            delete=False,
            encoding='utf-8'
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            json.dump(data, tmp_file, indent=indent, ensure_ascii=False)

        os.replace(str(tmp_path), str(path_obj))
    finally:
        if tmp_path and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def safe_read_json(file_path: str, default: Optional[Any] = None, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Any:
    """
    Safely read JSON from file with error handling.

    Args:
        file_path: Path to JSON file
        default: Default value to return if file doesn't exist or is invalid

    Returns:
        Parsed JSON data or default value
    """
    if default is None:
        default = {}

    file_path = os.path.expanduser(file_path)
    path_obj = Path(file_path)

    if not path_obj.exists():
        return default

    try:
        with file_lock(path_obj, exclusive=False, timeout=lock_timeout):
            return _read_json(path_obj)
    except TimeoutError as exc:
        logger.warning("Timed out waiting to read %s: %s", file_path, exc)
        return default
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read %s: %s", file_path, exc)
        return default


def safe_write_json(file_path: str, data: Any, indent: int = 2, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> bool:
    """
    Safely write JSON to file with atomic write.

    Args:
        file_path: Path to write to
        data: Data to write
        indent: JSON indentation level

    Returns:
        True if successful, False otherwise
    """
    file_path = os.path.expanduser(file_path)
    path_obj = Path(file_path)

    # Ensure directory exists
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    try:
        with file_lock(path_obj, exclusive=True, timeout=lock_timeout):
            _replace_with_json(path_obj, data, indent)
        return True
    except TimeoutError as exc:
        logger.error("Error writing to %s: %s", file_path, exc)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Error writing to %s: %s", file_path, exc)

    return False


def locked_json_update(
    file_path: str,
    update: Callable[[Any], Any],
    *,
    default: Optional[Any] = None,
    indent: int = 2,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    backup: bool = False,
) -> Any:
    """
    Read, transform and rewrite a JSON file under one exclusive lock.

    Other cooperating readers and writers wait for the whole
    read-modify-write, so a change written between the read and the write
    cannot be lost. If ``update`` returns None the file is left untouched.

    Args:
        file_path: Path to the JSON file
        update: Callable receiving the current data and returning the new data
        default: Data passed to ``update`` when the file does not exist
        indent: JSON indentation level
        lock_timeout: Seconds to wait for the lock
        backup: Copy the previous contents to ``<file>.bak`` before replacing

    Returns:
        Whatever ``update`` returned

    Raises:
        TimeoutError: If the lock cannot be acquired in time
        json.JSONDecodeError: If the existing file is not valid JSON
    """
    if default is None:
        default = {}

    path_obj = Path(os.path.expanduser(file_path))
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    with file_lock(path_obj, exclusive=True, timeout=lock_timeout):
        current = _read_json(path_obj) if path_obj.exists() else default
        result = update(current)
        if result is None:
            return None

        if backup and path_obj.exists():
            backup_path = path_obj.with_name(path_obj.name + ".bak")
            _replace_with_json(backup_path, current, indent)
            logger.debug("Backed up %s to %s", path_obj, backup_path)

        _replace_with_json(path_obj, result, indent)
        return result
