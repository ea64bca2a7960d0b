"""
json_store.py - Locked, atomic JSON file storage

Every JSON file is read and written under a ``filelock`` lock stored next
to it (``<file>.lock``). Writes go to a temporary file that then replaces
the original, so readers never see a half-written file. Read-modify-write
cycles go through ``update_json`` so the lock is held for the whole cycle.
"""

import json
import os
import shutil
from typing import Any, Callable, TypeVar

import filelock

from connect4_remote.debug import debug
from connect4_remote.errors import StorageError

LOCK_TIMEOUT = 10.0  # seconds

T = TypeVar('T')


def ensure_directory(path: str):
    """Create a directory if it doesn't exist."""
    os.makedirs(path, exist_ok=True)


def _lock_for(file_path: str) -> filelock.FileLock:
    return filelock.FileLock(f"{file_path}.lock", timeout=LOCK_TIMEOUT)


def _read(file_path: str, default: Any) -> Any:
    if not os.path.exists(file_path):
        return default
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        debug.error(f"Error decoding JSON from {file_path}: {e}", "data")
        raise StorageError(f"Corrupt JSON file {file_path}: {e}") from e


def _write(file_path: str, data: Any):
    temp_file = f"{file_path}.tmp"
    with open(temp_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
    # Replace the original file in one step
    shutil.move(temp_file, file_path)
    debug.trace(f"Wrote {file_path}", "data")


def safe_read_json(file_path: str, default: Any = None) -> Any:
    """
    Read a JSON file under its lock.

    Args:
        file_path: Path to JSON file
        default: Value returned when the file does not exist

    Returns:
        Parsed JSON data, or ``default`` for a missing file

    Raises:
        StorageError: if the file is unreadable or not valid JSON
    """
    if not os.path.exists(file_path):
        return default

    try:
        with _lock_for(file_path):
            return _read(file_path, default)
    except (OSError, filelock.Timeout) as e:
        debug.error(f"Error reading {file_path}: {e}", "data")
        raise StorageError(f"Cannot read {file_path}: {e}") from e


def safe_write_json(file_path: str, data: Any):
    """
    Atomically replace a JSON file under its lock.

    Raises:
        StorageError: if the file cannot be written
    """
    ensure_directory(os.path.dirname(os.path.abspath(file_path)))
    try:
        with _lock_for(file_path):
            _write(file_path, data)
    except (OSError, TypeError, ValueError, filelock.Timeout) as e:
        debug.error(f"Error writing to {file_path}: {e}", "data")
        raise StorageError(f"Cannot write {file_path}: {e}") from e


def update_json(file_path: str, default: Any, mutate: Callable[[Any], T]) -> T:
    """
    Read, mutate and write back a JSON file while holding its lock.

    Args:
        file_path: Path to JSON file
        default: Starting value when the file does not exist
        mutate: Called with the loaded data; may change it in place and
            returns the value handed back to the caller

    Returns:
        Whatever ``mutate`` returned

    Raises:
        StorageError: if the file cannot be read or written
        Any exception raised by ``mutate`` (the file is then left untouched)
    """
    ensure_directory(os.path.dirname(os.path.abspath(file_path)))
    try:
        with _lock_for(file_path):
            data = _read(file_path, default)
            result = mutate(data)
            _write(file_path, data)
            return result
    except (OSError, TypeError, filelock.Timeout) as e:
        debug.error(f"Error updating {file_path}: {e}", "data")
        raise StorageError(f"Cannot update {file_path}: {e}") from e


def remove_json(file_path: str) -> bool:
    """
    Delete a JSON file under its lock.

    Returns:
        True if a file was removed, False if there was none

    Raises:
        StorageError: if the file exists but cannot be removed
    """
    try:
        with _lock_for(file_path):
            if not os.path.exists(file_path):
                return False
            os.remove(file_path)
    except (OSError, filelock.Timeout) as e:
        debug.error(f"Error removing {file_path}: {e}", "data")
        raise StorageError(f"Cannot remove {file_path}: {e}") from e
    debug.trace(f"Removed {file_path}", "data")
    return True
