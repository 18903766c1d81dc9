"""Filesystem helpers for atomic object writes."""

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write(path: str | Path, content: bytes) -> None:
    """Write file atomically using temp file + rename.

    Readers never observe a partially written object under the final name:
    the bytes go to a uniquely named temp file in the same directory, are
    fsynced, and then renamed over the target. Concurrent writers of the
    same path each use their own temp file, so the last rename wins and
    every rename installs a complete file.

    Args:
        path: Target file path
        content: Bytes to write

    Raises:
        OSError: If write or rename fails
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file must live in the target directory for rename to be atomic
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        tmp_path.replace(path)
        logger.debug(f"Atomically wrote {len(content)} bytes to {path}")
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def atomic_write_json(path: str | Path, data: dict) -> None:
    """Serialize ``data`` as JSON and write it atomically."""
    atomic_write(path, json.dumps(data, indent=2, sort_keys=True).encode("utf-8"))


def safe_read(path: str | Path) -> bytes | None:
    """Read file safely, returning None if not found.

    Args:
        path: File path to read

    Returns:
        File contents as bytes or None if not found
    """
    path = Path(path)
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except Exception as e:
        logger.error(f"Failed to read {path}: {e}")
        raise


def ensure_dir(path: str | Path) -> Path:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
