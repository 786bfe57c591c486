"""
JSON persistence with atomic writes and cooperative file locking.
"""

import contextlib
import errno
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

try:  # fcntl is only available on POSIX platforms
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - Windows has no advisory locks
    fcntl = None  # type: ignore


logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 8.0  # seconds
LOCK_SLEEP_INTERVAL = 0.05  # seconds


def _lock_file_path(path: Path) -> Path:
    """Return the companion lock file path for the target file."""
    return path.parent / f"{path.name}.lock"


@contextlib.contextmanager
def _file_lock(target_path: Path, exclusive: bool, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator[None]:
    """Hold an advisory lock on the companion lock file of target_path.

    Acts as a no-op where fcntl is unavailable.
    """
    if fcntl is None:
        yield
        return

    lock_path = _lock_file_path(target_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
    deadline = time.monotonic() + timeout

    with open(lock_path, "a") as lock_file:
        while True:
            try:
                fcntl.flock(lock_file.fileno(), lock_type | fcntl.LOCK_NB)
                break
            except OSError as exc:  # pragma: no cover - depends on timing
                if exc.errno not in (errno.EACCES, errno.EAGAIN):
                    raise
                if time.monotonic() >= deadline:
                    raise TimeoutError(f"Timed out waiting for lock on {target_path}") from exc
                time.sleep(LOCK_SLEEP_INTERVAL)

        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


def safe_read_json(file_path: str, default: Optional[Dict] = None, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Dict[str, Any]:
    """
    Read a JSON object from file, falling back to a default.

    Args:
        file_path: Path to JSON file
        default: Value returned if the file is missing, unreadable or not an object

    Returns:
        Parsed JSON data or default value
    """
    if default is None:
        default = {}

    path_obj = Path(os.path.expanduser(file_path))
    if not path_obj.exists():
        return default

    try:
        with _file_lock(path_obj, exclusive=False, timeout=lock_timeout):
            with path_obj.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
    except TimeoutError as exc:
        logger.warning(f"Timed out waiting to read {file_path}: {exc}")
        return default
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning(f"Failed to read {file_path}: {exc}")
        return default

    if not isinstance(data, dict):
        logger.warning(f"Expected a JSON object in {file_path}, got {type(data).__name__}")
        return default
    return data


def safe_write_json(file_path: str, data: Dict[str, Any], indent: int = 2, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> bool:
    """
    Write JSON to file atomically (temp file + rename).

    Args:
        file_path: Path to write to
        data: Data to write
        indent: JSON indentation level

    Returns:
        True if successful, False otherwise
    """
    path_obj = Path(os.path.expanduser(file_path))
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = None
    try:
        with _file_lock(path_obj, exclusive=True, timeout=lock_timeout):
            with tempfile.NamedTemporaryFile(
                mode='w',
                dir=str(path_obj.parent),
                prefix='.tmp_',
                suffix='.json',
                delete=False,
                encoding='utf-8'
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                json.dump(data, tmp_file, indent=indent, ensure_ascii=False, sort_keys=True)

            os.replace(str(tmp_path), str(path_obj))
        return True

    except (TimeoutError, OSError, TypeError, ValueError) as exc:
        logger.error(f"Error writing to {file_path}: {exc}")
    finally:
        if tmp_path and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass

    return False
