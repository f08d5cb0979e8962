"""
JSON File Storage Implementation

Each key is one file, `<data_dir>/<key>.json`.

TRADEOFFS:
- Whole-file rewrites on every change (fine for personal data volumes)
- No cross-file transactions; each collection is saved on its own

Writes go to a temporary file first and are then renamed over the old
file, so a crash mid-write never leaves a half-written collection.
"""

import os
import re
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.errors import PersistenceReadError, StorageWriteError
from expense_tracker.services.storage.interface import KeyValueStore

logger = structlog.get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store backed by one JSON file per key.

    The directory is created on first write.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceReadError(key, str(e))

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._write(path, value)
        except OSError as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageWriteError(f"Failed to save '{key}': {e}") from e

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
