"""
Local key/value store backed by a JSON file.

Holds everything the capture station keeps on the device: preferences,
lock flags, batch comments, history and last-scan records.
Single-process only (one station per service instance).
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional
import structlog

from config import settings
from exceptions import StorageError

logger = structlog.get_logger(__name__)


class LocalStore:
    """
    JSON file store with get/set by key.

    The whole file is loaded on first access and rewritten atomically on
    every change.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._data: Optional[dict[str, Any]] = None

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            # Corrupt file: start over rather than block scanning
            logger.error("local_store_corrupt", path=str(self.path), error=str(e))
            data = {}
        except OSError as e:
            logger.error("local_store_read_failed", path=str(self.path), error=str(e))
            raise StorageError("read", str(e), {"path": str(self.path)})

        if not isinstance(data, dict):
            logger.error("local_store_corrupt", path=str(self.path), error="not an object")
            data = {}

        self._data = data
        return self._data

    def _flush(self, data: dict[str, Any]) -> None:
        """Write data to disk; the cache is only replaced once the file is."""
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".store-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, default=str)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
            logger.error("local_store_write_failed", path=str(self.path), error=str(e))
            raise StorageError("write", str(e), {"path": str(self.path)})

        self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._flush({**self._load(), key: value})


# Singleton instance
_local_store: Optional[LocalStore] = None


def get_local_store() -> LocalStore:
    """Get or create LocalStore instance."""
    global _local_store
    if _local_store is None:
        _local_store = LocalStore(settings.store_path)
    return _local_store
