"""
Local JSON File Storage

DESIGN DECISION: The store lives in a single JSON document on local disk:
1. Nothing leaves the user's machine
2. The file is human readable and trivially backed up
3. A whole-document replace keeps the model simple (one writer)

Layout inside the data directory:
- ``store.json``          current-schema store
- ``wealthflow.v1.json``  legacy single-key blob from older releases
- ``.migrated``           marker written once the legacy blob was upgraded

Writes go to a temp file in the same directory and are moved into place
with ``os.replace`` so a crash never leaves a half-written store.
Transient OS errors are retried with tenacity before being reported.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, TypeVar

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from wealthflow.config import StorageSettings, get_settings
from wealthflow.services.storage.interface import (
    BackendUnavailableError,
    CorruptDocumentError,
    StorageError,
    StoreBackend,
)


T = TypeVar("T")


class JsonFileStoreBackend(StoreBackend):
    """
    StoreBackend writing JSON files into a data directory.
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage
        self._data_dir = Path(self._settings.data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def store_path(self) -> Path:
        return self._data_dir / self._settings.store_filename

    @property
    def legacy_path(self) -> Path:
        return self._data_dir / self._settings.legacy_filename

    @property
    def marker_path(self) -> Path:
        return self._data_dir / self._settings.marker_filename

    def _run(self, operation: str, fn: Callable[..., T], *args) -> T:
        """Run a file operation, retrying OS errors, then wrap them as StorageError."""
        retrying = Retrying(
            stop=stop_after_attempt(self._settings.retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            return retrying(fn, *args)
        except PermissionError as e:
            raise BackendUnavailableError(f"Cannot access {self._data_dir}: {e}")
        except OSError as e:
            raise StorageError(f"Failed to {operation}: {e}")

    # -------------------------------------------------------------------------
    # File primitives (sync, retried by _run)
    # -------------------------------------------------------------------------

    @staticmethod
    def _read_text(path: Path) -> Optional[str]:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write_text(self, path: Path, text: str) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._data_dir, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def _remove(path: Path) -> None:
        path.unlink(missing_ok=True)

    # -------------------------------------------------------------------------
    # StoreBackend
    # -------------------------------------------------------------------------

    async def read_store(self) -> Optional[dict]:
        text = self._run("read store", self._read_text, self.store_path)
        if text is None:
            return None
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(f"{self.store_path} is not valid JSON: {e}")
        if not isinstance(document, dict):
            raise CorruptDocumentError(f"{self.store_path} does not hold a JSON object")
        return document

    async def write_store(self, document: dict) -> None:
        text = json.dumps(document, indent=2, ensure_ascii=False)
        self._run("write store", self._write_text, self.store_path, text)

    async def clear(self) -> None:
        self._run("clear store", self._remove, self.store_path)

    async def read_legacy(self) -> Optional[str]:
        return self._run("read legacy store", self._read_text, self.legacy_path)

    async def legacy_migrated(self) -> bool:
        return self._run("read migration marker", self.marker_path.exists)

    async def mark_legacy_migrated(self) -> None:
        self._run("write migration marker", self._write_text, self.marker_path, "true")
