"""
Local File Storage Implementation

DESIGN DECISION: Each key is one file in a data directory because:
1. Users can see and copy their data with ordinary file tools
2. No database setup required
3. One write replaces one file, so a crash never corrupts other keys

TRADEOFFS:
- Every save rewrites the whole file (fine at personal scale)
- No cross-key transactions (the app only ever needs one key per save)

Writes go to a temporary file first and are then moved into place,
so readers never see a half-written document.
"""

import os
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote, unquote

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from investtrack.config import get_settings
from investtrack.services.storage.interface import (
    ConnectionError,
    KeyValueStorageInterface,
    StorageError,
)


FILE_SUFFIX = ".item"


class LocalFileStorage(KeyValueStorageInterface):
    """
    File-backed key/value storage.

    Keys are percent-encoded into file names so e-mail addresses and
    other user identifiers are safe to use directly.
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        self._directory = (
            Path(directory) if directory is not None else get_settings().storage.data_dir
        )

    @property
    def directory(self) -> Path:
        return self._directory

    def _ensure_directory(self) -> Path:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConnectionError(
                f"Cannot create data directory {self._directory}: {e}"
            ) from e
        return self._directory

    def _path_for(self, key: str) -> Path:
        if not key:
            raise StorageError("Storage key must not be empty")
        return self._directory / f"{quote(key, safe='@._-')}{FILE_SUFFIX}"

    def get_item(self, key: str) -> Optional[str]:
        """Read a key's file, or None if it doesn't exist."""
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_atomic(self, path: Path, value: str) -> None:
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)

    def set_item(self, key: str, value: str) -> None:
        """Write a key's file atomically."""
        self._ensure_directory()
        path = self._path_for(key)
        try:
            self._write_atomic(path, value)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        """Delete a key's file if present."""
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    def keys(self) -> list[str]:
        """List keys by scanning the data directory."""
        if not self._directory.exists():
            return []
        return [
            unquote(path.name[: -len(FILE_SUFFIX)])
            for path in self._directory.iterdir()
            if path.is_file() and path.name.endswith(FILE_SUFFIX)
        ]
