from __future__ import annotations

import contextlib
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterator, Mapping

from .errors import DuplicateKeyError, KeyNotFoundError
from .locks import ReadWriteLock
from .paths import resolve_store_path
from .validation import MAX_KEY_LENGTH, validate_json, validate_key

if TYPE_CHECKING:
    from .disk_store import LoadReport


class JsonKeyValueStore:
    """
    In-memory map of key -> JSON text guarded by a readers-writer lock.

    The validated operations (create/read/update/delete) raise StoreError
    subclasses; get/set skip validation and are meant for administrative paths
    such as bulk restore. Nothing here logs: callers decide how to report.
    """

    def __init__(self, path: str | Path | None = None, *, max_key_length: int | None = MAX_KEY_LENGTH):
        self._data: dict[str, str] = {}
        self._lock = ReadWriteLock()
        self._path = resolve_store_path(path)
        self._max_key_length = max_key_length

    @property
    def path(self) -> Path:
        return self._path

    @property
    def max_key_length(self) -> int | None:
        return self._max_key_length

    def _check_key(self, key: str) -> None:
        validate_key(key, max_length=self._max_key_length)

    # -------------------------------------------------------------------
    # Validated operations
    # -------------------------------------------------------------------
    def create(self, key: str, value: str) -> None:
        with self._lock.write_locked():
            self._check_key(key)
            if key in self._data:
                raise DuplicateKeyError(key)
            validate_json(value)
            self._data[key] = value

    def read(self, key: str) -> str:
        with self._lock.read_locked():
            self._check_key(key)
            try:
                return self._data[key]
            except KeyError:
                raise KeyNotFoundError(key) from None

    def update(self, key: str, value: str) -> None:
        with self._lock.write_locked():
            self._check_key(key)
            if key not in self._data:
                raise KeyNotFoundError(key)
            validate_json(value)
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock.write_locked():
            self._check_key(key)
            if key not in self._data:
                raise KeyNotFoundError(key)
            del self._data[key]

    def clear(self) -> None:
        with self._lock.write_locked():
            self._data = {}

    # -------------------------------------------------------------------
    # Non-validating administrative pair
    # -------------------------------------------------------------------
    def get(self, key: str) -> str | None:
        with self._lock.read_locked():
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock.write_locked():
            self._data[key] = value

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock.read_locked():
            return key in self._data

    # -------------------------------------------------------------------
    # Views used by persistence. The lock is not re-entrant, so do not call
    # store methods from inside a view.
    # -------------------------------------------------------------------
    @contextlib.contextmanager
    def snapshot_view(self) -> Iterator[Mapping[str, str]]:
        with self._lock.read_locked():
            yield MappingProxyType(self._data)

    @contextlib.contextmanager
    def exclusive_view(self) -> Iterator[dict[str, str]]:
        with self._lock.write_locked():
            yield self._data

    # -------------------------------------------------------------------
    # Persistence shortcuts against the store's own path
    # -------------------------------------------------------------------
    def save(self) -> None:
        from .disk_store import DiskStorePersistence

        DiskStorePersistence(self._path).save(self)

    def load(self, *, strict: bool = True) -> "LoadReport":
        from .disk_store import DiskStorePersistence

        return DiskStorePersistence(self._path).load(self, strict=strict)
