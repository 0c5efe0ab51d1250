from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from json_store import atomic_write_json, read_json

from .errors import KeyValidationError, StoreIOError, StoreParseError
from .interfaces import StorePersistence
from .locks import GLOBAL_PATH_LOCKS
from .paths import resolve_store_path
from .validation import is_valid_json, validate_key

if TYPE_CHECKING:
    from .engine import JsonKeyValueStore


class LoadReport(BaseModel):
    path: str
    found: bool = False
    loaded: int = 0
    skipped: list[str] = Field(default_factory=list)


class DiskStorePersistence(StorePersistence):
    """
    Stores the whole key-value mapping as a single JSON object on disk:

      { "<key>": "<JSON text>", ... }

    Values stay JSON strings holding the original text; they are never parsed
    into nested structure. Writes go through a temp file and a rename.
    """

    def __init__(self, path: str | Path | None = None):
        self._path = resolve_store_path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def exists(self) -> bool:
        return self._path.exists()

    def save(self, store: "JsonKeyValueStore") -> None:
        lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        with store.snapshot_view() as data, lock:
            try:
                atomic_write_json(self._path, dict(data))
            except (OSError, ValueError) as e:
                # ValueError covers text that cannot be encoded, e.g. lone surrogates
                raise StoreIOError(f"failed to write {self._path}: {e}", path=self._path) from e

    def load(self, store: "JsonKeyValueStore", *, strict: bool = True) -> LoadReport:
        report = LoadReport(path=str(self._path))
        lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        with store.exclusive_view() as data, lock:
            if not self._path.exists():
                return report
            report.found = True
            doc = self._read_document()
            entries = self._entries_from_document(
                doc, strict=strict, report=report, max_key_length=store.max_key_length
            )
            data.update(entries)
            report.loaded = len(entries)
        return report

    def _read_document(self) -> dict[str, Any]:
        try:
            raw = read_json(self._path)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise StoreParseError(f"failed to parse {self._path}: {e}", path=self._path) from e
        except OSError as e:
            raise StoreIOError(f"failed to read {self._path}: {e}", path=self._path) from e
        if raw is None:
            raise StoreParseError(f"failed to parse {self._path}: file is empty", path=self._path)
        if not isinstance(raw, dict):
            raise StoreParseError(
                f"failed to parse {self._path}: expected a JSON object, got {type(raw).__name__}",
                path=self._path,
            )
        return raw

    def _entries_from_document(
        self, doc: dict[str, Any], *, strict: bool, report: LoadReport, max_key_length: int | None
    ) -> dict[str, str]:
        entries: dict[str, str] = {}
        for key, value in doc.items():
            try:
                validate_key(key, max_length=max_key_length)
            except KeyValidationError as e:
                if strict:
                    raise StoreParseError(
                        f"failed to parse {self._path}: invalid key {key!r}: {e.message}",
                        path=self._path,
                    ) from e
                report.skipped.append(key)
                continue
            if strict:
                if not isinstance(value, str):
                    raise StoreParseError(
                        f"failed to parse {self._path}: value for {key!r} is not a string",
                        path=self._path,
                    )
                entries[key] = value
                continue
            # Defensive load: keep what is usable, report the rest.
            if not isinstance(value, str) or not is_valid_json(value):
                report.skipped.append(key)
                continue
            entries[key] = value
        return entries
