from __future__ import annotations

from .disk_store import DiskStorePersistence, LoadReport
from .engine import JsonKeyValueStore
from .errors import (
    DuplicateKeyError,
    EmptyKeyError,
    KeyNotFoundError,
    KeyTooLongError,
    KeyValidationError,
    MalformedJsonError,
    PersistenceError,
    StoreError,
    StoreIOError,
    StoreParseError,
)
from .interfaces import StorePersistence
from .paths import DEFAULT_FILE_PATH
from .repositories import AsyncJsonStoreRepository, AsyncKeyValueRepository
from .validation import MAX_KEY_LENGTH, is_valid_json, validate_entry, validate_json, validate_key

__all__ = [
    "JsonKeyValueStore",
    "DiskStorePersistence",
    "LoadReport",
    "StorePersistence",
    "AsyncKeyValueRepository",
    "AsyncJsonStoreRepository",
    "DEFAULT_FILE_PATH",
    "MAX_KEY_LENGTH",
    "validate_key",
    "validate_json",
    "validate_entry",
    "is_valid_json",
    "StoreError",
    "KeyValidationError",
    "EmptyKeyError",
    "KeyTooLongError",
    "MalformedJsonError",
    "DuplicateKeyError",
    "KeyNotFoundError",
    "PersistenceError",
    "StoreIOError",
    "StoreParseError",
]
