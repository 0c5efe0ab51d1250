from __future__ import annotations


class StoreError(Exception):
    """Base class for every failure raised by the key-value store."""

    code = "store_error"

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.key = key


class KeyValidationError(StoreError, ValueError):
    code = "invalid_key"


class EmptyKeyError(KeyValidationError):
    code = "empty_key"

    def __init__(self) -> None:
        super().__init__("key cannot be empty", key="")


class KeyTooLongError(KeyValidationError):
    code = "key_too_long"

    def __init__(self, key: str, max_length: int) -> None:
        super().__init__(f"key length exceeds {max_length} characters", key=key)
        self.max_length = max_length


class MalformedJsonError(StoreError, ValueError):
    code = "malformed_json"

    def __init__(self, detail: str, *, key: str | None = None) -> None:
        super().__init__(f"invalid JSON format: {detail}", key=key)
        self.detail = detail


class DuplicateKeyError(StoreError):
    code = "duplicate_key"

    def __init__(self, key: str) -> None:
        super().__init__(f"key already exists: {key!r}", key=key)


class KeyNotFoundError(StoreError, LookupError):
    code = "key_not_found"

    def __init__(self, key: str) -> None:
        super().__init__(f"key not found: {key!r}", key=key)


class PersistenceError(StoreError):
    code = "persistence_error"

    def __init__(self, message: str, *, path: object = None) -> None:
        super().__init__(message)
        self.path = path


class StoreIOError(PersistenceError):
    """Reading, writing or creating directories for the store file failed."""

    code = "io_error"


class StoreParseError(PersistenceError):
    """The store file is not a JSON object of key -> JSON-text strings."""

    code = "parse_error"
