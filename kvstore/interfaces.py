from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .disk_store import LoadReport
    from .engine import JsonKeyValueStore


class StorePersistence(Protocol):
    """
    Whole-store persistence: every save serializes the full mapping.
    """

    def save(self, store: "JsonKeyValueStore") -> None:
        """Persist a consistent snapshot of the store atomically."""
        ...

    def load(self, store: "JsonKeyValueStore", *, strict: bool = True) -> "LoadReport":
        """Upsert persisted entries into the store. Missing backing data is not an error."""
        ...
