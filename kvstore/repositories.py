from __future__ import annotations

import asyncio
from typing import Protocol

from .disk_store import DiskStorePersistence, LoadReport
from .engine import JsonKeyValueStore
from .interfaces import StorePersistence


class AsyncKeyValueRepository(Protocol):
    async def create(self, key: str, value: str) -> None: ...
    async def read(self, key: str) -> str: ...
    async def update(self, key: str, value: str) -> None: ...
    async def delete(self, key: str) -> None: ...
    async def clear(self) -> None: ...

    async def save(self) -> None: ...
    async def load(self, *, strict: bool = True) -> LoadReport: ...
    async def count(self) -> int: ...


class AsyncJsonStoreRepository(AsyncKeyValueRepository):
    """
    Async wrapper around a JsonKeyValueStore and its persistence.
    Uses asyncio.to_thread so lock waits and file I/O never block the event loop.

    With save_on_write, every successful mutation is followed by a full save.
    """

    def __init__(
        self,
        store: JsonKeyValueStore,
        persistence: StorePersistence | None = None,
        *,
        save_on_write: bool = False,
    ) -> None:
        self._store = store
        self._persistence = persistence if persistence is not None else DiskStorePersistence(store.path)
        self._save_on_write = save_on_write

    @property
    def store(self) -> JsonKeyValueStore:
        return self._store

    async def _after_write(self) -> None:
        if self._save_on_write:
            await self.save()

    async def create(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._store.create, key, value)
        await self._after_write()

    async def read(self, key: str) -> str:
        return await asyncio.to_thread(self._store.read, key)

    async def update(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._store.update, key, value)
        await self._after_write()

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._store.delete, key)
        await self._after_write()

    async def clear(self) -> None:
        await asyncio.to_thread(self._store.clear)
        await self._after_write()

    async def save(self) -> None:
        await asyncio.to_thread(self._persistence.save, self._store)

    async def load(self, *, strict: bool = True) -> LoadReport:
        return await asyncio.to_thread(self._persistence.load, self._store, strict=strict)

    async def count(self) -> int:
        return await asyncio.to_thread(len, self._store)
