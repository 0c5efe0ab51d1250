from __future__ import annotations

import asyncio
import json

import pytest

from kvstore.disk_store import DiskStorePersistence
from kvstore.engine import JsonKeyValueStore
from kvstore.errors import DuplicateKeyError, KeyNotFoundError
from kvstore.repositories import AsyncJsonStoreRepository


def test_async_repository_basic_flow(store_path):
    async def _run():
        repo = AsyncJsonStoreRepository(JsonKeyValueStore(store_path))

        await repo.create("user1", '{"name":"Alice","age":30}')
        assert await repo.read("user1") == '{"name":"Alice","age":30}'

        with pytest.raises(DuplicateKeyError):
            await repo.create("user1", "{}")

        await repo.update("user1", '{"name":"Alice","age":31}')
        assert await repo.count() == 1

        await repo.delete("user1")
        with pytest.raises(KeyNotFoundError):
            await repo.read("user1")

        # nothing written without save_on_write
        assert not store_path.exists()

    asyncio.run(_run())


def test_async_repository_save_and_load(store_path):
    async def _run():
        repo = AsyncJsonStoreRepository(JsonKeyValueStore(store_path))
        await repo.create("a", "1")
        await repo.create("b", '{"x": [1]}')
        await repo.save()

        other = AsyncJsonStoreRepository(JsonKeyValueStore(store_path), DiskStorePersistence(store_path))
        report = await other.load()
        assert report.loaded == 2
        assert await other.read("b") == '{"x": [1]}'

        await other.clear()
        assert await other.count() == 0

    asyncio.run(_run())


def test_save_on_write_persists_every_mutation(store_path):
    async def _run():
        repo = AsyncJsonStoreRepository(JsonKeyValueStore(store_path), save_on_write=True)

        await repo.create("a", "1")
        assert json.loads(store_path.read_text(encoding="utf-8")) == {"a": "1"}

        await repo.update("a", "2")
        assert json.loads(store_path.read_text(encoding="utf-8")) == {"a": "2"}

        await repo.delete("a")
        assert json.loads(store_path.read_text(encoding="utf-8")) == {}

        # failed mutations do not trigger a save
        store_path.unlink()
        with pytest.raises(KeyNotFoundError):
            await repo.delete("a")
        assert not store_path.exists()

    asyncio.run(_run())


def test_concurrent_async_creates(store_path):
    async def _run():
        repo = AsyncJsonStoreRepository(JsonKeyValueStore(store_path))
        await asyncio.gather(*(repo.create(f"k{i}", str(i)) for i in range(100)))
        assert await repo.count() == 100

    asyncio.run(_run())
