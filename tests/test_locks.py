from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from kvstore.locks import PathLockRegistry, ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)

    def reader() -> None:
        with lock.read_locked():
            # all three readers must be inside at the same time to pass the barrier
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not any(t.is_alive() for t in threads)


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    events: list[str] = []
    lock.acquire_write()

    def reader() -> None:
        with lock.read_locked():
            events.append("read")

    t = threading.Thread(target=reader)
    t.start()
    time.sleep(0.05)
    assert events == []
    events.append("write-done")
    lock.release_write()
    t.join(timeout=5)
    assert events == ["write-done", "read"]


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    order: list[str] = []
    lock.acquire_read()

    def writer() -> None:
        with lock.write_locked():
            order.append("write")

    def late_reader() -> None:
        with lock.read_locked():
            order.append("read")

    w = threading.Thread(target=writer)
    w.start()
    time.sleep(0.05)
    r = threading.Thread(target=late_reader)
    r.start()
    time.sleep(0.05)
    assert order == []
    lock.release_read()
    w.join(timeout=5)
    r.join(timeout=5)
    assert order == ["write", "read"]


def test_unbalanced_release_raises():
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()


def test_path_lock_registry_is_stable_per_path(tmp_path: Path):
    registry = PathLockRegistry()
    a = registry.lock_for(tmp_path / "store.json")
    b = registry.lock_for(tmp_path / "sub" / ".." / "store.json")
    c = registry.lock_for(tmp_path / "other.json")
    assert a is b
    assert a is not c
