from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import kvstore...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


TEST_USER = "admin"
TEST_PASSWORD = "s3cret"


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "store.json"


@pytest.fixture
def store(store_path: Path):
    from kvstore.engine import JsonKeyValueStore

    return JsonKeyValueStore(store_path)


@pytest.fixture
def sandbox_env(monkeypatch: pytest.MonkeyPatch, store_path: Path) -> Path:
    """
    Point settings at a temp store file so tests never touch a real ./data.
    """
    for name in ("KVSTORE_SAVE_ON_WRITE", "KVSTORE_STRICT_LOAD", "KVSTORE_MAX_KEY_LENGTH", "KVSTORE_AUTH_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("KVSTORE_DATA_FILE", str(store_path))
    monkeypatch.setenv("KVSTORE_AUTH_USERNAME", TEST_USER)
    monkeypatch.setenv("KVSTORE_AUTH_PASSWORD", TEST_PASSWORD)
    monkeypatch.setenv("KVSTORE_SAVE_ON_SHUTDOWN", "true")
    return store_path


@pytest.fixture
def auth() -> tuple[str, str]:
    return (TEST_USER, TEST_PASSWORD)
