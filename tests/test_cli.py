from __future__ import annotations

import io
import json

import cli
from kvstore.disk_store import DiskStorePersistence
from kvstore.engine import JsonKeyValueStore


def _session(store: JsonKeyValueStore, *lines: str) -> str:
    out = io.StringIO()
    cli.run_repl(store, DiskStorePersistence(store.path), stdin=io.StringIO("".join(f"{l}\n" for l in lines)), stdout=out)
    return out.getvalue()


def test_repl_crud_session(store):
    output = _session(
        store,
        'create user1 {"name": "Alice", "age": 30}',
        "read user1",
        'update user1 {"name": "Alice", "age": 31}',
        "delete user1",
        "read user1",
        "exit",
    )
    assert "JSON with key 'user1' created successfully!" in output
    assert 'JSON for key \'user1\':\n{"name": "Alice", "age": 30}' in output
    assert "JSON with key 'user1' updated successfully!" in output
    assert "JSON with key 'user1' deleted successfully!" in output
    assert "Error (key_not_found)" in output
    assert output.rstrip().endswith("Exiting... Goodbye!")


def test_repl_reports_errors_and_usage(store):
    output = _session(
        store,
        "",
        "create onlykey",
        "create k {bad",
        "update",
        "frobnicate",
        "help",
        "quit",
    )
    assert "Invalid input. Please enter a command." in output
    assert "Usage: create <key> <json>" in output
    assert "Error (malformed_json)" in output
    assert "Usage: update <key> <json>" in output
    assert "Invalid command." in output
    assert "Available commands:" in output
    assert len(store) == 0


def test_repl_save_and_clear(store, store_path):
    output = _session(store, "create a 1", "save", "clear")
    assert f"Store saved to {store_path}." in output
    assert "Store cleared." in output
    assert "Input closed." in output
    assert json.loads(store_path.read_text(encoding="utf-8")) == {"a": "1"}
    assert len(store) == 0


def test_one_shot_commands(sandbox_env, capsys):
    assert cli.main(["create", "user1", '{"name":', '"Alice"}']) == 0
    assert json.loads(sandbox_env.read_text(encoding="utf-8")) == {"user1": '{"name": "Alice"}'}

    assert cli.main(["read", "user1"]) == 0
    assert capsys.readouterr().out.strip() == '{"name": "Alice"}'

    assert cli.main(["create", "user1", "{}"]) == 1
    assert "duplicate_key" in capsys.readouterr().err

    assert cli.main(["update", "user1", "[1]"]) == 0
    assert cli.main(["delete", "user1"]) == 0
    assert json.loads(sandbox_env.read_text(encoding="utf-8")) == {}

    assert cli.main(["read", "user1"]) == 1


def test_one_shot_file_override(sandbox_env, tmp_path):
    other = tmp_path / "other.json"
    assert cli.main(["create", "--file", str(other), "k", "true"]) == 0
    assert json.loads(other.read_text(encoding="utf-8")) == {"k": "true"}
    assert not sandbox_env.exists()


def test_one_shot_refuses_corrupt_store(sandbox_env):
    sandbox_env.parent.mkdir(parents=True, exist_ok=True)
    sandbox_env.write_text("{corrupt", encoding="utf-8")
    assert cli.main(["create", "k", "1"]) == 1
    assert sandbox_env.read_text(encoding="utf-8") == "{corrupt"


def test_repl_command_autosaves(sandbox_env, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("create a 1\nexit\n"))
    assert cli.main(["repl"]) == 0
    assert json.loads(sandbox_env.read_text(encoding="utf-8")) == {"a": "1"}


def test_repl_no_autosave(sandbox_env, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("create a 1\nexit\n"))
    assert cli.main(["repl", "--no-autosave"]) == 0
    assert not sandbox_env.exists()
