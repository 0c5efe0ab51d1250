from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, TextIO

from dotenv import load_dotenv

from kvstore.disk_store import DiskStorePersistence
from kvstore.engine import JsonKeyValueStore
from kvstore.errors import StoreError
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

HELP_TEXT = """Available commands:
  create <key> <json>   - Create a new JSON object.
  read <key>            - Read a JSON object.
  update <key> <json>   - Update an existing JSON object.
  delete <key>          - Delete a JSON object.
  clear                 - Remove every entry.
  save                  - Write the store to disk now.
  help                  - Show this message.
  exit                  - Exit the CLI."""


def configure_logging(level: int | str = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _open_store(settings: Settings, file: str | None) -> tuple[JsonKeyValueStore, DiskStorePersistence]:
    store = JsonKeyValueStore(file or settings.data_file, max_key_length=settings.max_key_length)
    return store, DiskStorePersistence(store.path)


def _load(store: JsonKeyValueStore, persistence: DiskStorePersistence, *, strict: bool) -> bool:
    try:
        report = persistence.load(store, strict=strict)
    except StoreError as e:
        logger.error("STORE LOAD: %s", e.message)
        return False
    if report.skipped:
        logger.warning("STORE LOAD: skipped %d corrupt entries: %s", len(report.skipped), report.skipped)
    return True


def execute(store: JsonKeyValueStore, persistence: DiskStorePersistence, line: str, out: TextIO) -> bool:
    """
    Run one REPL line against the store. Returns False when the session should end.
    Values are the remaining tokens re-joined with single spaces.
    """
    args = line.split()
    if not args:
        print("Invalid input. Please enter a command.", file=out)
        return True

    command = args[0].lower()
    if command in ("exit", "quit"):
        print("Exiting... Goodbye!", file=out)
        return False

    try:
        if command == "create":
            if len(args) < 3:
                print("Usage: create <key> <json>", file=out)
            else:
                store.create(args[1], " ".join(args[2:]))
                print(f"JSON with key '{args[1]}' created successfully!", file=out)
        elif command == "read":
            if len(args) < 2:
                print("Usage: read <key>", file=out)
            else:
                value = store.read(args[1])
                print(f"JSON for key '{args[1]}':\n{value}", file=out)
        elif command == "update":
            if len(args) < 3:
                print("Usage: update <key> <json>", file=out)
            else:
                store.update(args[1], " ".join(args[2:]))
                print(f"JSON with key '{args[1]}' updated successfully!", file=out)
        elif command == "delete":
            if len(args) < 2:
                print("Usage: delete <key>", file=out)
            else:
                store.delete(args[1])
                print(f"JSON with key '{args[1]}' deleted successfully!", file=out)
        elif command == "clear":
            store.clear()
            print("Store cleared.", file=out)
        elif command == "save":
            persistence.save(store)
            print(f"Store saved to {persistence.path}.", file=out)
        elif command == "help":
            print(HELP_TEXT, file=out)
        else:
            print("Invalid command. Type 'help' for a list of available commands.", file=out)
    except StoreError as e:
        print(f"Error ({e.code}): {e.message}", file=out)
    return True


def run_repl(
    store: JsonKeyValueStore,
    persistence: DiskStorePersistence,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    prompt: str = "kvstore> ",
) -> None:
    stdin = stdin or sys.stdin
    out = stdout or sys.stdout
    print("Welcome to the JSON Key-Value Store CLI!", file=out)
    print("Type 'help' for a list of commands or 'exit' to quit.", file=out)
    while True:
        print(prompt, end="", file=out, flush=True)
        line = stdin.readline()
        if not line:
            print("\nInput closed. Exiting...", file=out)
            return
        if not execute(store, persistence, line, out):
            return


def _handle_repl(args: argparse.Namespace, settings: Settings) -> int:
    store, persistence = _open_store(settings, args.file)
    loaded = _load(store, persistence, strict=settings.strict_load)
    run_repl(store, persistence)
    if args.no_autosave:
        return 0
    if not loaded:
        logger.warning("STORE SAVE: skipped because the startup load failed")
        return 1
    try:
        persistence.save(store)
    except StoreError as e:
        logger.error("STORE SAVE: %s", e.message)
        return 1
    return 0


def _one_shot(
    action: Callable[[JsonKeyValueStore, argparse.Namespace], str | None], *, mutates: bool
) -> Callable[[argparse.Namespace, Settings], int]:
    def handler(args: argparse.Namespace, settings: Settings) -> int:
        store, persistence = _open_store(settings, args.file)
        if not _load(store, persistence, strict=settings.strict_load):
            return 1
        try:
            output = action(store, args)
            if mutates:
                persistence.save(store)
        except StoreError as e:
            print(f"Error ({e.code}): {e.message}", file=sys.stderr)
            return 1
        if output is not None:
            print(output)
        return 0

    return handler


def _handle_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from app import create_app

    uvicorn.run(
        create_app(settings=settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kvstore", description="JSON key-value store")
    subparsers = parser.add_subparsers(dest="command", required=True)

    file_parent = argparse.ArgumentParser(add_help=False)
    file_parent.add_argument("--file", default=None, help="Store file (default: KVSTORE_DATA_FILE or ./data/store.json).")

    repl_parser = subparsers.add_parser("repl", parents=[file_parent], help="Interactive shell.")
    repl_parser.add_argument("--no-autosave", action="store_true", help="Do not save the store on exit.")
    repl_parser.set_defaults(func=_handle_repl)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.set_defaults(func=_handle_serve)

    create_parser = subparsers.add_parser("create", parents=[file_parent], help="Create a key.")
    create_parser.add_argument("key")
    create_parser.add_argument("value", nargs="+", help="JSON text; tokens are joined with spaces.")
    create_parser.set_defaults(
        func=_one_shot(lambda s, a: s.create(a.key, " ".join(a.value)), mutates=True)
    )

    read_parser = subparsers.add_parser("read", parents=[file_parent], help="Print the JSON stored under a key.")
    read_parser.add_argument("key")
    read_parser.set_defaults(func=_one_shot(lambda s, a: s.read(a.key), mutates=False))

    update_parser = subparsers.add_parser("update", parents=[file_parent], help="Replace an existing key.")
    update_parser.add_argument("key")
    update_parser.add_argument("value", nargs="+")
    update_parser.set_defaults(
        func=_one_shot(lambda s, a: s.update(a.key, " ".join(a.value)), mutates=True)
    )

    delete_parser = subparsers.add_parser("delete", parents=[file_parent], help="Remove a key.")
    delete_parser.add_argument("key")
    delete_parser.set_defaults(func=_one_shot(lambda s, a: s.delete(a.key), mutates=True))

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv("local.env")
    settings = get_settings()
    configure_logging(settings.log_level)
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
