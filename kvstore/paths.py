from __future__ import annotations

from pathlib import Path

# Relative to the working directory, like ./data/store.json on the command line.
DEFAULT_FILE_PATH = Path("data") / "store.json"


def resolve_store_path(path: str | Path | None) -> Path:
    if path is None or str(path).strip() == "":
        return DEFAULT_FILE_PATH
    return Path(path).expanduser()
