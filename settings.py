from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Persistence
    data_file: str
    strict_load: bool
    save_on_write: bool
    save_on_shutdown: bool

    # Validation (None disables the length limit)
    max_key_length: int | None

    # Basic auth
    auth_enabled: bool
    auth_username: str
    auth_password: str

    # Logging
    log_requests: bool
    log_level: str

    # Server
    host: str
    port: int


def get_settings() -> Settings:
    max_key_length = _env_int("KVSTORE_MAX_KEY_LENGTH", 256)

    # NOTE: default password is insecure; set KVSTORE_AUTH_PASSWORD in production
    auth_username = os.getenv("KVSTORE_AUTH_USERNAME", "admin")
    auth_password = os.getenv("KVSTORE_AUTH_PASSWORD", "dev-only-password")

    return Settings(
        data_file=os.getenv("KVSTORE_DATA_FILE", "./data/store.json"),
        strict_load=_env_bool("KVSTORE_STRICT_LOAD", True),
        save_on_write=_env_bool("KVSTORE_SAVE_ON_WRITE", False),
        save_on_shutdown=_env_bool("KVSTORE_SAVE_ON_SHUTDOWN", True),
        max_key_length=max_key_length if max_key_length > 0 else None,
        auth_enabled=_env_bool("KVSTORE_AUTH_ENABLED", True),
        auth_username=auth_username,
        auth_password=auth_password,
        log_requests=_env_bool("KVSTORE_LOG_REQUESTS", True),
        log_level=os.getenv("KVSTORE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        host=os.getenv("KVSTORE_HOST", "127.0.0.1"),
        port=_env_int("KVSTORE_PORT", 8080),
    )
