from __future__ import annotations

import json
from typing import Any

from .errors import EmptyKeyError, KeyTooLongError, MalformedJsonError

MAX_KEY_LENGTH = 256


def _reject_constant(name: str) -> Any:
    # json.loads accepts NaN/Infinity by default; they are not part of standard JSON.
    raise ValueError(f"non-standard constant {name}")


def validate_key(key: str, *, max_length: int | None = MAX_KEY_LENGTH) -> None:
    """
    Ensure the key is non-empty and, unless ``max_length`` is None, no longer
    than ``max_length`` characters.
    """
    if key == "":
        raise EmptyKeyError()
    if max_length is not None and len(key) > max_length:
        raise KeyTooLongError(key, max_length)


def validate_json(text: Any) -> None:
    """
    Syntax-only check: ``text`` must parse as a single JSON value of any kind.
    """
    if not isinstance(text, str):
        raise MalformedJsonError(f"expected text, got {type(text).__name__}")
    try:
        json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        # json.JSONDecodeError is a ValueError subclass; RecursionError on absurd nesting
        raise MalformedJsonError(str(e)) from e


def validate_entry(key: str, value: Any, *, max_length: int | None = MAX_KEY_LENGTH) -> None:
    validate_key(key, max_length=max_length)
    try:
        validate_json(value)
    except MalformedJsonError as e:
        e.key = key
        raise


def is_valid_json(text: Any) -> bool:
    try:
        validate_json(text)
    except MalformedJsonError:
        return False
    return True
