from __future__ import annotations

import base64
import binascii
import logging
import secrets
from typing import Optional, Protocol

from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)

BASIC_CHALLENGE = {"WWW-Authenticate": 'Basic realm="kvstore"'}


class CredentialVerifier(Protocol):
    def verify(self, username: str, password: str) -> bool:
        ...


class StaticCredentialVerifier(CredentialVerifier):
    """Accepts exactly one username/password pair (constant-time comparison)."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username.encode("utf-8")
        self._password = password.encode("utf-8")

    def verify(self, username: str, password: str) -> bool:
        user_ok = secrets.compare_digest(username.encode("utf-8"), self._username)
        pass_ok = secrets.compare_digest(password.encode("utf-8"), self._password)
        return user_ok and pass_ok


class AllowAllVerifier(CredentialVerifier):
    def verify(self, username: str, password: str) -> bool:
        return True


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=f"Unauthorized: {detail}", headers=BASIC_CHALLENGE)


def _decode_basic_auth(encoded: str) -> tuple[Optional[str], Optional[str]]:
    try:
        raw = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None, None
    if ":" not in raw:
        return None, None
    username, password = raw.split(":", 1)
    return username, password


def require_credentials(request: Request) -> str | None:
    """
    FastAPI dependency: check HTTP Basic credentials against app.state.verifier.
    Returns the authenticated username (None when auth is disabled).
    """
    verifier: CredentialVerifier | None = getattr(request.app.state, "verifier", None)
    if verifier is None or isinstance(verifier, AllowAllVerifier):
        return None

    auth = request.headers.get("Authorization")
    if not auth:
        raise _unauthorized("Missing Authorization Header")
    if not auth.lower().startswith("basic "):
        raise _unauthorized("Invalid Authentication Format")

    username, password = _decode_basic_auth(auth.split(" ", 1)[1])
    if username is None or password is None:
        raise _unauthorized("Invalid Authentication Format")

    if not verifier.verify(username, password):
        logger.warning("AUTH: rejected credentials for user=%s", username)
        raise _unauthorized("Invalid Credentials")
    return username
