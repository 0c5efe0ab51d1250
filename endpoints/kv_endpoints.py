from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from endpoints.auth import require_credentials
from kvstore.errors import (
    DuplicateKeyError,
    KeyNotFoundError,
    KeyValidationError,
    MalformedJsonError,
    PersistenceError,
    StoreError,
)
from kvstore.repositories import AsyncJsonStoreRepository

router = APIRouter(tags=["kv"], dependencies=[Depends(require_credentials)])
logger = logging.getLogger(__name__)

ERROR_STATUS: list[tuple[type[StoreError], int]] = [
    (KeyNotFoundError, 404),
    (KeyValidationError, 400),
    (MalformedJsonError, 400),
    (DuplicateKeyError, 400),
    (PersistenceError, 500),
]


class KeyValueRequest(BaseModel):
    key: str
    # JSON text; structured JSON is accepted too and serialized compactly.
    value: Any

    def value_text(self) -> str:
        if isinstance(self.value, str):
            return self.value
        return json.dumps(self.value, separators=(",", ":"), ensure_ascii=False)


class MessageResponse(BaseModel):
    message: str
    data: str | None = None


def status_for(exc: StoreError) -> int:
    for cls, status in ERROR_STATUS:
        if isinstance(exc, cls):
            return status
    return 500


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("STORE %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"detail": exc.message, "code": exc.code}, status_code=status)


def get_repository(request: Request) -> AsyncJsonStoreRepository:
    return request.app.state.repository


@router.post("/create", status_code=201, response_model=MessageResponse, response_model_exclude_none=True)
async def create_key_value(
    body: KeyValueRequest, repo: AsyncJsonStoreRepository = Depends(get_repository)
) -> MessageResponse:
    await repo.create(body.key, body.value_text())
    return MessageResponse(message="Key-value pair created successfully")


@router.get("/read", response_model=MessageResponse, response_model_exclude_none=True)
async def read_key_value(key: str = "", repo: AsyncJsonStoreRepository = Depends(get_repository)) -> MessageResponse:
    value = await repo.read(key)
    return MessageResponse(message="Key-value pair retrieved", data=value)


@router.put("/update", response_model=MessageResponse, response_model_exclude_none=True)
async def update_key_value(
    body: KeyValueRequest, repo: AsyncJsonStoreRepository = Depends(get_repository)
) -> MessageResponse:
    await repo.update(body.key, body.value_text())
    return MessageResponse(message="Key-value pair updated successfully")


@router.delete("/delete", response_model=MessageResponse, response_model_exclude_none=True)
async def delete_key_value(key: str = "", repo: AsyncJsonStoreRepository = Depends(get_repository)) -> MessageResponse:
    await repo.delete(key)
    return MessageResponse(message="Key-value pair deleted successfully")


@router.post("/save", response_model=MessageResponse, response_model_exclude_none=True)
async def save_store(repo: AsyncJsonStoreRepository = Depends(get_repository)) -> MessageResponse:
    await repo.save()
    return MessageResponse(message="Store saved successfully")
