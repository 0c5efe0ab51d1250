from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

from endpoints.auth import AllowAllVerifier, CredentialVerifier, StaticCredentialVerifier
from kvstore.disk_store import DiskStorePersistence
from kvstore.engine import JsonKeyValueStore
from kvstore.errors import StoreError
from kvstore.interfaces import StorePersistence
from kvstore.repositories import AsyncJsonStoreRepository
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    repo: AsyncJsonStoreRepository = app.state.repository
    settings: Settings = app.state.settings

    app.state.load_failed = False
    try:
        report = await repo.load(strict=settings.strict_load)
    except StoreError as e:
        # Start empty rather than refuse to serve; the file is left untouched.
        app.state.load_failed = True
        logger.error("STORE LOAD: %s; starting with an empty store", e.message)
    else:
        if report.found:
            logger.info("STORE LOAD: %d entries from %s", report.loaded, report.path)
        else:
            logger.info("STORE LOAD: %s does not exist; starting empty", report.path)
        if report.skipped:
            logger.warning("STORE LOAD: skipped %d corrupt entries: %s", len(report.skipped), report.skipped)

    yield

    if not settings.save_on_shutdown:
        return
    if app.state.load_failed:
        logger.warning("STORE SAVE: skipped on shutdown because the startup load failed")
        return
    try:
        await repo.save()
        logger.info("STORE SAVE: wrote %s", repo.store.path)
    except StoreError as e:
        logger.error("STORE SAVE: %s", e.message)


def build_verifier(settings: Settings) -> CredentialVerifier:
    if not settings.auth_enabled:
        logger.warning("AUTH: disabled; every request is accepted")
        return AllowAllVerifier()
    return StaticCredentialVerifier(settings.auth_username, settings.auth_password)


def create_app(
    store: JsonKeyValueStore | None = None,
    *,
    persistence: StorePersistence | None = None,
    verifier: CredentialVerifier | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    load_dotenv("local.env")

    from endpoints.kv_endpoints import router as kv_router, store_error_handler

    settings = settings or get_settings()
    if store is None:
        store = JsonKeyValueStore(settings.data_file, max_key_length=settings.max_key_length)
    if persistence is None:
        persistence = DiskStorePersistence(store.path)

    app = FastAPI(title="JSON Key-Value Store", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = AsyncJsonStoreRepository(store, persistence, save_on_write=settings.save_on_write)
    app.state.verifier = verifier if verifier is not None else build_verifier(settings)

    if settings.log_requests:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            logger.info(
                "REQUEST: %s %s from %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                request.client.host if request.client else "-",
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            return response

    app.add_exception_handler(StoreError, store_error_handler)

    @app.get("/health")
    async def health():
        repo: AsyncJsonStoreRepository = app.state.repository
        return JSONResponse({"status": "ok", "entries": await repo.count()})

    app.include_router(kv_router)

    return app


app = create_app()
