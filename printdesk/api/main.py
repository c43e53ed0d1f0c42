"""printdesk FastAPI application entry point.

Start with:
    uvicorn printdesk.api.main:app --reload --host 0.0.0.0 --port 8000

The order backend is chosen with ORDER_BACKEND (file | keyvalue | database);
see printdesk.config for the other variables.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from printdesk import __version__
from printdesk.api.routers import files, orders, upload
from printdesk.config import StorageConfig, load_storage_config
from printdesk.core.exceptions import ConfigurationError, ProjectError
from printdesk.core.logger import configure
from printdesk.services import FileService, OrderService
from printdesk.stores import LIMITATION_NOTE, OrderStore, build_order_store

logger = logging.getLogger(__name__)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, PATCH, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def _load_config() -> StorageConfig:
    try:
        return load_storage_config()
    except ValueError as exc:
        raise ConfigurationError(f"Invalid storage configuration: {exc}", cause=exc) from exc


def create_app(
    config: Optional[StorageConfig] = None,
    *,
    store: Optional[OrderStore] = None,
) -> FastAPI:
    """Build the application. ``store`` overrides the backend named in config (tests)."""
    config = config or _load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ── Startup ──────────────────────────────────────────────────
        configure()
        order_store = store or build_order_store(config)
        await order_store.initialize()
        app.state.order_service = OrderService(order_store)
        app.state.file_service = FileService(config.uploads_path, max_bytes=config.max_upload_bytes)
        logger.info(
            "API: %s order backend ready, uploads in %s",
            order_store.backend, config.uploads_path,
        )
        if order_store.backend == "keyvalue":
            logger.warning("API: %s", LIMITATION_NOTE)

        yield

        # ── Shutdown ─────────────────────────────────────────────────
        await order_store.close()
        logger.info("API: order store closed")

    app = FastAPI(
        title="printdesk API",
        version=__version__,
        description="Print-shop order intake: uploads, orders and admin operations.",
        lifespan=lifespan,
    )

    upload.set_upload_rate_limit(config.upload_rate_limit)
    app.state.limiter = upload.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(ProjectError)
    async def project_error_handler(request: Request, exc: ProjectError):
        if exc.http_status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.to_dict())
        else:
            logger.debug("%s %s -> %d %s", request.method, request.url.path, exc.http_status, exc.code)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("%s %s crashed", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # Any OPTIONS request is answered here; real CORS preflights are handled
    # by CORSMiddleware before they reach this point.
    @app.middleware("http")
    async def options_middleware(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=_CORS_HEADERS)
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────
    app.include_router(orders.router, prefix="/api")
    app.include_router(files.router, prefix="/api")
    app.include_router(upload.router, prefix="/api")
    app.include_router(files.downloads_router)

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
