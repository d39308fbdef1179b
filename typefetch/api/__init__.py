"""typefetch REST API — FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from typefetch import __version__
from typefetch.api.deps import get_settings, init_extractor
from typefetch.api.errors import register_error_handlers
from typefetch.api.middleware.request_id import RequestIDMiddleware
from typefetch.api.routers import typings
from typefetch.core.config import Settings
from typefetch.core.logging import setup_logging
from typefetch.engines.typings_extractor.scratch import sweep_stale_scratch

log = structlog.get_logger("typefetch.api")


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: prepare the scratch root and sweep leftovers from crashed runs."""
    settings = get_settings()
    settings.scratch_root.mkdir(parents=True, exist_ok=True)
    removed = sweep_stale_scratch(settings.scratch_root, settings.stale_scratch_seconds)
    log.info(
        "api.started",
        scratch_root=str(settings.scratch_root),
        max_response_bytes=settings.max_response_bytes,
        stale_removed=removed,
    )
    yield


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    setup_logging()
    settings = init_extractor(settings).settings

    app = FastAPI(
        title="typefetch",
        version=__version__,
        docs_url="/api/v1/docs",
        openapi_url="/api/v1/openapi.json",
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(typings.router, prefix="/api/v1/typings", tags=["typings"])

    return app
