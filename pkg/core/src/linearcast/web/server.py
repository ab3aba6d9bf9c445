"""
Web server for Linearcast.

Builds the FastAPI application serving now-playing descriptors, channel and
schedule management, and media files.
"""

from __future__ import annotations

import logging
from typing import Callable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from linearcast.catalog.static_media_catalog import StaticMediaCatalog
from linearcast.infra.cache import VersionedCache
from linearcast.infra.exceptions import (
    ChannelNotFoundError,
    ResourceError,
    ScheduleValidationError,
    ValidationError,
)
from linearcast.infra.settings import Settings
from linearcast.infra.settings import settings as default_settings
from linearcast.runtime.clock import Clock, SystemClock
from linearcast.runtime.now_playing import NowPlayingService
from linearcast.runtime.providers import JsonScheduleStore
from linearcast.shared.schemas import ErrorResponse
from linearcast.web.api import channels, media, now_playing

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, violations: list[str] | None = None) -> JSONResponse:
    body = ErrorResponse(error=message, violations=violations or [])
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_defaults=True))


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChannelNotFoundError)
    async def channel_not_found(request: Request, exc: ChannelNotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(ResourceError)
    async def resource_missing(request: Request, exc: ResourceError):
        return _error(404, str(exc))

    @app.exception_handler(ValidationError)
    async def validation_failed(request: Request, exc: ValidationError):
        if isinstance(exc, ScheduleValidationError):
            logger.warning("Rejected schedule: %s", exc)
            return _error(400, exc.message, exc.violations)
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_invalid(request: Request, exc: RequestValidationError):
        violations = [
            ".".join(str(part) for part in err.get("loc", ())) + ": " + err.get("msg", "invalid")
            for err in exc.errors()
        ]
        return _error(400, "Invalid request", violations)


def create_app(
    store: JsonScheduleStore | None = None,
    catalog_loader: Callable[[], StaticMediaCatalog] | None = None,
    clock: Clock | None = None,
    app_settings: Settings | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        store: Schedule store; defaults to ``schedule.json`` under ``DATA_DIR``
        catalog_loader: Returns the current media catalog; defaults to a cached
            read of ``media-index.json`` under ``DATA_DIR``
        clock: Time source for resolution; defaults to the system clock
        app_settings: Settings; defaults to the process-wide instance
    """
    cfg = app_settings or default_settings
    if store is None:
        store = JsonScheduleStore(cfg.schedule_path)
    if catalog_loader is None:
        catalog_cache: VersionedCache[StaticMediaCatalog] = VersionedCache()

        def _load_catalog() -> StaticMediaCatalog:
            return StaticMediaCatalog.from_file(cfg.media_index_path, cache=catalog_cache)

        catalog_loader = _load_catalog
    clock = clock or SystemClock()

    app = FastAPI(title="Linearcast", description="Scheduled broadcast channels")
    app.state.settings = cfg
    app.state.store = store
    app.state.catalog_loader = catalog_loader
    app.state.clock = clock
    app.state.now_playing_service = NowPlayingService(
        store,
        catalog_loader,
        clock,
        tz=cfg.schedule_timezone,
        media_base_url=cfg.media_base_url,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_exception_handlers(app)

    app.include_router(now_playing.router)
    app.include_router(channels.router)
    app.include_router(media.router)

    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok", "channels": len(store.list_channels())}

    return app


def run_server(host: str | None = None, port: int | None = None, app_settings: Settings | None = None) -> None:
    """Serve the app with uvicorn until interrupted."""
    cfg = app_settings or default_settings
    app = create_app(app_settings=cfg)
    bind_host = host or cfg.host
    bind_port = port or cfg.port
    logger.info("Starting Linearcast server on %s:%s", bind_host, bind_port)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=cfg.log_level.lower())
