"""Request-scoped accessors for objects the app factory puts on ``app.state``."""

from __future__ import annotations

from fastapi import Request

from linearcast.catalog.static_media_catalog import StaticMediaCatalog
from linearcast.infra.settings import Settings
from linearcast.runtime.clock import Clock
from linearcast.runtime.now_playing import NowPlayingService
from linearcast.runtime.providers import JsonScheduleStore


def get_store(request: Request) -> JsonScheduleStore:
    return request.app.state.store


def get_catalog(request: Request) -> StaticMediaCatalog:
    return request.app.state.catalog_loader()


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_now_playing_service(request: Request) -> NowPlayingService:
    return request.app.state.now_playing_service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
