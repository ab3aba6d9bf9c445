"""
REST API endpoints for channel and schedule management.

Every write goes through :class:`JsonScheduleStore`, which validates before it
persists; validation failures surface as HTTP 400 and unknown channels as 404
via the app-level exception handlers.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from linearcast.catalog.static_media_catalog import StaticMediaCatalog
from linearcast.domain.schedule import TwentyFourHourSchedule, dump_channel_schedule, normalize_channel_id
from linearcast.infra.exceptions import ChannelNotFoundError
from linearcast.runtime.providers import JsonScheduleStore
from linearcast.scheduling.conflicts import detect_conflicts
from linearcast.shared.schemas import (
    ChannelCreate,
    ChannelSummary,
    ChannelUpdate,
    ConflictPayload,
    ConflictsResponse,
)
from linearcast.web.api.deps import get_catalog, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/channels", tags=["channels"])


def _summary(channel_id: str, short_name: str | None, type_: str, active: bool) -> dict[str, Any]:
    return ChannelSummary(id=channel_id, short_name=short_name, type=type_, active=active).to_wire()


def _reference_catalog(catalog: StaticMediaCatalog) -> StaticMediaCatalog | None:
    # An empty index means nothing has been scanned yet; file checks would reject everything.
    return catalog if len(catalog) else None


# ============================================================================
# Channels
# ============================================================================


@router.get("")
def list_channels(store: JsonScheduleStore = Depends(get_store)) -> list[dict[str, Any]]:
    """List all channels sorted by id."""
    return [_summary(c.id, c.short_name, c.type, c.active) for c in store.list_channels()]


@router.post("", status_code=201)
def create_channel(data: ChannelCreate, store: JsonScheduleStore = Depends(get_store)) -> dict[str, Any]:
    """Create an empty channel. Creating an existing id returns it unchanged."""
    channel_id, schedule = store.create_channel(data.name, short_name=data.short_name, schedule_type=data.type)
    logger.info("Channel created id=%s type=%s", channel_id, schedule.type)
    return _summary(channel_id, schedule.short_name, schedule.type, schedule.active)


@router.patch("/{channel_id}")
def update_channel(
    channel_id: str,
    data: ChannelUpdate,
    store: JsonScheduleStore = Depends(get_store),
) -> dict[str, Any]:
    """Update channel metadata (short name, active flag)."""
    info = store.update_channel(channel_id, short_name=data.short_name, active=data.active)
    return _summary(info.id, info.short_name, info.type, info.active)


@router.delete("/{channel_id}")
def delete_channel(channel_id: str, store: JsonScheduleStore = Depends(get_store)) -> dict[str, Any]:
    """Delete a channel."""
    if not store.delete_channel(channel_id):
        raise ChannelNotFoundError(normalize_channel_id(channel_id) or channel_id)
    logger.info("Channel deleted id=%s", channel_id)
    return {"ok": True}


# ============================================================================
# Schedules
# ============================================================================


@router.get("/{channel_id}/schedule")
def get_schedule(channel_id: str, store: JsonScheduleStore = Depends(get_store)) -> dict[str, Any]:
    cid = normalize_channel_id(channel_id)
    return {"channel": cid, "schedule": dump_channel_schedule(store.get_channel(cid))}


@router.put("/{channel_id}/schedule")
def put_schedule(
    channel_id: str,
    payload: dict[str, Any] = Body(...),
    store: JsonScheduleStore = Depends(get_store),
    catalog: StaticMediaCatalog = Depends(get_catalog),
) -> dict[str, Any]:
    """Replace a channel's programming. Invalid schedules are never persisted."""
    cid = normalize_channel_id(channel_id)
    saved = store.save_channel_schedule(cid, payload, catalog=_reference_catalog(catalog))
    logger.info("Schedule saved channel=%s type=%s", cid, saved.type)
    return {"channel": cid, "schedule": dump_channel_schedule(saved)}


@router.get("/{channel_id}/conflicts")
def get_conflicts(channel_id: str, store: JsonScheduleStore = Depends(get_store)) -> dict[str, Any]:
    """Overlapping slot pairs of a 24-hour channel; looping channels never conflict."""
    cid = normalize_channel_id(channel_id)
    schedule = store.get_channel(cid)
    conflicts = detect_conflicts(schedule.slots) if isinstance(schedule, TwentyFourHourSchedule) else []
    return ConflictsResponse(
        channel=cid,
        conflicts=[ConflictPayload.from_conflict(c) for c in conflicts],
    ).to_wire()
