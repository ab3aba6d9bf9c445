"""
Now-playing API.

Resolves what a channel is airing at request time. Every viewer asking at the
same instant gets the same answer; ``nowPlaying: null`` means off air.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from linearcast.domain.schedule import normalize_channel_id
from linearcast.runtime.clock import Clock
from linearcast.runtime.now_playing import NowPlayingService
from linearcast.shared.schemas import NowPlayingPayload, NowPlayingResponse
from linearcast.web.api.deps import get_clock, get_now_playing_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["now-playing"])


@router.get("/now-playing", response_model=NowPlayingResponse)
def get_now_playing(
    channel: str = Query(..., min_length=1, description="Channel id"),
    service: NowPlayingService = Depends(get_now_playing_service),
    clock: Clock = Depends(get_clock),
) -> JSONResponse:
    """Return the playback descriptor for ``channel``."""
    channel_id = normalize_channel_id(channel)
    server_time_ms = clock.now_ms()
    result = service.now_playing(channel_id, at_ms=server_time_ms)

    response = NowPlayingResponse(
        channel=channel_id,
        now_playing=NowPlayingPayload.from_now_playing(result) if result else None,
        server_time_ms=server_time_ms,
    )
    return JSONResponse(content=response.to_wire(), headers={"Cache-Control": "no-store"})
