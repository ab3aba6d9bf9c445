"""
Pydantic schemas for API serialization.

This module contains the request/response models shared by the HTTP API and
the client sync engine. Field names are camelCase on the wire.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from linearcast.runtime.now_playing import NowPlaying
from linearcast.scheduling.conflicts import ScheduleConflict


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class NowPlayingPayload(_WireModel):
    """What a player should show and where in the asset it should be."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    rel_path: str
    duration_seconds: float = Field(..., ge=0)
    start_offset_seconds: float = Field(..., ge=0)
    ends_at: int = Field(..., description="Epoch ms at which the next fetch is due")
    src: str
    server_time_ms: int

    @classmethod
    def from_now_playing(cls, now_playing: NowPlaying) -> NowPlayingPayload:
        return cls(**now_playing.to_dict())


class NowPlayingResponse(_WireModel):
    """Envelope returned by ``GET /api/now-playing``. ``nowPlaying`` null means off air."""

    channel: str
    now_playing: NowPlayingPayload | None = None
    server_time_ms: int


class ConflictPayload(_WireModel):
    slot_a_index: int
    slot_b_index: int
    overlap_seconds: int

    @classmethod
    def from_conflict(cls, conflict: ScheduleConflict) -> ConflictPayload:
        return cls(
            slot_a_index=conflict.slot_a_index,
            slot_b_index=conflict.slot_b_index,
            overlap_seconds=conflict.overlap_seconds,
        )


class ConflictsResponse(_WireModel):
    channel: str
    conflicts: list[ConflictPayload] = Field(default_factory=list)


class ChannelSummary(_WireModel):
    id: str
    short_name: str | None = None
    type: str
    active: bool


class ChannelCreate(_WireModel):
    """Request model for creating a channel."""

    name: str = Field(..., min_length=1, description="Channel id (normalized)")
    short_name: str | None = Field(None, description="Short display name")
    type: str = Field("24hour", pattern="^(24hour|looping)$")


class ChannelUpdate(_WireModel):
    """Request model for updating channel metadata."""

    short_name: str | None = Field(None, description="New short name (empty clears)")
    active: bool | None = Field(None, description="New active status")


class ErrorResponse(BaseModel):
    error: str
    violations: list[str] = Field(default_factory=list)
