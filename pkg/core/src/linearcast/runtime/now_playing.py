"""
Now-playing resolution.

:func:`resolve_now_playing` is a pure function of ``(schedule, catalog,
now)``: it dispatches on the schedule variant and returns the playback
descriptor every viewer of the channel should be showing, or None when the
channel is off air. :class:`NowPlayingService` wires it to a schedule store,
a catalog loader and a clock for the HTTP and CLI surfaces.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import tzinfo
from typing import Callable, Protocol
from urllib.parse import quote

from linearcast.catalog.media_support import normalize_rel_path, title_from_path
from linearcast.catalog.static_media_catalog import MediaCatalog
from linearcast.domain.schedule import LoopingSchedule, TwentyFourHourSchedule
from linearcast.runtime.clock import Clock, floor_to_second
from linearcast.runtime.loop_resolver import resolve_loop_position
from linearcast.runtime.slot_resolver import find_active_slot, resolve_slots
from linearcast.scheduling.timecodec import seconds_of_day

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NowPlaying:
    """Ephemeral playback descriptor. Never persisted."""

    title: str
    rel_path: str
    duration_seconds: float
    start_offset_seconds: int
    ends_at: int  # epoch ms
    src: str
    server_time_ms: int

    def to_dict(self) -> dict:
        return asdict(self)


def build_media_src(rel_path: str, media_base_url: str | None = None) -> str:
    """URL a player loads for ``rel_path``."""
    if media_base_url:
        return media_base_url.rstrip("/") + "/" + quote(rel_path)
    return f"/api/media?file={quote(rel_path, safe='')}"


def _resolve_twenty_four_hour(
    schedule: TwentyFourHourSchedule,
    catalog: MediaCatalog,
    now_ms: int,
    tz: str | tzinfo | None,
    media_base_url: str | None,
) -> NowPlaying | None:
    slots = resolve_slots(schedule.slots, catalog)
    if not slots:
        return None

    match = find_active_slot(slots, seconds_of_day(now_ms, tz))
    if match is None:
        return None

    slot = match.slot
    remaining = max(1, slot.window_seconds - match.offset_seconds)
    return NowPlaying(
        title=slot.title,
        rel_path=slot.rel_path,
        duration_seconds=slot.duration_seconds,
        start_offset_seconds=match.offset_seconds,
        ends_at=floor_to_second(now_ms) + remaining * 1000,
        src=build_media_src(slot.rel_path, media_base_url),
        server_time_ms=now_ms,
    )


def _resolve_looping(
    schedule: LoopingSchedule,
    now_ms: int,
    media_base_url: str | None,
) -> NowPlaying | None:
    position = resolve_loop_position(
        schedule.playlist,
        epoch_seconds=now_ms / 1000.0,
        epoch_offset_hours=schedule.epoch_offset_hours,
    )
    if position is None:
        return None

    item = position.item
    rel_path = normalize_rel_path(item.file)
    return NowPlaying(
        title=item.title or title_from_path(rel_path),
        rel_path=rel_path,
        duration_seconds=float(item.duration_seconds),
        start_offset_seconds=position.offset_seconds,
        ends_at=floor_to_second(now_ms) + position.remaining_seconds * 1000,
        src=build_media_src(rel_path, media_base_url),
        server_time_ms=now_ms,
    )


def resolve_now_playing(
    schedule: TwentyFourHourSchedule | LoopingSchedule,
    catalog: MediaCatalog,
    now_ms: int,
    *,
    tz: str | tzinfo | None = None,
    media_base_url: str | None = None,
) -> NowPlaying | None:
    """
    Resolve what a channel is airing at ``now_ms``.

    Args:
        schedule: The channel's validated schedule
        catalog: Media facts used for 24-hour window sizing
        now_ms: Instant to resolve, epoch milliseconds
        tz: Zone in which 24-hour slot times are interpreted (default UTC)
        media_base_url: Optional absolute base for ``src``

    Returns:
        The playback descriptor, or None when nothing is on air. None is a
        normal result (off-air), not an error.
    """
    if not schedule.active:
        return None
    if isinstance(schedule, TwentyFourHourSchedule):
        return _resolve_twenty_four_hour(schedule, catalog, now_ms, tz, media_base_url)
    if isinstance(schedule, LoopingSchedule):
        return _resolve_looping(schedule, now_ms, media_base_url)
    raise TypeError(f"Unsupported schedule variant: {type(schedule).__name__}")


class ChannelScheduleSource(Protocol):
    """Protocol for providing channel schedules (see JsonScheduleStore)."""

    def get_channel(self, channel_id: str) -> TwentyFourHourSchedule | LoopingSchedule:
        """
        Get a channel's schedule by id.

        Raises:
            ChannelNotFoundError: If the channel does not exist
        """
        ...


class NowPlayingService:
    """Resolve now-playing for a channel id against live store and catalog."""

    def __init__(
        self,
        store: ChannelScheduleSource,
        catalog_loader: Callable[[], MediaCatalog],
        clock: Clock,
        *,
        tz: str | tzinfo | None = None,
        media_base_url: str | None = None,
    ) -> None:
        self._store = store
        self._catalog_loader = catalog_loader
        self._clock = clock
        self._tz = tz
        self._media_base_url = media_base_url or None

    def now_playing(self, channel_id: str, at_ms: int | None = None) -> NowPlaying | None:
        """
        Raises:
            ChannelNotFoundError: If the channel is not in the schedule.
        """
        schedule = self._store.get_channel(channel_id)
        now_ms = self._clock.now_ms() if at_ms is None else at_ms
        result = resolve_now_playing(
            schedule,
            self._catalog_loader(),
            now_ms,
            tz=self._tz,
            media_base_url=self._media_base_url,
        )
        _logger.info(
            "now-playing resolved channel=%s title=%s offset=%s ends_at=%s",
            channel_id,
            result.title if result else None,
            result.start_offset_seconds if result else None,
            result.ends_at if result else None,
        )
        return result
