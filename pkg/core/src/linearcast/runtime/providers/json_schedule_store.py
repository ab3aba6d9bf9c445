"""
File-based schedule store.

Loads and saves the single ``schedule.json`` document holding every channel.
Every write is validated first, so an invalid schedule is never committed.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Mapping

from linearcast.catalog.static_media_catalog import MediaCatalog
from linearcast.domain.schedule import (
    LOOPING,
    LoopingSchedule,
    Schedule,
    TwentyFourHourSchedule,
    dump_schedule,
    normalize_channel_id,
    parse_channel_schedule,
    parse_schedule,
)
from linearcast.infra.cache import VersionedCache
from linearcast.infra.exceptions import ChannelNotFoundError, ValidationError
from linearcast.scheduling.validation import validate_channel_schedule, validate_schedule

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelInfo:
    id: str
    short_name: str | None
    type: str
    active: bool

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "shortName": self.short_name, "type": self.type, "active": self.active}


class JsonScheduleStore:
    """
    Schedule store backed by a JSON file.

    Expected JSON format:
    {
      "channels": {
        "retro": {"type": "24hour", "shortName": "RTR", "slots": [
            {"start": "20:00", "end": "21:30", "file": "movies/feature.mp4"}
        ]},
        "loop": {"type": "looping", "playlist": [
            {"file": "shorts/a.mp4", "durationSeconds": 600}
        ]}
      },
      "version": 3
    }
    """

    def __init__(self, schedule_path: Path | str, cache: VersionedCache[Schedule] | None = None):
        """
        Initialize the store.

        Args:
            schedule_path: Path to schedule.json
            cache: Read-through cache; parsed documents are reused until the
                file's modification time changes
        """
        self._path = Path(schedule_path)
        self._cache = cache if cache is not None else VersionedCache()
        self._write_lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    # Reads -----------------------------------------------------------------
    def load(self) -> Schedule:
        """Return the full schedule; a missing file is an empty schedule."""
        try:
            version = self._path.stat().st_mtime_ns
        except FileNotFoundError:
            return Schedule()

        cached = self._cache.get(str(self._path), version)
        if cached is not None:
            return cached

        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)
        schedule = parse_schedule(data)
        validate_schedule(schedule)
        self._cache.set(str(self._path), version, schedule)
        _logger.debug("Loaded %d channels from %s", len(schedule.channels), self._path)
        return schedule

    def get_channel(self, channel_id: str) -> TwentyFourHourSchedule | LoopingSchedule:
        """
        Raises:
            ChannelNotFoundError: If the channel does not exist.
        """
        cid = normalize_channel_id(channel_id)
        channel = self.load().channels.get(cid)
        if channel is None:
            raise ChannelNotFoundError(cid or channel_id)
        return channel

    def list_channels(self) -> list[ChannelInfo]:
        channels = [
            ChannelInfo(id=cid, short_name=ch.short_name, type=ch.type, active=ch.active)
            for cid, ch in self.load().channels.items()
        ]
        return sorted(channels, key=lambda c: c.id.lower())

    # Writes ----------------------------------------------------------------
    def save(self, schedule: Schedule, catalog: MediaCatalog | None = None) -> Schedule:
        """Validate and persist the full schedule, bumping its version."""
        validate_schedule(schedule, catalog)
        with self._write_lock:
            stored = schedule.model_copy(update={"version": (schedule.version or 0) + 1})
            self._write(dump_schedule(stored))
            self._cache.invalidate(str(self._path))
        _logger.info("Saved schedule (%d channels) to %s", len(stored.channels), self._path)
        return stored

    def save_channel_schedule(
        self,
        channel_id: str,
        payload: Mapping[str, Any] | TwentyFourHourSchedule | LoopingSchedule,
        catalog: MediaCatalog | None = None,
    ) -> TwentyFourHourSchedule | LoopingSchedule:
        """
        Replace one channel's programming.

        ``shortName`` and ``active`` are kept from the stored record unless the
        payload sets them.

        Raises:
            ScheduleValidationError: If the new schedule is invalid.
        """
        cid = normalize_channel_id(channel_id)
        if not cid:
            raise ValidationError("Channel ID is required")

        parsed = parse_channel_schedule(payload, channel_id=cid)
        full = self.load()
        existing = full.channels.get(cid)
        if existing is not None and isinstance(payload, Mapping):
            keep: dict[str, Any] = {}
            if "shortName" not in payload and "short_name" not in payload:
                keep["short_name"] = existing.short_name
            if "active" not in payload:
                keep["active"] = existing.active
            if keep:
                parsed = parsed.model_copy(update=keep)

        validate_channel_schedule(parsed, channel_id=cid, catalog=catalog)
        channels = {**full.channels, cid: parsed}
        self.save(full.model_copy(update={"channels": channels}))
        return parsed

    def create_channel(
        self,
        channel: str,
        short_name: str | None = None,
        schedule_type: str = "24hour",
    ) -> tuple[str, TwentyFourHourSchedule | LoopingSchedule]:
        """Create an empty channel; an existing channel is returned unchanged."""
        cid = normalize_channel_id(channel)
        if not cid:
            raise ValidationError("Channel ID is required")

        full = self.load()
        if cid in full.channels:
            return cid, full.channels[cid]

        short = (short_name or "").strip() or None
        created: TwentyFourHourSchedule | LoopingSchedule
        if schedule_type == LOOPING:
            created = LoopingSchedule(short_name=short)
        else:
            created = TwentyFourHourSchedule(short_name=short)
        self.save(full.model_copy(update={"channels": {**full.channels, cid: created}}))
        return cid, created

    def update_channel(
        self,
        channel: str,
        *,
        short_name: str | None = None,
        active: bool | None = None,
    ) -> ChannelInfo:
        """Update channel metadata. An empty ``short_name`` clears it."""
        cid = normalize_channel_id(channel)
        full = self.load()
        existing = full.channels.get(cid)
        if existing is None:
            raise ChannelNotFoundError(cid or channel)

        update: dict[str, Any] = {}
        if short_name is not None:
            update["short_name"] = short_name.strip() or None
        if active is not None:
            update["active"] = active
        updated = existing.model_copy(update=update)
        self.save(full.model_copy(update={"channels": {**full.channels, cid: updated}}))
        return ChannelInfo(id=cid, short_name=updated.short_name, type=updated.type, active=updated.active)

    def delete_channel(self, channel: str) -> bool:
        """Remove a channel. Returns False if it did not exist."""
        cid = normalize_channel_id(channel)
        if not cid:
            raise ValidationError("Channel ID is required")
        full = self.load()
        if cid not in full.channels:
            return False
        channels = {k: v for k, v in full.channels.items() if k != cid}
        self.save(full.model_copy(update={"channels": channels}))
        return True

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".schedule-", suffix=".json", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
