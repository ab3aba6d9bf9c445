"""
Active slot resolution for 24-hour channels.

Pure logic: (slots, catalog, seconds-of-day) -> active slot + offset.
The window of a slot is the shorter of its scheduled span and its asset's
duration, so a short asset leaves the channel idle for the rest of the slot
and a long asset is cut at the scheduled end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from linearcast.catalog.media_support import normalize_rel_path, title_from_path
from linearcast.catalog.static_media_catalog import MediaCatalog
from linearcast.domain.schedule import Slot
from linearcast.scheduling.timecodec import SECONDS_PER_DAY, crosses_midnight, span_seconds

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSlot:
    """A slot joined with its catalog facts."""

    rel_path: str
    title: str
    start_seconds: int
    end_seconds: int
    duration_seconds: float
    window_seconds: int

    @property
    def crosses_midnight(self) -> bool:
        return crosses_midnight(self.start_seconds, self.end_seconds)

    def contains(self, t: int) -> bool:
        """True if second-of-day ``t`` falls inside this slot's window."""
        window_end = self.start_seconds + self.window_seconds
        if self.crosses_midnight and window_end >= SECONDS_PER_DAY:
            return t >= self.start_seconds or t < window_end % SECONDS_PER_DAY
        # Non-wrapping, or wrapping on paper but the asset ends before midnight.
        return self.start_seconds <= t < window_end


@dataclass(frozen=True)
class SlotMatch:
    slot: ResolvedSlot
    offset_seconds: int


def resolve_slots(slots: Sequence[Slot], catalog: MediaCatalog) -> list[ResolvedSlot]:
    """Join slots with catalog durations and sort by start.

    Slots whose file is unknown to the catalog are skipped. A catalog entry
    without a positive duration falls back to the slot's scheduled span.
    """
    resolved: list[ResolvedSlot] = []
    for slot in sorted(slots, key=lambda s: s.start):
        rel_path = normalize_rel_path(slot.file)
        entry = catalog.get(rel_path)
        if entry is None:
            _logger.warning("Slot file missing from media catalog, skipping: %s", rel_path)
            continue

        span = span_seconds(slot.start, slot.end)
        duration = entry.duration_seconds if entry.has_duration else float(span)
        window = max(1, int(min(duration, span)))

        resolved.append(
            ResolvedSlot(
                rel_path=rel_path,
                title=slot.title or entry.title or title_from_path(rel_path),
                start_seconds=slot.start,
                end_seconds=slot.end,
                duration_seconds=duration,
                window_seconds=window,
            )
        )
    return resolved


def find_active_slot(slots: Sequence[ResolvedSlot], t: int) -> SlotMatch | None:
    """
    Return the first slot (ascending start) whose window contains ``t``.

    Args:
        slots: Output of :func:`resolve_slots` (already sorted)
        t: Seconds of day, ``0 <= t < 86400``

    Returns:
        The match with its clamped offset, or None when nothing is on air.
    """
    for slot in slots:
        if slot.contains(t):
            offset = (t - slot.start_seconds) % SECONDS_PER_DAY
            offset = min(max(offset, 0), slot.window_seconds - 1)
            return SlotMatch(slot=slot, offset_seconds=offset)
    return None
