"""
Position resolution for looping channels.

The playlist repeats forever from a fixed origin (the Unix epoch, optionally
shifted by ``epoch_offset_hours``). Every viewer computing the position for
the same instant lands on the same item and offset.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from linearcast.domain.schedule import PlaylistItem


@dataclass(frozen=True)
class LoopPosition:
    index: int
    item: PlaylistItem
    offset_seconds: int
    position_in_loop: int
    total_duration_seconds: int

    @property
    def remaining_seconds(self) -> int:
        return self.item.duration_seconds - self.offset_seconds


def resolve_loop_position(
    playlist: Sequence[PlaylistItem],
    epoch_seconds: float,
    epoch_offset_hours: float = 0.0,
) -> LoopPosition | None:
    """
    Locate the on-air playlist item for an epoch instant.

    Args:
        playlist: Items in play order; durations are positive integers
        epoch_seconds: Seconds since the Unix epoch (fractions are floored)
        epoch_offset_hours: Shifts the loop origin later by this many hours

    Returns:
        The on-air position, or None when the playlist has no content.
    """
    total = sum(item.duration_seconds for item in playlist)
    if total <= 0:
        return None

    adjusted = math.floor(epoch_seconds) - int(round(epoch_offset_hours * 3600))
    position = adjusted % total  # Python modulo is non-negative for total > 0

    accumulated = 0
    for index, item in enumerate(playlist):
        if position < accumulated + item.duration_seconds:
            return LoopPosition(
                index=index,
                item=item,
                offset_seconds=position - accumulated,
                position_in_loop=position,
                total_duration_seconds=total,
            )
        accumulated += item.duration_seconds

    # Unreachable while every duration is positive.
    return None


def seconds_until_next_airing(playlist: Sequence[PlaylistItem], index: int, position_in_loop: int) -> int:
    """Seconds until item ``index`` next starts; 0 if it is on air now."""
    total = sum(item.duration_seconds for item in playlist)
    item_start = sum(item.duration_seconds for item in playlist[:index])
    item_end = item_start + playlist[index].duration_seconds
    if item_start > position_in_loop:
        return item_start - position_in_loop
    if item_end > position_in_loop:
        return 0
    return total - position_in_loop + item_start
