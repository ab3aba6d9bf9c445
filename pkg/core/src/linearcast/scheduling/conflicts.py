"""
Schedule conflict detection for 24-hour channels.

Advisory only: the admin surface shows these, saves are never blocked.
Wrapping slots are split at midnight so overlap math stays on a single day.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from linearcast.domain.schedule import Slot
from linearcast.scheduling.timecodec import SECONDS_PER_DAY


@dataclass(frozen=True)
class ScheduleConflict:
    """Two slots (by position in the input list) sharing air time."""

    slot_a_index: int
    slot_b_index: int
    overlap_seconds: int


def slot_ranges(start: int, end: int) -> list[tuple[int, int]]:
    """Half-open ``[lo, hi)`` ranges covered by a slot within one day."""
    if end < start:
        return [(start, SECONDS_PER_DAY), (0, end)]
    return [(start, end)]


def overlap_seconds(a: Slot, b: Slot) -> int:
    """Total seconds of air time shared by two slots."""
    total = 0
    for a_lo, a_hi in slot_ranges(a.start, a.end):
        for b_lo, b_hi in slot_ranges(b.start, b.end):
            lo = max(a_lo, b_lo)
            hi = min(a_hi, b_hi)
            if hi > lo:
                total += hi - lo
    return total


def detect_conflicts(slots: Sequence[Slot]) -> list[ScheduleConflict]:
    """Return every unordered pair of distinct slots with positive overlap.

    Pairs are enumerated in ascending-start order; indices refer to the
    caller's list.
    """
    if len(slots) < 2:
        return []

    ordered = sorted(enumerate(slots), key=lambda pair: pair[1].start)
    conflicts: list[ScheduleConflict] = []
    for i in range(len(ordered)):
        for j in range(i + 1, len(ordered)):
            a_index, a = ordered[i]
            b_index, b = ordered[j]
            overlap = overlap_seconds(a, b)
            if overlap > 0:
                conflicts.append(
                    ScheduleConflict(
                        slot_a_index=a_index,
                        slot_b_index=b_index,
                        overlap_seconds=overlap,
                    )
                )
    return conflicts
