from __future__ import annotations

import pytest

from linearcast.domain.schedule import PlaylistItem
from linearcast.runtime.loop_resolver import resolve_loop_position, seconds_until_next_airing


@pytest.fixture
def playlist() -> list[PlaylistItem]:
    return [
        PlaylistItem(file="a.mp4", duration_seconds=10),
        PlaylistItem(file="b.mp4", duration_seconds=20),
    ]


def test_position_from_epoch(playlist):
    position = resolve_loop_position(playlist, epoch_seconds=1_000_007)
    assert position.index == 1
    assert position.item.file == "b.mp4"
    assert position.offset_seconds == 7
    assert position.position_in_loop == 17
    assert position.remaining_seconds == 13
    assert position.total_duration_seconds == 30


def test_fractional_epoch_is_floored(playlist):
    assert resolve_loop_position(playlist, epoch_seconds=1_000_007.999).offset_seconds == 7


def test_epoch_offset_shifts_origin(playlist):
    # One hour is 120 full loops, so the offset shifts nothing here.
    assert resolve_loop_position(playlist, 1_000_007, epoch_offset_hours=1).index == 1
    # 10 seconds earlier in the loop: 17 - 10 = 7 -> item a, offset 7.
    shifted = resolve_loop_position(playlist, 1_000_007, epoch_offset_hours=10 / 3600)
    assert (shifted.index, shifted.offset_seconds) == (0, 7)


def test_negative_adjusted_position_wraps(playlist):
    position = resolve_loop_position(playlist, epoch_seconds=5, epoch_offset_hours=1 / 3600 * 10)
    # 5 - 10 = -5 -> 25 in a 30 s loop.
    assert position.position_in_loop == 25
    assert (position.index, position.offset_seconds) == (1, 15)


def test_empty_playlist_resolves_to_none():
    assert resolve_loop_position([], epoch_seconds=1_000_007) is None


def test_resolution_is_deterministic(playlist):
    assert resolve_loop_position(playlist, 123_456) == resolve_loop_position(playlist, 123_456)


def test_seconds_until_next_airing(playlist):
    assert seconds_until_next_airing(playlist, 1, 17) == 0
    assert seconds_until_next_airing(playlist, 0, 17) == 13
    assert seconds_until_next_airing(playlist, 1, 3) == 7
