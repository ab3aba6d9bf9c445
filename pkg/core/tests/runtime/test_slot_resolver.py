"""
Active slot resolution for 24-hour channels.

The on-air window is min(asset duration, scheduled span); inside it the
offset is seconds since slot start, and past it the channel is idle.
"""

from __future__ import annotations

from linearcast.catalog.static_media_catalog import StaticMediaCatalog
from linearcast.domain.schedule import Slot
from linearcast.runtime.slot_resolver import find_active_slot, resolve_slots
from linearcast.scheduling.timecodec import parse_time_of_day as tod


def _slot(start: str, end: str, file: str) -> Slot:
    return Slot(start=start, end=end, file=file)


def test_window_is_capped_by_span_for_long_asset():
    slots = resolve_slots([_slot("10:00", "10:05", "a.mp4")], StaticMediaCatalog.from_durations({"a.mp4": 600}))
    assert slots[0].window_seconds == 300

    match = find_active_slot(slots, tod("10:03"))
    assert match is not None
    assert match.offset_seconds == 180
    assert find_active_slot(slots, tod("10:06")) is None


def test_short_asset_leaves_rest_of_slot_idle():
    slots = resolve_slots([_slot("10:00", "11:00", "a.mp4")], StaticMediaCatalog.from_durations({"a.mp4": 120}))
    assert slots[0].window_seconds == 120
    assert find_active_slot(slots, tod("10:01:59")).offset_seconds == 119
    assert find_active_slot(slots, tod("10:02")) is None


def test_wrapping_slot_covers_both_sides_of_midnight():
    slots = resolve_slots([_slot("23:30", "00:30", "late.mp4")], StaticMediaCatalog.from_durations({"late.mp4": 7200}))
    assert slots[0].crosses_midnight
    assert find_active_slot(slots, tod("23:45")).offset_seconds == 900
    assert find_active_slot(slots, tod("00:15")).offset_seconds == 2700
    assert find_active_slot(slots, tod("00:30")) is None


def test_wrapping_slot_with_asset_ending_before_midnight():
    slots = resolve_slots([_slot("23:30", "00:30", "short.mp4")], StaticMediaCatalog.from_durations({"short.mp4": 600}))
    assert find_active_slot(slots, tod("23:35")).offset_seconds == 300
    assert find_active_slot(slots, tod("23:45")) is None
    assert find_active_slot(slots, tod("00:05")) is None


def test_missing_duration_falls_back_to_span():
    slots = resolve_slots([_slot("10:00", "10:30", "a.mp4")], StaticMediaCatalog.from_durations({"a.mp4": None}))
    assert slots[0].window_seconds == 1800
    assert slots[0].duration_seconds == 1800.0


def test_files_missing_from_catalog_are_skipped():
    slots = resolve_slots(
        [_slot("10:00", "11:00", "gone.mp4"), _slot("12:00", "13:00", "a.mp4")],
        StaticMediaCatalog.from_durations({"a.mp4": 3600}),
    )
    assert [s.rel_path for s in slots] == ["a.mp4"]


def test_earliest_start_wins_on_overlap():
    catalog = StaticMediaCatalog.from_durations({"a.mp4": 3600, "b.mp4": 3600})
    slots = resolve_slots([_slot("10:30", "11:30", "b.mp4"), _slot("10:00", "11:00", "a.mp4")], catalog)
    match = find_active_slot(slots, tod("10:45"))
    assert match.slot.rel_path == "a.mp4"
    assert match.offset_seconds == 2700


def test_title_prefers_slot_then_catalog_then_file_name():
    catalog = StaticMediaCatalog.from_dict(
        {"items": [{"relPath": "a.mp4", "durationSeconds": 60, "title": "Catalog A"}, {"relPath": "b.mp4", "durationSeconds": 60}]}
    )
    slots = resolve_slots(
        [
            Slot(start="01:00", end="02:00", file="a.mp4", title="Slot A"),
            _slot("03:00", "04:00", "a.mp4"),
            _slot("05:00", "06:00", "b.mp4"),
        ],
        catalog,
    )
    assert [s.title for s in slots] == ["Slot A", "Catalog A", "b"]
