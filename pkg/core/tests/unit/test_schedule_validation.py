from __future__ import annotations

import pytest

from linearcast.catalog.static_media_catalog import StaticMediaCatalog
from linearcast.domain.schedule import parse_channel_schedule
from linearcast.infra.exceptions import ScheduleValidationError, ValidationError
from linearcast.scheduling.validation import collect_violations, validate_channel_schedule


def test_ascending_starts_pass():
    schedule = parse_channel_schedule(
        {
            "slots": [
                {"start": "06:00", "end": "07:00", "file": "a.mp4"},
                {"start": "23:30", "end": "00:30", "file": "b.mp4"},
            ]
        }
    )
    assert collect_violations(schedule) == []


def test_non_ascending_starts_are_reported():
    schedule = parse_channel_schedule(
        {
            "slots": [
                {"start": "10:00", "end": "11:00", "file": "a.mp4"},
                {"start": "09:00", "end": "09:30", "file": "b.mp4"},
            ]
        }
    )
    with pytest.raises(ScheduleValidationError) as exc_info:
        validate_channel_schedule(schedule, channel_id="retro")
    error = exc_info.value
    assert isinstance(error, ValidationError)
    assert error.channel_id == "retro"
    assert "09:00 follows 10:00" in error.violations[0]
    assert str(error).startswith("Channel retro: ")


def test_unresolved_files_are_reported_when_catalog_given():
    schedule = parse_channel_schedule(
        {"type": "looping", "playlist": [{"file": "known.mp4", "durationSeconds": 5}, {"file": "gone.mp4", "durationSeconds": 5}]}
    )
    catalog = StaticMediaCatalog.from_durations({"known.mp4": 5})
    assert collect_violations(schedule) == []
    assert collect_violations(schedule, catalog) == ["File not found in media catalog: gone.mp4"]


def test_unknown_variant_raises_type_error():
    with pytest.raises(TypeError):
        collect_violations(object())  # type: ignore[arg-type]
