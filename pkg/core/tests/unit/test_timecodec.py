from __future__ import annotations

from datetime import timezone

import pytest

from linearcast.infra.exceptions import ValidationError
from linearcast.scheduling.timecodec import (
    SECONDS_PER_DAY,
    crosses_midnight,
    format_time_of_day,
    parse_time_of_day,
    resolve_timezone,
    seconds_of_day,
    span_seconds,
)
from sample_data import MIDNIGHT_MS, at_time


@pytest.mark.parametrize(
    "value, expected",
    [
        ("00:00", 0),
        ("9:05", 9 * 3600 + 5 * 60),
        ("10:00", 36_000),
        ("23:59:59", SECONDS_PER_DAY - 1),
        (" 20:30 ", 73_800),
    ],
)
def test_parse_time_of_day(value, expected):
    assert parse_time_of_day(value) == expected


@pytest.mark.parametrize("value", ["24:00", "12:60", "7", "", "noon", "12:00:60", "12:5"])
def test_parse_time_of_day_rejects_malformed(value):
    with pytest.raises(ValidationError):
        parse_time_of_day(value)


def test_format_time_of_day_omits_zero_seconds():
    assert format_time_of_day(0) == "00:00"
    assert format_time_of_day(36_000) == "10:00"
    assert format_time_of_day(36_005) == "10:00:05"


def test_format_rejects_out_of_range():
    with pytest.raises(ValidationError):
        format_time_of_day(SECONDS_PER_DAY)


def test_span_for_normal_and_wrapping_slots():
    assert span_seconds(parse_time_of_day("10:00"), parse_time_of_day("10:05")) == 300
    # end <= start wraps past midnight
    assert span_seconds(parse_time_of_day("23:00"), parse_time_of_day("01:00")) == 7200
    start, end = parse_time_of_day("23:30"), parse_time_of_day("00:30")
    assert span_seconds(start, end) == (SECONDS_PER_DAY - start) + end > 0


def test_crosses_midnight_only_when_end_before_start():
    assert crosses_midnight(parse_time_of_day("23:30"), parse_time_of_day("00:30"))
    assert not crosses_midnight(parse_time_of_day("00:00"), parse_time_of_day("01:00"))


def test_seconds_of_day_in_utc_and_zone():
    assert seconds_of_day(MIDNIGHT_MS) == 0
    assert seconds_of_day(at_time(10, 3, 7)) == 10 * 3600 + 3 * 60 + 7
    # New York is UTC-5 in January.
    assert seconds_of_day(at_time(15, 0), "America/New_York") == 10 * 3600


def test_unknown_timezone_falls_back_to_utc():
    assert resolve_timezone("Not/AZone") is timezone.utc
    assert resolve_timezone(None) is timezone.utc
