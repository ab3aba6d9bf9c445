"""
Time-of-day codec: ``HH:MM[:SS]`` strings <-> seconds-of-day.

Pure functions. Every slot boundary and every resolution query goes through
these, so the 24-hour day is defined once: ``[0, SECONDS_PER_DAY)``.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from linearcast.infra.exceptions import ValidationError

SECONDS_PER_DAY = 86_400

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")


def parse_time_of_day(value: str) -> int:
    """Parse ``HH:MM`` or ``HH:MM:SS`` (24-hour) into seconds since midnight.

    Raises:
        ValidationError: If the string is malformed or a field is out of range.
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid time of day: {value!r}")
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid time of day: {value!r} (expected HH:MM or HH:MM:SS)")
    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3)) if match.group(3) else 0
    return hours * 3600 + minutes * 60 + seconds


def format_time_of_day(seconds: int) -> str:
    """Format seconds-of-day as ``HH:MM``, or ``HH:MM:SS`` when seconds are non-zero."""
    if not 0 <= seconds < SECONDS_PER_DAY:
        raise ValidationError(f"Seconds of day out of range: {seconds}")
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if secs:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}"


def span_seconds(start: int, end: int) -> int:
    """Scheduled span of a slot; ``end <= start`` crosses midnight.

    23:00 -> 01:00 is 7200 seconds.
    """
    if end > start:
        return end - start
    return (SECONDS_PER_DAY - start) + end


def crosses_midnight(start: int, end: int) -> bool:
    return end < start


def resolve_timezone(tz: str | tzinfo | None) -> tzinfo:
    """Return a tzinfo for an IANA name; unknown names fall back to UTC."""
    if tz is None:
        return timezone.utc
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def seconds_of_day(now_ms: int, tz: str | tzinfo | None = None) -> int:
    """Whole seconds since local midnight for an epoch-milliseconds instant."""
    local = datetime.fromtimestamp(now_ms / 1000.0, tz=resolve_timezone(tz))
    return local.hour * 3600 + local.minute * 60 + local.second
