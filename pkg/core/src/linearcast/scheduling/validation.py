"""
Store-boundary validation for channel schedules.

Record-level rules (time format, zero-duration slots, positive playlist
durations) are enforced when a record is parsed. The rules here need the
whole channel, or the media catalog, and run before anything is persisted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from linearcast.domain.schedule import LoopingSchedule, Schedule, TwentyFourHourSchedule
from linearcast.infra.exceptions import ScheduleValidationError
from linearcast.scheduling.timecodec import format_time_of_day

if TYPE_CHECKING:
    from linearcast.catalog.static_media_catalog import MediaCatalog


def collect_violations(
    schedule: TwentyFourHourSchedule | LoopingSchedule,
    catalog: "MediaCatalog | None" = None,
) -> list[str]:
    """Return every rule the channel breaks; empty when it is valid."""
    violations: list[str] = []

    if isinstance(schedule, TwentyFourHourSchedule):
        previous = -1
        for slot in schedule.slots:
            if slot.start <= previous:
                violations.append(
                    f"Start times must be ascending ({format_time_of_day(slot.start)} "
                    f"follows {format_time_of_day(previous)})"
                )
            previous = max(previous, slot.start)
        files = [slot.file for slot in schedule.slots]
    elif isinstance(schedule, LoopingSchedule):
        files = [item.file for item in schedule.playlist]
    else:
        raise TypeError(f"Unsupported schedule variant: {type(schedule).__name__}")

    if catalog is not None:
        for rel_path in files:
            if catalog.get(rel_path) is None:
                violations.append(f"File not found in media catalog: {rel_path}")

    return violations


def validate_channel_schedule(
    schedule: TwentyFourHourSchedule | LoopingSchedule,
    channel_id: str | None = None,
    catalog: "MediaCatalog | None" = None,
) -> None:
    """
    Raise if a channel schedule may not be persisted.

    Args:
        schedule: Parsed channel schedule
        channel_id: Channel id used in the error message
        catalog: When given, every referenced file must resolve in it

    Raises:
        ScheduleValidationError: With one violation per broken rule
    """
    violations = collect_violations(schedule, catalog)
    if violations:
        raise ScheduleValidationError(
            "Schedule rejected", channel_id=channel_id, violations=violations
        )


def validate_schedule(schedule: Schedule, catalog: "MediaCatalog | None" = None) -> None:
    """Validate every channel of a schedule document."""
    for channel_id, channel in schedule.channels.items():
        validate_channel_schedule(channel, channel_id=channel_id, catalog=catalog)
