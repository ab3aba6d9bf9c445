"""Domain records for channel schedules."""

from .schedule import (
    LOOPING,
    TWENTY_FOUR_HOUR,
    ChannelSchedule,
    LoopingSchedule,
    PlaylistItem,
    Schedule,
    Slot,
    TwentyFourHourSchedule,
    normalize_channel_id,
    parse_channel_schedule,
    parse_schedule,
)

__all__ = [
    "LOOPING",
    "TWENTY_FOUR_HOUR",
    "ChannelSchedule",
    "LoopingSchedule",
    "PlaylistItem",
    "Schedule",
    "Slot",
    "TwentyFourHourSchedule",
    "normalize_channel_id",
    "parse_channel_schedule",
    "parse_schedule",
]
