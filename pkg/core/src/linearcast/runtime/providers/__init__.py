"""
Schedule providers.

Provides implementations that load channel schedules from various sources.
"""

from .json_schedule_store import ChannelInfo, JsonScheduleStore

__all__ = [
    "ChannelInfo",
    "JsonScheduleStore",
]
