"""
Schedule records: slots, playlist items and the per-channel tagged union.

These are the validated shapes the schedule store reads and writes. On the
wire (schedule.json, HTTP) field names are camelCase and slot times are
``HH:MM[:SS]`` strings; in Python slot times are integer seconds-of-day.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_serializer, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from linearcast.infra.exceptions import ScheduleValidationError, ValidationError
from linearcast.scheduling.timecodec import SECONDS_PER_DAY, format_time_of_day, parse_time_of_day

TWENTY_FOUR_HOUR = "24hour"
LOOPING = "looping"

_model_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
    frozen=True,
)


class Slot(BaseModel):
    """A scheduled ``[start, end)`` window in 24-hour mode. ``end < start`` wraps midnight."""

    model_config = _model_config

    start: int = Field(..., ge=0, lt=SECONDS_PER_DAY, description="Seconds of day")
    end: int = Field(..., ge=0, lt=SECONDS_PER_DAY, description="Seconds of day")
    file: str = Field(..., min_length=1, description="Path relative to the media root")
    title: str | None = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def _parse_time(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return parse_time_of_day(value)
            except ValidationError as exc:
                raise ValueError(str(exc)) from exc
        return value

    @field_serializer("start", "end")
    def _format_time(self, value: int) -> str:
        return format_time_of_day(value)

    @model_validator(mode="after")
    def _non_zero(self) -> "Slot":
        if self.start == self.end:
            raise ValueError(
                f"Slot cannot have zero duration ({format_time_of_day(self.start)} -> "
                f"{format_time_of_day(self.end)})"
            )
        return self


class PlaylistItem(BaseModel):
    """One entry of a looping playlist. Duration is verified before it is stored."""

    model_config = _model_config

    file: str = Field(..., min_length=1)
    title: str | None = None
    duration_seconds: int = Field(..., gt=0)


class _ChannelBase(BaseModel):
    model_config = _model_config

    short_name: str | None = None
    active: bool = True


class TwentyFourHourSchedule(_ChannelBase):
    type: Literal["24hour"] = TWENTY_FOUR_HOUR
    slots: tuple[Slot, ...] = ()


class LoopingSchedule(_ChannelBase):
    type: Literal["looping"] = LOOPING
    playlist: tuple[PlaylistItem, ...] = ()
    epoch_offset_hours: float = 0.0

    @property
    def total_duration_seconds(self) -> int:
        return sum(item.duration_seconds for item in self.playlist)


ChannelSchedule = Annotated[
    Union[TwentyFourHourSchedule, LoopingSchedule],
    Field(discriminator="type"),
]

_channel_adapter: TypeAdapter[TwentyFourHourSchedule | LoopingSchedule] = TypeAdapter(ChannelSchedule)


def _with_default_type(data: Any) -> Any:
    # Records written before looping channels existed carry no "type".
    if isinstance(data, dict) and not data.get("type"):
        return {**data, "type": TWENTY_FOUR_HOUR}
    return data


class Schedule(BaseModel):
    """All channels, keyed by normalized channel id."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    channels: dict[str, ChannelSchedule] = Field(default_factory=dict)
    version: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_channels(cls, data: Any) -> Any:
        if not (isinstance(data, dict) and isinstance(data.get("channels"), dict)):
            return data
        channels: dict[str, Any] = {}
        for raw_id, record in data["channels"].items():
            cid = normalize_channel_id(raw_id)
            if not cid:
                raise ValueError(f"Channel id {raw_id!r} is empty after normalization")
            if cid in channels:
                raise ValueError(f"Duplicate channel id {cid!r} (from {raw_id!r})")
            channels[cid] = _with_default_type(record)
        return {**data, "channels": channels}


_CHANNEL_ID_UNSAFE = re.compile(r"[^a-z0-9_-]")


def normalize_channel_id(channel: str | None) -> str:
    """Trim, lower-case and replace unsafe characters with ``-``."""
    if not channel:
        return ""
    base = channel.strip().lower()
    return _CHANNEL_ID_UNSAFE.sub("-", base)


def _violations(exc: PydanticValidationError) -> list[str]:
    out = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid")
        out.append(f"{loc}: {msg}" if loc else msg)
    return out


def parse_channel_schedule(data: Any, channel_id: str | None = None) -> TwentyFourHourSchedule | LoopingSchedule:
    """Validate a raw channel record into its schedule variant.

    Raises:
        ScheduleValidationError: If the record does not validate.
    """
    if isinstance(data, (TwentyFourHourSchedule, LoopingSchedule)):
        return data
    try:
        return _channel_adapter.validate_python(_with_default_type(data))
    except PydanticValidationError as exc:
        raise ScheduleValidationError(
            "Invalid channel schedule", channel_id=channel_id, violations=_violations(exc)
        ) from exc


def parse_schedule(data: Any) -> Schedule:
    """Validate a raw schedule document.

    Raises:
        ScheduleValidationError: If any channel record does not validate.
    """
    try:
        return Schedule.model_validate(data)
    except PydanticValidationError as exc:
        raise ScheduleValidationError("Invalid schedule document", violations=_violations(exc)) from exc


def dump_channel_schedule(schedule: TwentyFourHourSchedule | LoopingSchedule) -> dict[str, Any]:
    return schedule.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_schedule(schedule: Schedule) -> dict[str, Any]:
    return schedule.model_dump(mode="json", by_alias=True, exclude_none=True)
