from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import typer

from linearcast.catalog.static_media_catalog import StaticMediaCatalog
from linearcast.infra.exceptions import ValidationError
from linearcast.infra.settings import Settings, settings
from linearcast.runtime.clock import ms_from_datetime
from linearcast.runtime.providers import JsonScheduleStore
from linearcast.scheduling.timecodec import resolve_timezone


@dataclass(frozen=True)
class CliContext:
    """Values set by the root callback and shared with every command."""

    settings: Settings
    data_dir: Path

    @property
    def schedule_path(self) -> Path:
        return self.data_dir / "schedule.json"

    @property
    def media_index_path(self) -> Path:
        return self.data_dir / "media-index.json"


def get_cli_context(ctx: typer.Context) -> CliContext:
    obj = ctx.find_root().obj if ctx is not None else None
    if isinstance(obj, dict) and isinstance(obj.get("cli"), CliContext):
        return obj["cli"]
    return CliContext(settings=settings, data_dir=Path(settings.data_dir))


def open_store(ctx: typer.Context) -> JsonScheduleStore:
    return JsonScheduleStore(get_cli_context(ctx).schedule_path)


def load_catalog(ctx: typer.Context) -> StaticMediaCatalog:
    return StaticMediaCatalog.from_file(get_cli_context(ctx).media_index_path)


def parse_at(value: str | None, tz: str) -> int | None:
    """
    Parse an ISO-8601 ``--at`` value to epoch milliseconds.

    Naive values are interpreted in ``tz`` (the schedule timezone).

    Raises:
        ValidationError: If the value is not ISO-8601
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid --at value {value!r}; expected ISO-8601") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=resolve_timezone(tz))
    return ms_from_datetime(parsed)
