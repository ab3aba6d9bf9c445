"""
Schedule command group.

Inspect a channel's programming, validate the whole schedule document and
report overlapping 24-hour slots.
"""

from __future__ import annotations

import json

import typer

from linearcast.domain.schedule import LoopingSchedule, TwentyFourHourSchedule, normalize_channel_id, parse_schedule
from linearcast.infra.exceptions import LinearcastError, ScheduleValidationError
from linearcast.runtime.clock import SystemClock
from linearcast.runtime.loop_resolver import resolve_loop_position, seconds_until_next_airing
from linearcast.scheduling.conflicts import detect_conflicts
from linearcast.scheduling.timecodec import format_time_of_day
from linearcast.scheduling.validation import collect_violations

from ._ops import emit, fail, get_cli_context, load_catalog, open_store, parse_at

app = typer.Typer(name="schedule", help="Channel schedule inspection and validation")


def _format_duration(seconds: int) -> str:
    hours, rem = divmod(int(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:d}:{minutes:02d}:{secs:02d}"


@app.command("show")
def show_schedule(
    ctx: typer.Context,
    channel: str = typer.Argument(..., help="Channel id"),
    at: str | None = typer.Option(None, "--at", help="ISO-8601 instant for looping next-airing times"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Show a channel's slots or playlist."""
    cli_ctx = get_cli_context(ctx)
    try:
        schedule = open_store(ctx).get_channel(channel)
        at_ms = parse_at(at, cli_ctx.settings.schedule_timezone)
    except LinearcastError as e:
        fail(str(e), json_output)

    cid = normalize_channel_id(channel)
    if isinstance(schedule, TwentyFourHourSchedule):
        slots = [
            {"index": i, "start": format_time_of_day(s.start), "end": format_time_of_day(s.end), "file": s.file, "title": s.title}
            for i, s in enumerate(schedule.slots)
        ]
        lines = [f"{cid} (24hour, {'active' if schedule.active else 'inactive'})"]
        lines += [f"  [{s['index']}] {s['start']}-{s['end']}  {s['file']}" for s in slots]
        emit({"status": "ok", "channel": cid, "type": schedule.type, "slots": slots}, json_output, lines)
        return

    assert isinstance(schedule, LoopingSchedule)
    now_ms = at_ms if at_ms is not None else SystemClock().now_ms()
    position = resolve_loop_position(schedule.playlist, now_ms / 1000.0, schedule.epoch_offset_hours)
    items = []
    for i, item in enumerate(schedule.playlist):
        next_in = (
            seconds_until_next_airing(schedule.playlist, i, position.position_in_loop)
            if position is not None
            else None
        )
        items.append(
            {
                "index": i,
                "file": item.file,
                "title": item.title,
                "durationSeconds": item.duration_seconds,
                "nextAiringInSeconds": next_in,
            }
        )
    lines = [
        f"{cid} (looping, {'active' if schedule.active else 'inactive'}, "
        f"total {_format_duration(schedule.total_duration_seconds)})"
    ]
    for entry in items:
        marker = "*" if entry["nextAiringInSeconds"] == 0 else " "
        lines.append(
            f" {marker}[{entry['index']}] {_format_duration(entry['durationSeconds'])}  {entry['file']}"
        )
    emit(
        {
            "status": "ok",
            "channel": cid,
            "type": schedule.type,
            "epochOffsetHours": schedule.epoch_offset_hours,
            "totalDurationSeconds": schedule.total_duration_seconds,
            "playlist": items,
        },
        json_output,
        lines,
    )


@app.command("validate")
def validate(
    ctx: typer.Context,
    check_files: bool = typer.Option(False, "--check-files", help="Require every file to be in the media index"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Validate schedule.json without modifying it."""
    path = get_cli_context(ctx).schedule_path
    if not path.exists():
        fail(f"Schedule file not found: {path}", json_output)

    try:
        with open(path, "r", encoding="utf-8") as f:
            document = parse_schedule(json.load(f))
    except json.JSONDecodeError as e:
        fail(f"Schedule file is not valid JSON: {e}", json_output)
    except ScheduleValidationError as e:
        fail(e.message, json_output, violations=e.violations)

    catalog = load_catalog(ctx) if check_files else None
    report = {
        cid: collect_violations(channel, catalog)
        for cid, channel in sorted(document.channels.items())
    }
    failing = {cid: v for cid, v in report.items() if v}
    if failing:
        if json_output:
            emit({"status": "error", "error": "Schedule rejected", "channels": failing}, True, [])
        else:
            for cid, violations in failing.items():
                typer.echo(f"{cid}:", err=True)
                for violation in violations:
                    typer.echo(f"  - {violation}", err=True)
        raise typer.Exit(1)

    emit(
        {"status": "ok", "channels": sorted(report)},
        json_output,
        [f"Schedule OK ({len(report)} channels)"],
    )


@app.command("conflicts")
def conflicts(
    ctx: typer.Context,
    channel: str = typer.Argument(..., help="Channel id"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Report overlapping slot pairs for a 24-hour channel."""
    try:
        schedule = open_store(ctx).get_channel(channel)
    except LinearcastError as e:
        fail(str(e), json_output)

    cid = normalize_channel_id(channel)
    found = detect_conflicts(schedule.slots) if isinstance(schedule, TwentyFourHourSchedule) else []
    payload = {
        "status": "ok",
        "channel": cid,
        "conflicts": [
            {"slotAIndex": c.slot_a_index, "slotBIndex": c.slot_b_index, "overlapSeconds": c.overlap_seconds}
            for c in found
        ],
    }
    if not found:
        lines = [f"No conflicts on {cid}"]
    else:
        lines = [
            f"Slot {c.slot_a_index} overlaps slot {c.slot_b_index} by {_format_duration(c.overlap_seconds)}"
            for c in found
        ]
    emit(payload, json_output, lines)
