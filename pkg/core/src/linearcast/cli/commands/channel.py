"""
Channel command group.

Create, list, update and remove channels in ``schedule.json``.
"""

from __future__ import annotations

import typer

from linearcast.infra.exceptions import LinearcastError

from ._ops import emit, fail, open_store

app = typer.Typer(name="channel", help="Broadcast channel management operations")


@app.command("list")
def list_channels(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List channels sorted by id."""
    try:
        channels = open_store(ctx).list_channels()
    except LinearcastError as e:
        fail(str(e), json_output)

    if json_output:
        emit({"status": "ok", "channels": [c.to_dict() for c in channels]}, True, [])
        return
    if not channels:
        typer.echo("No channels configured")
        return
    for c in channels:
        state = "active" if c.active else "inactive"
        short = f" ({c.short_name})" if c.short_name else ""
        typer.echo(f"{c.id}{short}  {c.type}  {state}")


@app.command("add")
def add_channel(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Channel id (normalized to lower-case)"),
    short_name: str | None = typer.Option(None, "--short-name", help="Short display name"),
    schedule_type: str = typer.Option("24hour", "--type", help="Schedule type: 24hour or looping"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Create an empty channel."""
    if schedule_type not in ("24hour", "looping"):
        fail(f"Unknown schedule type {schedule_type!r} (expected 24hour or looping)", json_output)
    try:
        channel_id, schedule = open_store(ctx).create_channel(
            name, short_name=short_name, schedule_type=schedule_type
        )
    except LinearcastError as e:
        fail(str(e), json_output)

    payload = {
        "id": channel_id,
        "shortName": schedule.short_name,
        "type": schedule.type,
        "active": schedule.active,
    }
    emit(
        {"status": "ok", "channel": payload},
        json_output,
        [
            "Channel created:",
            f"  ID: {channel_id}",
            f"  Short name: {schedule.short_name or '-'}",
            f"  Type: {schedule.type}",
        ],
    )


@app.command("update")
def update_channel(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Channel id"),
    short_name: str | None = typer.Option(None, "--short-name", help="New short name (empty clears)"),
    active: bool | None = typer.Option(None, "--active/--inactive", help="Set active flag"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Update channel metadata."""
    try:
        info = open_store(ctx).update_channel(name, short_name=short_name, active=active)
    except LinearcastError as e:
        fail(str(e), json_output)

    emit(
        {"status": "ok", "channel": info.to_dict()},
        json_output,
        [
            "Channel updated:",
            f"  ID: {info.id}",
            f"  Short name: {info.short_name or '-'}",
            f"  Active: {str(info.active).lower()}",
        ],
    )


@app.command("remove")
def remove_channel(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Channel id"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Delete a channel and its programming."""
    try:
        removed = open_store(ctx).delete_channel(name)
    except LinearcastError as e:
        fail(str(e), json_output)

    if not removed:
        fail(f"Channel {name!r} not found in schedule", json_output)
    emit({"status": "ok", "deleted": name}, json_output, [f"Channel removed: {name}"])
