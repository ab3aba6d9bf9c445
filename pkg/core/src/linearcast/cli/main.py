"""
Main CLI application using Typer with router-based command dispatch.

Command groups (``channel``, ``schedule``) are registered through the
CliRouter; ``now-playing``, ``serve`` and ``watch`` are top-level commands.
"""

from __future__ import annotations

from pathlib import Path

import typer

from linearcast.infra.settings import settings

from .commands import channel, runtime, schedule
from .commands._ops import CliContext
from .router import get_router

app = typer.Typer(help="Linearcast operator CLI")

router = get_router(app)

router.register("channel", channel.app, help_text="Broadcast channel operations")
router.register("schedule", schedule.app, help_text="Schedule inspection and validation")

app.command("now-playing")(runtime.now_playing)
app.command("serve")(runtime.serve)
app.command("watch")(runtime.watch)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Path | None = typer.Option(
        None, "--data-dir", help="Directory holding schedule.json and media-index.json (default DATA_DIR)"
    ),
):
    """Linearcast - scheduled broadcast channels."""
    ctx.ensure_object(dict)
    ctx.obj["cli"] = CliContext(settings=settings, data_dir=data_dir or Path(settings.data_dir))


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
