"""
Runtime commands: resolve now-playing, serve the HTTP API, watch a channel.
"""

from __future__ import annotations

from datetime import datetime, timezone
from threading import Event

import typer

from linearcast.domain.schedule import normalize_channel_id
from linearcast.infra.exceptions import LinearcastError, SyncError
from linearcast.infra.logging import configure_logging, get_logger
from linearcast.player import (
    ClientSyncEngine,
    HeadlessVideoElement,
    HttpNowPlayingTransport,
    MediaReady,
    Teardown,
    ThreadScheduler,
    TuneIn,
)
from linearcast.runtime.clock import SystemClock
from linearcast.runtime.now_playing import NowPlayingService
from linearcast.shared.schemas import NowPlayingPayload, NowPlayingResponse

from ._ops import emit, fail, get_cli_context, load_catalog, open_store, parse_at


def _iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat()


def now_playing(
    ctx: typer.Context,
    channel: str = typer.Argument(..., help="Channel id"),
    at: str | None = typer.Option(None, "--at", help="Resolve at this ISO-8601 instant instead of now"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Show what a channel is airing."""
    cli_ctx = get_cli_context(ctx)
    clock = SystemClock()
    try:
        at_ms = parse_at(at, cli_ctx.settings.schedule_timezone)
        now_ms = at_ms if at_ms is not None else clock.now_ms()
        store = open_store(ctx)
        catalog = load_catalog(ctx)
        service = NowPlayingService(
            store,
            lambda: catalog,
            clock,
            tz=cli_ctx.settings.schedule_timezone,
            media_base_url=cli_ctx.settings.media_base_url,
        )
        result = service.now_playing(channel, at_ms=now_ms)
    except LinearcastError as e:
        fail(str(e), json_output)

    channel = normalize_channel_id(channel)
    response = NowPlayingResponse(
        channel=channel,
        now_playing=NowPlayingPayload.from_now_playing(result) if result else None,
        server_time_ms=now_ms,
    )
    if result is None:
        lines = [f"{channel}: off air at {_iso(now_ms)}"]
    else:
        lines = [
            f"{channel}: {result.title}",
            f"  File: {result.rel_path}",
            f"  Offset: {result.start_offset_seconds}s of {result.duration_seconds:g}s",
            f"  Ends at: {_iso(result.ends_at)}",
            f"  Source: {result.src}",
        ]
    emit(response.to_wire(), json_output, lines)


def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Bind address (default HOST)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (default PORT)"),
):
    """Run the HTTP API with uvicorn."""
    from linearcast.web.server import run_server

    cli_ctx = get_cli_context(ctx)
    app_settings = cli_ctx.settings.model_copy(update={"data_dir": str(cli_ctx.data_dir)})
    configure_logging(app_settings.log_level)
    run_server(host=host, port=port, app_settings=app_settings)


def watch(
    channel: str = typer.Argument(..., help="Channel id"),
    server: str = typer.Option("http://127.0.0.1:8000", "--server", help="Linearcast server base URL"),
    duration: float = typer.Option(0.0, "--duration", help="Stop after this many seconds (0 runs until interrupted)"),
    muted: bool = typer.Option(False, "--muted", help="Start muted"),
    skew_ms: int = typer.Option(0, "--skew-ms", help="Simulated local clock skew"),
):
    """Follow a channel headlessly, logging every fetch, seek and sync problem."""
    configure_logging()
    log = get_logger("linearcast.watch")

    clock = SystemClock(skew_ms=skew_ms)
    scheduler = ThreadScheduler()
    transport = HttpNowPlayingTransport(server, scheduler)
    video = HeadlessVideoElement(clock, muted=muted)

    def _on_error(error: SyncError) -> None:
        log.warning("sync_problem", kind=type(error).__name__, error=str(error))

    engine = ClientSyncEngine(transport, video, scheduler, clock, on_error=_on_error)
    video.on_loaded = lambda src: engine.post(MediaReady(src))

    log.info("watch_started", channel=channel, server=server)
    engine.post(TuneIn(channel))
    try:
        Event().wait(duration if duration > 0 else None)
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()
        engine.dispatch(Teardown())
        log.info("watch_stopped", channel=channel, state=engine.state.value)
