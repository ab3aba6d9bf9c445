"""Deterministic transport and video element for client sync engine tests.

The transport never completes on its own: tests decide when (and in which
order) each fetch succeeds or fails, and advance the stepped clock between.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from linearcast.infra.exceptions import NetworkFailure, PlaybackRejected
from linearcast.player.transport import FetchHandle
from linearcast.runtime.clock import SteppedClock
from linearcast.shared.schemas import NowPlayingPayload, NowPlayingResponse


def make_payload(
    *,
    server_time_ms: int,
    start_offset_seconds: float = 10,
    duration_seconds: float = 600,
    ends_at: int | None = None,
    src: str = "/api/media?file=a.mp4",
    title: str = "A",
) -> NowPlayingPayload:
    return NowPlayingPayload(
        title=title,
        rel_path=src.rsplit("=", 1)[-1],
        duration_seconds=duration_seconds,
        start_offset_seconds=start_offset_seconds,
        ends_at=ends_at if ends_at is not None else server_time_ms + 60_000,
        src=src,
        server_time_ms=server_time_ms,
    )


@dataclass
class PendingFetch:
    channel_id: str
    on_success: Callable[[NowPlayingResponse], None]
    on_failure: Callable[[Exception], None]
    handle: FetchHandle = field(default_factory=FetchHandle)

    def succeed(self, payload: NowPlayingPayload | None, server_time_ms: int | None = None) -> None:
        if self.handle.cancelled:
            return
        if server_time_ms is None:
            server_time_ms = payload.server_time_ms if payload is not None else 0
        self.on_success(
            NowPlayingResponse(channel=self.channel_id, now_playing=payload, server_time_ms=server_time_ms)
        )

    def deliver_even_if_cancelled(self, payload: NowPlayingPayload) -> None:
        """Simulate a late response racing the cancellation."""
        self.on_success(
            NowPlayingResponse(channel=self.channel_id, now_playing=payload, server_time_ms=payload.server_time_ms)
        )

    def fail(self, message: str = "connection refused") -> None:
        if not self.handle.cancelled:
            self.on_failure(NetworkFailure(message))


class FakeTransport:
    def __init__(self) -> None:
        self.fetches: list[PendingFetch] = []

    def fetch(self, channel_id, on_success, on_failure) -> FetchHandle:
        pending = PendingFetch(channel_id, on_success, on_failure)
        self.fetches.append(pending)
        return pending.handle

    @property
    def last(self) -> PendingFetch:
        return self.fetches[-1]


class FakeVideoElement:
    """Records every call; position is whatever the last seek set, plus playback time."""

    def __init__(self, clock: SteppedClock, *, reject_plays: int = 0, reject_muted: bool = False) -> None:
        self._clock = clock
        self.muted = False
        self.src: str | None = None
        self.calls: list[tuple[str, Any]] = []
        self.reject_plays = reject_plays
        self.reject_muted = reject_muted
        self.playing = False
        self.seek_lag_seconds = 0.0
        self._position = 0.0
        self._anchor_ms: int | None = None

    def load(self, src: str) -> None:
        self.src = src
        self.playing = False
        self._position = 0.0
        self._anchor_ms = None
        self.calls.append(("load", src))

    def clear(self) -> None:
        self.src = None
        self.playing = False
        self.calls.append(("clear", None))

    @property
    def current_time(self) -> float:
        if not self.playing or self._anchor_ms is None:
            return self._position
        return self._position + (self._clock.now_ms() - self._anchor_ms) / 1000.0

    def seek(self, seconds: float) -> None:
        # A positive lag emulates a decoder that lands short of the target.
        self._position = seconds - self.seek_lag_seconds
        self._anchor_ms = self._clock.now_ms()
        self.calls.append(("seek", seconds))

    def play(self) -> None:
        self.calls.append(("play", self.muted))
        if self.reject_plays > 0 or (self.reject_muted and self.muted):
            self.reject_plays -= 1
            raise PlaybackRejected("play() was rejected")
        if not self.playing:
            self._anchor_ms = self._clock.now_ms()
            self.playing = True

    def pause(self) -> None:
        self._position = self.current_time
        self.playing = False

    def seeks(self) -> list[float]:
        return [value for name, value in self.calls if name == "seek"]
