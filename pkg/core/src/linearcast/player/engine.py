"""
Client sync engine.

Keeps a local video element aligned with the channel's broadcast timeline:

- fetch the now-playing envelope and measure the round trip,
- once media is ready, seek to the projected offset and verify the seek,
- refetch shortly after the current window ends,
- keep playing through autoplay rejections and external pauses,
- show an off-air screen and poll while nothing is scheduled.

The engine is an explicit state machine. Every input arrives as an event
passed to :meth:`ClientSyncEngine.dispatch`; timers come from an injected
scheduler, time from an injected clock and HTTP from an injected transport.
Events tagged with a stale generation or request id are dropped, which is how
a channel switch makes in-flight work harmless.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from linearcast.infra.exceptions import (
    ClockDriftCorrectionFailure,
    NetworkFailure,
    PlaybackRejected,
    SyncError,
)
from linearcast.player.scheduler import Scheduler, TimerHandle
from linearcast.player.sync import SyncConfig, expected_offset, next_fetch_delay_ms
from linearcast.player.transport import FetchHandle, NowPlayingTransport
from linearcast.player.video import VideoElement
from linearcast.runtime.clock import Clock
from linearcast.shared.schemas import NowPlayingPayload, NowPlayingResponse

logger = logging.getLogger(__name__)

NETWORK_BANNER = "Connection to the channel was lost. Retrying."


class PlayerState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SEEKING = "seeking"
    RETRYING = "retrying"
    PLAYING = "playing"
    OFF_AIR = "off_air"


@dataclass(frozen=True)
class TuneIn:
    channel_id: str


@dataclass(frozen=True)
class FetchCompleted:
    request_id: int
    response: NowPlayingResponse
    started_ms: int
    finished_ms: int


@dataclass(frozen=True)
class FetchFailed:
    request_id: int
    error: Exception


@dataclass(frozen=True)
class RefetchDue:
    generation: int


@dataclass(frozen=True)
class MediaReady:
    src: str


@dataclass(frozen=True)
class SeekCheck:
    generation: int
    seek_id: int
    attempt: int


@dataclass(frozen=True)
class PlaybackPaused:
    pass


@dataclass(frozen=True)
class Teardown:
    pass


EngineEvent = Union[
    TuneIn,
    FetchCompleted,
    FetchFailed,
    RefetchDue,
    MediaReady,
    SeekCheck,
    PlaybackPaused,
    Teardown,
]


class ClientSyncEngine:
    """Drive a :class:`VideoElement` from the now-playing endpoint.

    Parameters
    ----------
    transport:
        Source of now-playing envelopes.
    video:
        Element being kept in sync.
    scheduler:
        Timer source. All events must be dispatched on its thread.
    clock:
        Local clock used for round-trip and offset projection.
    config:
        Timing tunables, see :class:`SyncConfig`.
    on_error:
        Listener for non-fatal sync problems (network, drift, autoplay).
    """

    def __init__(
        self,
        transport: NowPlayingTransport,
        video: VideoElement,
        scheduler: Scheduler,
        clock: Clock,
        config: SyncConfig | None = None,
        on_error: Callable[[SyncError], None] | None = None,
    ) -> None:
        self._transport = transport
        self._video = video
        self._scheduler = scheduler
        self._clock = clock
        self.config = config or SyncConfig()
        self._on_error = on_error

        self.state = PlayerState.IDLE
        self.channel_id: str | None = None
        self.payload: NowPlayingPayload | None = None
        self.rtt_ms: int = 0
        self.banner: str | None = None
        self.current_src: str | None = None

        self._generation = 0
        self._request_seq = 0
        self._pending_request: int | None = None
        self._state_before_fetch = PlayerState.IDLE
        self._seek_seq = 0
        self._fetch_handle: FetchHandle | None = None
        self._refetch_timer: TimerHandle | None = None
        self._seek_timer: TimerHandle | None = None

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Event entry points
    # ------------------------------------------------------------------

    def post(self, event: EngineEvent) -> None:
        """Queue ``event`` on the scheduler's thread."""
        self._scheduler.call_later(0, lambda: self.dispatch(event))

    def dispatch(self, event: EngineEvent) -> None:
        if isinstance(event, TuneIn):
            self._on_tune_in(event)
        elif isinstance(event, FetchCompleted):
            self._on_fetch_completed(event)
        elif isinstance(event, FetchFailed):
            self._on_fetch_failed(event)
        elif isinstance(event, RefetchDue):
            if event.generation == self._generation:
                self._start_fetch()
        elif isinstance(event, MediaReady):
            self._on_media_ready(event)
        elif isinstance(event, SeekCheck):
            self._on_seek_check(event)
        elif isinstance(event, PlaybackPaused):
            self._on_paused()
        elif isinstance(event, Teardown):
            self._on_teardown()
        else:
            raise TypeError(f"Unsupported engine event: {type(event).__name__}")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _on_tune_in(self, event: TuneIn) -> None:
        self._cancel_all()
        self._generation += 1
        self.channel_id = event.channel_id
        self.payload = None
        self.banner = None
        self.state = PlayerState.IDLE
        logger.info("tune-in channel=%s generation=%s", event.channel_id, self._generation)
        self._start_fetch()

    def _start_fetch(self) -> None:
        if self.channel_id is None:
            return
        if self._fetch_handle is not None:
            self._fetch_handle.cancel()
        self._request_seq += 1
        request_id = self._request_seq
        self._pending_request = request_id
        self._state_before_fetch = self.state
        self.state = PlayerState.FETCHING
        started_ms = self._clock.now_ms()

        def _success(response: NowPlayingResponse) -> None:
            self.dispatch(FetchCompleted(request_id, response, started_ms, self._clock.now_ms()))

        def _failure(error: Exception) -> None:
            self.dispatch(FetchFailed(request_id, error))

        handle = self._transport.fetch(self.channel_id, _success, _failure)
        if self._pending_request == request_id:
            self._fetch_handle = handle

    def _on_fetch_completed(self, event: FetchCompleted) -> None:
        if event.request_id != self._pending_request:
            logger.debug("dropping stale fetch result request_id=%s", event.request_id)
            return
        self._pending_request = None
        self._fetch_handle = None
        self.banner = None
        self.rtt_ms = max(0, event.finished_ms - event.started_ms)

        now_playing = event.response.now_playing
        if now_playing is None:
            self._go_off_air()
            return

        self.payload = now_playing
        delay_ms = next_fetch_delay_ms(now_playing.ends_at, self._clock.now_ms(), self.config)
        self._schedule_refetch(delay_ms / 1000.0)
        logger.info(
            "now-playing channel=%s title=%s rtt_ms=%s next_fetch_in_ms=%s",
            self.channel_id,
            now_playing.title,
            self.rtt_ms,
            delay_ms,
        )

        self.state = PlayerState.SEEKING
        if now_playing.src != self.current_src:
            self.current_src = now_playing.src
            self._video.load(now_playing.src)
        else:
            self._sync_to_expected()

    def _on_fetch_failed(self, event: FetchFailed) -> None:
        if event.request_id != self._pending_request:
            return
        self._pending_request = None
        self._fetch_handle = None
        self.state = self._state_before_fetch
        self.banner = NETWORK_BANNER

        error = event.error
        if not isinstance(error, SyncError):
            error = NetworkFailure(str(error))
        logger.warning("now-playing fetch failed channel=%s error=%s", self.channel_id, error)
        self._report(error)

        now_ms = self._clock.now_ms()
        delay_s = self.config.network_retry_seconds
        if self.payload is not None:
            boundary_ms = self.payload.ends_at + self.config.boundary_grace_ms
            if boundary_ms > now_ms:
                delay_s = (boundary_ms - now_ms) / 1000.0
        self._schedule_refetch(delay_s)

    def _on_media_ready(self, event: MediaReady) -> None:
        if self.payload is None or event.src != self.current_src:
            return
        self._sync_to_expected()

    def _on_seek_check(self, event: SeekCheck) -> None:
        if event.generation != self._generation or event.seek_id != self._seek_seq:
            return
        if self.payload is None:
            return
        self._seek_timer = None
        expected = self._expected_now()
        actual = self._video.current_time
        drift = abs(actual - expected)

        if drift <= self.config.drift_tolerance_seconds:
            self._settle(PlayerState.PLAYING)
            logger.info("seek verified channel=%s offset=%.3f drift=%.3f", self.channel_id, actual, drift)
            return

        if event.attempt < self.config.max_seek_retries:
            attempt = event.attempt + 1
            self._settle(PlayerState.RETRYING)
            logger.info(
                "seek retry channel=%s attempt=%s expected=%.3f actual=%.3f",
                self.channel_id,
                attempt,
                expected,
                actual,
            )
            self._video.seek(expected)
            self._schedule_seek_check(self.config.seek_retry_interval_seconds, attempt)
            return

        self._settle(PlayerState.PLAYING)
        failure = ClockDriftCorrectionFailure(expected, actual, event.attempt)
        logger.warning("clock drift correction failed channel=%s: %s", self.channel_id, failure)
        self._report(failure)

    def _on_paused(self) -> None:
        if self.payload is None or self.state in (PlayerState.IDLE, PlayerState.OFF_AIR):
            return
        logger.info("external pause detected channel=%s, resuming", self.channel_id)
        self._start_playback()

    def _on_teardown(self) -> None:
        self._cancel_all()
        self._generation += 1
        self._pending_request = None
        self.channel_id = None
        self.payload = None
        self.state = PlayerState.IDLE
        logger.info("engine torn down")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _settle(self, state: PlayerState) -> None:
        # A refetch in flight owns FETCHING; its outcome restores this state.
        if self._pending_request is not None:
            self._state_before_fetch = state
        else:
            self.state = state

    def _expected_now(self) -> float:
        assert self.payload is not None
        return expected_offset(
            self.payload,
            self.rtt_ms,
            self._clock.now_ms(),
            epsilon=self.config.end_epsilon_seconds,
        )

    def _sync_to_expected(self) -> None:
        expected = self._expected_now()
        self._settle(PlayerState.SEEKING)
        logger.info("seek channel=%s src=%s offset=%.3f", self.channel_id, self.current_src, expected)
        self._video.seek(expected)
        self._start_playback()
        self._seek_seq += 1
        self._schedule_seek_check(self.config.seek_check_delay_seconds, 0)

    def _start_playback(self) -> None:
        try:
            self._video.play()
            return
        except PlaybackRejected as e:
            if self._video.muted:
                logger.error("playback rejected while muted channel=%s: %s", self.channel_id, e)
                self._report(e)
                return
            logger.info("unmuted playback rejected channel=%s, retrying muted", self.channel_id)

        self._video.muted = True
        try:
            self._video.play()
        except PlaybackRejected as e:
            logger.error("muted playback rejected channel=%s: %s", self.channel_id, e)
            self._report(e)

    def _go_off_air(self) -> None:
        self.payload = None
        self.current_src = None
        self.state = PlayerState.OFF_AIR
        self._video.clear()
        logger.info("channel off air channel=%s", self.channel_id)
        self._schedule_refetch(self.config.off_air_poll_seconds)

    def _schedule_refetch(self, delay_s: float) -> None:
        if self._refetch_timer is not None:
            self._refetch_timer.cancel()
        generation = self._generation
        self._refetch_timer = self._scheduler.call_later(
            delay_s, lambda: self.dispatch(RefetchDue(generation))
        )

    def _schedule_seek_check(self, delay_s: float, attempt: int) -> None:
        if self._seek_timer is not None:
            self._seek_timer.cancel()
        event = SeekCheck(self._generation, self._seek_seq, attempt)
        self._seek_timer = self._scheduler.call_later(delay_s, lambda: self.dispatch(event))

    def _cancel_all(self) -> None:
        if self._fetch_handle is not None:
            self._fetch_handle.cancel()
            self._fetch_handle = None
        for timer in (self._refetch_timer, self._seek_timer):
            if timer is not None:
                timer.cancel()
        self._refetch_timer = None
        self._seek_timer = None

    def _report(self, error: SyncError) -> None:
        if self._on_error is not None:
            self._on_error(error)
