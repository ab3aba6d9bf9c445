"""
Client sync engine behavior, driven entirely by a stepped clock and a manual
scheduler. No threads, no sleeps: each test decides when fetches complete and
how far time moves.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from linearcast.infra.exceptions import ClockDriftCorrectionFailure, NetworkFailure, PlaybackRejected
from linearcast.player import (
    ClientSyncEngine,
    ManualScheduler,
    MediaReady,
    PlaybackPaused,
    PlayerState,
    RefetchDue,
    Teardown,
    TuneIn,
)
from linearcast.runtime.clock import SteppedClock
from fake_player import FakeTransport, FakeVideoElement, make_payload

SRC = "/api/media?file=a.mp4"


@pytest.fixture
def env():
    clock = SteppedClock(start_ms=999_900)
    scheduler = ManualScheduler(clock)
    transport = FakeTransport()
    video = FakeVideoElement(clock)
    errors: list = []
    engine = ClientSyncEngine(transport, video, scheduler, clock, on_error=errors.append)
    return SimpleNamespace(
        clock=clock, scheduler=scheduler, transport=transport, video=video, errors=errors, engine=engine
    )


def _tune_and_load(env, **payload_kwargs):
    """Tune in, answer the fetch 200 ms later, report media ready 3 s after that."""
    env.engine.dispatch(TuneIn("retro"))
    env.clock.advance(0.2)
    payload = make_payload(server_time_ms=1_000_000, **payload_kwargs)
    env.transport.last.succeed(payload)
    env.clock.advance(3.0)
    env.engine.dispatch(MediaReady(payload.src))
    return payload


def test_tune_in_fetches_and_loads_media(env):
    env.engine.dispatch(TuneIn("retro"))
    assert env.engine.state is PlayerState.FETCHING
    assert env.transport.last.channel_id == "retro"

    env.clock.advance(0.2)
    env.transport.last.succeed(make_payload(server_time_ms=1_000_000))

    assert env.engine.rtt_ms == 200
    assert env.engine.state is PlayerState.SEEKING
    assert env.video.calls == [("load", SRC)]


def test_seek_uses_round_trip_compensated_offset(env):
    _tune_and_load(env, start_offset_seconds=10)
    assert env.video.seeks() == [pytest.approx(13.0)]
    assert ("play", False) in env.video.calls


def test_seek_verification_settles_in_playing(env):
    _tune_and_load(env)
    env.scheduler.advance(0.3)
    assert env.engine.state is PlayerState.PLAYING
    assert env.video.seeks() == [pytest.approx(13.0)]
    assert env.errors == []


def test_persistent_drift_retries_twice_then_reports(env):
    env.video.seek_lag_seconds = 1.0
    _tune_and_load(env)

    env.scheduler.advance(0.3)
    assert env.engine.state is PlayerState.RETRYING
    env.scheduler.advance(0.5)

    assert env.video.seeks() == [pytest.approx(13.0), pytest.approx(13.3), pytest.approx(13.55)]
    assert env.engine.state is PlayerState.PLAYING
    assert len(env.errors) == 1
    failure = env.errors[0]
    assert isinstance(failure, ClockDriftCorrectionFailure)
    assert failure.attempts == 2
    assert failure.expected == pytest.approx(13.8)


def test_refetch_fires_half_a_second_after_window_end(env):
    env.engine.dispatch(TuneIn("retro"))
    env.clock.advance(0.2)
    env.transport.last.succeed(make_payload(server_time_ms=1_000_000, ends_at=1_060_000))

    env.scheduler.advance(60.3)
    assert len(env.transport.fetches) == 1
    env.scheduler.advance(0.1)
    assert len(env.transport.fetches) == 2
    assert env.clock.now_ms() == 1_060_500


def test_refetch_delay_has_a_floor(env):
    env.engine.dispatch(TuneIn("retro"))
    env.clock.advance(2.0)
    env.transport.last.succeed(make_payload(server_time_ms=1_000_000, ends_at=1_000_000))

    env.scheduler.advance(0.099)
    assert len(env.transport.fetches) == 1
    env.scheduler.advance(0.001)
    assert len(env.transport.fetches) == 2


def test_same_source_on_refetch_seeks_without_reloading(env):
    _tune_and_load(env, ends_at=1_010_000)
    env.scheduler.advance(7.4)
    assert len(env.transport.fetches) == 2

    env.transport.last.succeed(make_payload(server_time_ms=1_010_500, start_offset_seconds=20))
    assert [name for name, _ in env.video.calls].count("load") == 1
    assert env.video.seeks()[-1] == pytest.approx(20.0)


def test_new_source_is_loaded(env):
    _tune_and_load(env, ends_at=1_010_000)
    env.scheduler.advance(7.4)
    env.transport.last.succeed(make_payload(server_time_ms=1_010_500, src="/api/media?file=b.mp4"))
    assert env.video.calls[-1] == ("load", "/api/media?file=b.mp4")
    assert env.engine.state is PlayerState.SEEKING


def test_off_air_clears_player_and_polls(env):
    env.engine.dispatch(TuneIn("retro"))
    env.transport.last.succeed(None, server_time_ms=1_000_000)

    assert env.engine.state is PlayerState.OFF_AIR
    assert ("clear", None) in env.video.calls
    env.scheduler.advance(29.9)
    assert len(env.transport.fetches) == 1
    env.scheduler.advance(0.1)
    assert len(env.transport.fetches) == 2


def test_initial_network_failure_sets_banner_and_retries(env):
    env.engine.dispatch(TuneIn("retro"))
    env.transport.last.fail()

    assert env.engine.banner
    assert env.engine.state is PlayerState.IDLE
    assert isinstance(env.errors[0], NetworkFailure)

    env.scheduler.advance(5.0)
    assert len(env.transport.fetches) == 2
    env.transport.last.succeed(make_payload(server_time_ms=1_005_000))
    assert env.engine.banner is None


def test_failure_keeps_state_and_retries_at_next_boundary(env):
    _tune_and_load(env, ends_at=1_060_000)
    env.scheduler.advance(0.3)
    assert env.engine.state is PlayerState.PLAYING

    env.engine.dispatch(RefetchDue(env.engine.generation))
    env.transport.last.fail()

    assert env.engine.state is PlayerState.PLAYING
    assert env.engine.payload is not None
    assert env.engine.banner
    env.scheduler.advance(56.0)
    assert len(env.transport.fetches) == 2
    env.scheduler.advance(1.1)
    assert len(env.transport.fetches) == 3


def test_failure_after_boundary_retries_on_interval(env):
    _tune_and_load(env, ends_at=1_005_000)
    env.scheduler.advance(2.4)
    assert len(env.transport.fetches) == 2
    env.transport.last.fail()

    env.scheduler.advance(4.9)
    assert len(env.transport.fetches) == 2
    env.scheduler.advance(0.1)
    assert len(env.transport.fetches) == 3


def test_rejected_autoplay_retries_muted(env):
    env.video.reject_plays = 1
    _tune_and_load(env)
    plays = [value for name, value in env.video.calls if name == "play"]
    assert plays == [False, True]
    assert env.video.muted is True
    assert env.errors == []


def test_second_autoplay_rejection_is_reported(env):
    env.video.reject_plays = 2
    _tune_and_load(env)
    assert len(env.errors) == 1
    assert isinstance(env.errors[0], PlaybackRejected)


def test_external_pause_resumes(env):
    _tune_and_load(env)
    env.scheduler.advance(0.3)
    env.video.pause()
    env.engine.dispatch(PlaybackPaused())
    assert env.video.playing
    assert [name for name, _ in env.video.calls].count("play") == 2


def test_pause_while_off_air_is_ignored(env):
    env.engine.dispatch(TuneIn("retro"))
    env.transport.last.succeed(None, server_time_ms=1_000_000)
    env.engine.dispatch(PlaybackPaused())
    assert not any(name == "play" for name, _ in env.video.calls)


def test_channel_switch_cancels_fetch_and_drops_stale_result(env):
    env.engine.dispatch(TuneIn("retro"))
    stale = env.transport.last
    env.engine.dispatch(TuneIn("news"))

    assert stale.handle.cancelled
    stale.deliver_even_if_cancelled(make_payload(server_time_ms=1_000_000))
    assert env.video.calls == []
    assert env.engine.state is PlayerState.FETCHING

    env.transport.last.succeed(make_payload(server_time_ms=1_000_000, src="/api/media?file=news.mp4"))
    assert env.video.calls == [("load", "/api/media?file=news.mp4")]
    assert env.engine.channel_id == "news"


def test_channel_switch_cancels_pending_timers(env):
    _tune_and_load(env, ends_at=1_010_000)
    env.engine.dispatch(TuneIn("news"))
    env.scheduler.advance(60.0)

    assert [f.channel_id for f in env.transport.fetches] == ["retro", "news"]
    assert env.video.seeks() == [pytest.approx(13.0)]


def test_teardown_stops_everything(env):
    payload = _tune_and_load(env)
    env.engine.dispatch(Teardown())
    env.scheduler.advance(120.0)

    assert env.engine.state is PlayerState.IDLE
    assert len(env.transport.fetches) == 1
    env.engine.dispatch(MediaReady(payload.src))
    assert len(env.video.seeks()) == 1


def test_media_ready_for_other_source_is_ignored(env):
    env.engine.dispatch(TuneIn("retro"))
    env.transport.last.succeed(make_payload(server_time_ms=1_000_000))
    env.engine.dispatch(MediaReady("/api/media?file=other.mp4"))
    assert env.video.seeks() == []


def test_unknown_event_raises(env):
    with pytest.raises(TypeError):
        env.engine.dispatch(object())  # type: ignore[arg-type]


def test_seek_check_during_refetch_settles_state_restored_on_failure(env):
    env.engine.dispatch(TuneIn("retro"))
    env.clock.advance(0.2)
    payload = make_payload(server_time_ms=1_000_000, ends_at=1_003_400)
    env.transport.last.succeed(payload)
    env.clock.advance(3.6)
    env.engine.dispatch(MediaReady(payload.src))

    env.scheduler.advance(0.2)
    assert env.engine.state is PlayerState.FETCHING
    env.scheduler.advance(0.1)
    assert env.engine.state is PlayerState.FETCHING

    env.transport.last.fail()
    assert env.engine.state is PlayerState.PLAYING
