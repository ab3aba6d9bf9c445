"""Client-side offset estimation.

The server reports where an asset *was* at ``serverTimeMs``. By the time the
response has travelled to the client and the media has loaded, that instant
is in the past; :func:`expected_offset` projects it onto the local clock.
"""

from __future__ import annotations

from dataclasses import dataclass

from linearcast.shared.schemas import NowPlayingPayload

END_EPSILON_SECONDS = 0.25


@dataclass(frozen=True)
class SyncConfig:
    """Tunables for the client sync engine."""

    seek_check_delay_seconds: float = 0.3
    drift_tolerance_seconds: float = 0.5
    max_seek_retries: int = 2
    seek_retry_interval_seconds: float = 0.25
    boundary_grace_ms: int = 500
    min_refetch_delay_ms: int = 100
    off_air_poll_seconds: float = 30.0
    network_retry_seconds: float = 5.0
    end_epsilon_seconds: float = END_EPSILON_SECONDS


def expected_offset(
    payload: NowPlayingPayload,
    rtt_ms: float,
    now_ms: float,
    epsilon: float = END_EPSILON_SECONDS,
) -> float:
    """
    Seconds into the asset the local player should be at ``now_ms``.

    Half the round trip is attributed to the response leg. The result is
    clamped to ``[0, duration - epsilon]`` so a late seek never lands past
    the end of the file.
    """
    server_at_client_ms = payload.server_time_ms + rtt_ms / 2.0
    elapsed = max(0.0, (now_ms - server_at_client_ms) / 1000.0)
    target = payload.start_offset_seconds + elapsed
    upper = max(0.0, payload.duration_seconds - epsilon)
    return min(max(target, 0.0), upper)


def next_fetch_delay_ms(ends_at_ms: int, now_ms: int, config: SyncConfig) -> int:
    """Delay until the post-boundary fetch: ``endsAt`` plus grace, at least the minimum."""
    return max(config.min_refetch_delay_ms, ends_at_ms + config.boundary_grace_ms - now_ms)
