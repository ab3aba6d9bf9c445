from __future__ import annotations

import pytest

from linearcast.player.sync import SyncConfig, expected_offset, next_fetch_delay_ms
from fake_player import make_payload


def test_half_round_trip_is_attributed_to_the_response():
    payload = make_payload(server_time_ms=1_000_000, start_offset_seconds=10)
    assert expected_offset(payload, rtt_ms=200, now_ms=1_003_100) == pytest.approx(13.0)


def test_elapsed_never_goes_negative():
    payload = make_payload(server_time_ms=1_000_000, start_offset_seconds=10)
    assert expected_offset(payload, rtt_ms=400, now_ms=1_000_050) == pytest.approx(10.0)


def test_clamped_before_end_of_asset():
    payload = make_payload(server_time_ms=1_000_000, start_offset_seconds=598, duration_seconds=600)
    assert expected_offset(payload, rtt_ms=0, now_ms=1_010_000) == pytest.approx(599.75)


def test_next_fetch_delay_has_grace_and_minimum():
    config = SyncConfig()
    assert next_fetch_delay_ms(ends_at_ms=10_000, now_ms=4_000, config=config) == 6_500
    assert next_fetch_delay_ms(ends_at_ms=10_000, now_ms=20_000, config=config) == 100
