from __future__ import annotations

from linearcast.infra.logging import redact_secrets


def test_secret_keys_are_redacted():
    event = redact_secrets(None, "info", {"event": "fetch", "api_key": "abc", "Authorization": "Bearer x"})
    assert event["api_key"] == "***REDACTED***"
    assert event["Authorization"] == "***REDACTED***"
    assert event["event"] == "fetch"


def test_secrets_inside_values_are_masked():
    event = redact_secrets(
        None,
        "info",
        {"url": "http://tv.local/api/media?file=a.mp4&token=abc123", "nested": {"q": ["password=hunter2"]}},
    )
    assert event["url"] == "http://tv.local/api/media?file=a.mp4&token=***"
    assert event["nested"] == {"q": ["password=***"]}
