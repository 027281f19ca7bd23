"""
Telemetry helpers: IP hashing, client IP extraction and play statistics.
"""

import hashlib

from fancms.core.analytics import (
    aggregate_play_counts,
    client_ip,
    completion_rate,
    create_telemetry_event,
    hash_ip,
    popular_tracks,
)
from fancms.core.schema import TelemetryEvent


def event(name, track_id=None):
    data = {"trackId": track_id} if track_id else {}
    return TelemetryEvent(ts="2024-01-01T00:00:00.000Z", ip_hash="h", event=name, data=data)


def test_hash_ip_is_truncated_sha256():
    assert hash_ip("1.2.3.4") == hashlib.sha256(b"1.2.3.4").hexdigest()[:16]


def test_client_ip_prefers_first_forwarded_hop():
    assert client_ip({"x-forwarded-for": "9.9.9.9, 10.0.0.1", "x-real-ip": "8.8.8.8"}) == "9.9.9.9"
    assert client_ip({"x-real-ip": "8.8.8.8"}) == "8.8.8.8"
    assert client_ip({}) == "unknown"


def test_created_event_never_holds_raw_ip():
    e = create_telemetry_event("1.2.3.4", "play_start", {"trackId": "tr1"})
    assert e.ip_hash == hash_ip("1.2.3.4")
    assert "1.2.3.4" not in e.model_dump_json()
    assert e.ts.endswith("Z")


def test_play_counts_and_popular_tracks():
    events = [
        event("play_start", "a"),
        event("play_start", "b"),
        event("play_start", "b"),
        event("complete", "b"),
        event("play_start"),
    ]
    assert aggregate_play_counts(events) == {"a": 1, "b": 2}
    assert popular_tracks(events, limit=1) == [{"trackId": "b", "count": 2}]


def test_completion_rate():
    events = [event("play_start", "a"), event("play_start", "a"), event("complete", "a")]
    assert completion_rate(events) == 50.0
    assert completion_rate([]) == 0.0
