"""
Listening telemetry helpers: privacy-preserving IP hashing and play statistics.
"""

import hashlib
from collections import Counter
from typing import Any, Dict, List, Mapping, Sequence

from .schema import TelemetryEvent, utc_now_iso


def hash_ip(ip: str) -> str:
    """First 16 hex chars of sha256(ip)."""
    return hashlib.sha256(ip.encode('utf-8')).hexdigest()[:16]


def client_ip(headers: Mapping[str, str]) -> str:
    """Client IP from proxy headers: first x-forwarded-for hop, then x-real-ip."""
    forwarded = headers.get('x-forwarded-for')
    if forwarded:
        return forwarded.split(',')[0].strip()

    real_ip = headers.get('x-real-ip')
    if real_ip:
        return real_ip

    return 'unknown'


def create_telemetry_event(ip: str, event: str, data: Dict[str, Any]) -> TelemetryEvent:
    return TelemetryEvent(ts=utc_now_iso(), ip_hash=hash_ip(ip), event=event, data=data)


def aggregate_play_counts(events: Sequence[TelemetryEvent]) -> Dict[str, int]:
    """``play_start`` count per ``data.trackId``."""
    counts: Counter = Counter()
    for e in events:
        if e.event != 'play_start':
            continue
        track_id = e.data.get('trackId')
        if track_id:
            counts[track_id] += 1
    return dict(counts)


def popular_tracks(events: Sequence[TelemetryEvent], limit: int = 10) -> List[Dict[str, Any]]:
    counts = aggregate_play_counts(events)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{"trackId": track_id, "count": count} for track_id, count in ranked[:limit]]


def completion_rate(events: Sequence[TelemetryEvent]) -> float:
    """Completed plays as a percentage of started plays."""
    starts = sum(1 for e in events if e.event == 'play_start')
    completes = sum(1 for e in events if e.event == 'complete')

    if starts == 0:
        return 0.0
    return (completes / starts) * 100
