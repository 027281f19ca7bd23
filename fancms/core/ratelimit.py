"""
Sliding-window rate limiter keyed by client (usually a hashed or raw IP).

Counts are exact: every accepted request's timestamp is kept until it leaves
the window, so pruning is O(n) in the requests inside the window.

Known limit: state is process-local and a key is never forgotten once seen.
A long-lived process accumulates one (possibly empty) entry per distinct
client; ``prune_idle`` is available for callers that want to reclaim them.
"""

import threading
import time
from typing import Callable, Dict, List, Optional


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RateLimiter:
    """Per-key request log with an injectable millisecond clock."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or _monotonic_ms
        self._requests: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str, max_requests: int, window_ms: int) -> bool:
        """
        Record a request for ``key`` if fewer than ``max_requests`` were accepted
        in the trailing ``window_ms``. Rejected attempts are not recorded.
        """
        now = self._clock()
        with self._lock:
            recent = [t for t in self._requests.get(key, []) if now - t < window_ms]
            if len(recent) >= max_requests:
                self._requests[key] = recent
                return False

            recent.append(now)
            self._requests[key] = recent
            return True

    def pending(self, key: str) -> int:
        """Number of timestamps currently held for ``key`` (unpruned)."""
        with self._lock:
            return len(self._requests.get(key, []))

    @property
    def key_count(self) -> int:
        with self._lock:
            return len(self._requests)

    def prune_idle(self, window_ms: int) -> int:
        """Drop keys with no request inside ``window_ms``. Returns how many were dropped."""
        now = self._clock()
        with self._lock:
            idle = [k for k, stamps in self._requests.items()
                    if not any(now - t < window_ms for t in stamps)]
            for key in idle:
                del self._requests[key]
            return len(idle)
