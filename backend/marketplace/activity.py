# Overview: Outstanding-call counters; "loading" is derived from them per scope.

from __future__ import annotations

import threading
from collections import Counter
from contextlib import contextmanager


class ActivityTracker:
    """
    Counts in-flight service calls per scope (e.g. "offers", "alerts").

    A scope is busy while at least one call is outstanding, so overlapping
    calls never clear each other's state.
    """

    def __init__(self):
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    @contextmanager
    def track(self, scope: str):
        with self._lock:
            self._counts[scope] += 1
        try:
            yield
        finally:
            with self._lock:
                self._counts[scope] -= 1
                if self._counts[scope] <= 0:
                    del self._counts[scope]

    def outstanding(self, scope: str) -> int:
        with self._lock:
            return self._counts.get(scope, 0)

    def is_busy(self, scope: str | None = None) -> bool:
        with self._lock:
            if scope is None:
                return bool(self._counts)
            return self._counts.get(scope, 0) > 0

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)


activity = ActivityTracker()
