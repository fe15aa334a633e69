"""
Rolling per-session cycle latency tracking.
Thread-safe; one monitor is shared by all sessions of a registry.
"""

import time
import threading
import logging
from collections import deque
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Tracks processing-cycle latency and outcomes per session."""

    def __init__(self, window_size=100):
        self._window_size = window_size
        self._lock = threading.Lock()
        self._cycle_times = {}   # session_id -> deque of ms
        self._counters = {}      # session_id -> {outcome: count}

    @contextmanager
    def measure(self, session_id: str):
        """Context manager timing one processing cycle."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            with self._lock:
                times = self._cycle_times.get(session_id)
                if times is None:
                    times = self._cycle_times[session_id] = deque(maxlen=self._window_size)
                times.append(elapsed_ms)

    def record(self, session_id: str, outcome: str):
        """Count a cycle outcome (processed, empty_frame, read_failure, error, ...)."""
        with self._lock:
            counters = self._counters.setdefault(session_id, {})
            counters[outcome] = counters.get(outcome, 0) + 1

    def avg_latency_ms(self, session_id: str) -> float:
        with self._lock:
            times = self._cycle_times.get(session_id)
            if not times:
                return 0.0
            return sum(times) / len(times)

    def get_report(self, session_id: str) -> dict:
        with self._lock:
            times = list(self._cycle_times.get(session_id, []))
            counters = dict(self._counters.get(session_id, {}))
        return {
            "cycles": len(times),
            "avg_latency_ms": round(sum(times) / len(times), 2) if times else 0.0,
            "max_latency_ms": round(max(times), 2) if times else 0.0,
            "outcomes": counters,
        }

    def forget(self, session_id: str):
        """Drop everything recorded for a session."""
        with self._lock:
            self._cycle_times.pop(session_id, None)
            self._counters.pop(session_id, None)
