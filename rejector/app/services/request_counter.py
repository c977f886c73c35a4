"""Thread-safe request counters shared by the rejection service."""

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class CounterSnapshot:
    """Consistent point-in-time view of the counters."""
    total: int
    success: int
    errors: int

    @property
    def success_rate(self) -> float:
        """Success rate as a percentage (100.0 before any request)."""
        if self.total == 0:
            return 100.0
        return self.success / self.total * 100.0


class RequestCounter:
    """Monotonic total/success/error counters.

    Increments are serialized by a lock and snapshots are taken under the
    same lock, so readers never see a torn combination of values.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0
        self._success = 0
        self._errors = 0

    def next_request(self) -> int:
        """Count a new request and return its sequence number."""
        with self._lock:
            self._total += 1
            return self._total

    def record_success(self) -> None:
        with self._lock:
            self._success += 1

    def record_error(self) -> None:
        with self._lock:
            self._errors += 1

    def snapshot(self) -> CounterSnapshot:
        with self._lock:
            return CounterSnapshot(
                total=self._total,
                success=self._success,
                errors=self._errors,
            )
