"""
app/services/sync_guard.py

At-most-one-run guard for a feed reconciliation instance.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class SyncGuard:
    """
    Best-effort single-process guard: one run at a time, and a cooldown
    measured from the start of the previous run.

    Duplicate triggers (double clicks, a scheduler tick racing a manual
    trigger) are rejected rather than queued.
    """

    def __init__(
        self,
        *,
        cooldown_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cooldown_seconds = max(0.0, cooldown_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._in_flight = False
        self._last_run_at: float | None = None
        self._previous_run_at: float | None = None

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    @property
    def last_run_at(self) -> float | None:
        with self._lock:
            return self._last_run_at

    def try_acquire(self) -> bool:
        """
        Claim the run slot. Returns False when a run is active or cooling down.
        """

        with self._lock:
            if self._in_flight:
                return False
            now = self._clock()
            if self._last_run_at is not None and now - self._last_run_at < self._cooldown_seconds:
                return False
            self._in_flight = True
            self._previous_run_at = self._last_run_at
            self._last_run_at = now
            return True

    def release(self, *, failed: bool = False) -> None:
        """
        Free the run slot. A failed run gives back its cooldown.
        """

        with self._lock:
            self._in_flight = False
            if failed:
                self._last_run_at = self._previous_run_at
