"""
bin_collector/core/cache.py
═══════════════════════════════════════════════════════════════════════════
Atomic in-memory snapshot cell.
  • Only the refresh scheduler calls write()
  • Only routers call read()
  • Every access goes through one lock → atomic replace, never partial
  • Failed fetches never call write() → stale data stays valid
  • Memory only: a new cell starts with the empty default snapshot
═══════════════════════════════════════════════════════════════════════════
"""

import logging
import threading
import time
from typing import Callable, Optional

from bin_collector.scrapers.simbio import ScheduleSnapshot

log = logging.getLogger("cache")


class SnapshotCache:
    """Holds the last successfully fetched ScheduleSnapshot."""

    def __init__(
        self,
        initial: Optional[ScheduleSnapshot] = None,
        *,
        lock=None,
        clock: Callable[[], float] = time.time,
    ):
        self._snapshot = initial if initial is not None else ScheduleSnapshot()
        self._ts: Optional[float] = None
        self._lock = lock if lock is not None else threading.Lock()
        self._clock = clock

    def write(self, snapshot: ScheduleSnapshot) -> None:
        """Replace the cached snapshot. Called by the scheduler only."""
        if not isinstance(snapshot, ScheduleSnapshot):
            raise TypeError(f"expected ScheduleSnapshot, got {type(snapshot).__name__}")
        ts = self._clock()
        with self._lock:
            self._snapshot = snapshot
            self._ts = ts

    def read(self) -> ScheduleSnapshot:
        """Current snapshot - the pristine default until the first write."""
        with self._lock:
            return self._snapshot

    def read_with_ts(self) -> tuple[ScheduleSnapshot, Optional[float]]:
        """Snapshot and its write time, taken under one lock."""
        with self._lock:
            return self._snapshot, self._ts

    def last_write(self) -> Optional[float]:
        """Epoch seconds of the last successful write, or None."""
        with self._lock:
            return self._ts

    def seconds_since(self, ts: Optional[float]) -> Optional[float]:
        return round(self._clock() - ts, 1) if ts is not None else None

    def age(self) -> Optional[float]:
        """Seconds since last successful write, or None."""
        return self.seconds_since(self.last_write())
