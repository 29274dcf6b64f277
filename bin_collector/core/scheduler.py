"""
bin_collector/core/scheduler.py
═══════════════════════════════════════════════════════════════════════════════
Background refresh scheduler with strict guarantees:

  1. ONE running loop per scheduler (start() is a no-op while running)
  2. ONE cycle at a time (asyncio.Lock - overlapping cycles are skipped)
  3. Failed attempt → log, wait RETRY_DELAY_S, retry (RETRY_COUNT per cycle)
  4. All attempts failed → keep last valid snapshot, never overwrite
  5. Cycle runs immediately on start, then every REFRESH_INTERVAL_S
  6. stop() cancels the loop task - used at shutdown and in tests

Sleep is injectable so tests can drive cycles without real delays.
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

from bin_collector.core.cache import SnapshotCache
from bin_collector.core.config import REFRESH_INTERVAL_S, RETRY_COUNT, RETRY_DELAY_S
from bin_collector.errors import FetchError
from bin_collector.scrapers.simbio import ScheduleSnapshot

log = logging.getLogger("scheduler")

Sleep = Callable[[float], Awaitable[None]]


class Fetcher(Protocol):
    async def fetch(self) -> ScheduleSnapshot:
        ...


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int   = RETRY_COUNT
    delay_s:      float = RETRY_DELAY_S
    backoff:      float = 1.0   # 1.0 → fixed delay

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_s < 0 or self.backoff < 1.0:
            raise ValueError("delay_s must be >= 0 and backoff >= 1.0")

    def delay_after(self, attempt: int) -> float:
        """Wait before the attempt following `attempt` (1-based)."""
        return self.delay_s * (self.backoff ** (attempt - 1))


class RefreshScheduler:
    """Drives a fetcher on a fixed interval and publishes into a SnapshotCache."""

    def __init__(
        self,
        fetcher: Fetcher,
        cache: SnapshotCache,
        *,
        interval_s: float = REFRESH_INTERVAL_S,
        policy: Optional[RetryPolicy] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.fetcher    = fetcher
        self.cache      = cache
        self.interval_s = interval_s
        self.policy     = policy or RetryPolicy()
        self._sleep     = sleep
        self._cycle_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ── One cycle ─────────────────────────────────────────────────────────────

    async def run_cycle(self) -> bool:
        """Fetch with retries. Returns True if a new snapshot was published."""
        if self._cycle_lock.locked():
            log.warning("Previous cycle still running - skipping cycle")
            return False

        async with self._cycle_lock:
            t0 = time.monotonic()
            attempts = self.policy.max_attempts
            for attempt in range(1, attempts + 1):
                try:
                    snapshot = await self.fetcher.fetch()
                except FetchError as ex:
                    log.warning(f"Attempt {attempt}/{attempts} failed: {ex}")
                    if attempt < attempts:
                        await self._sleep(self.policy.delay_after(attempt))
                    continue

                self.cache.write(snapshot)
                log.info(
                    f"Refreshed {snapshot.city or '?'}: mko={snapshot.mko_date} "
                    f"emb={snapshot.emb_date} bio={snapshot.bio_date} "
                    f"({time.monotonic() - t0:.1f}s, attempt {attempt})"
                )
                return True

            log.error("All retry attempts failed. Serving with old data or fallback response.")
            return False

    # ── Loop ──────────────────────────────────────────────────────────────────

    async def run(self) -> None:
        """Runs until cancelled. A cycle error never stops the loop."""
        log.info(f"Scheduler started (every {self.interval_s:g}s)")
        while True:
            try:
                await self.run_cycle()
            except Exception as ex:
                log.exception(f"Cycle error (continuing): {ex}")
            log.debug(f"Next cycle in {self.interval_s:g}s")
            await self._sleep(self.interval_s)

    def start(self) -> asyncio.Task:
        """Spawn run() on the current loop. Must be called from async code."""
        if self.running:
            log.warning("Scheduler already running - ignoring duplicate start")
            return self._task
        self._task = asyncio.create_task(self.run(), name="refresh-scheduler")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        log.info("Scheduler stopped")
