from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional

import schedule

from ..core.constants import DEFAULT_SYNC_INTERVAL_MINUTES
from .model import CycleResult
from .service import SyncService

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Runs SyncService.run_cycle on a wall-clock interval and on demand.

    Intervals that divide an hour are pinned to the clock (``:00``, ``:30`` for
    30 minutes), like a ``*/30`` cron entry; others repeat relative to start.
    """

    def __init__(
        self,
        service: SyncService,
        *,
        interval_minutes: int = DEFAULT_SYNC_INTERVAL_MINUTES,
        initial_delay_seconds: Optional[float] = 2,
        poll_seconds: float = 1.0,
    ):
        if int(interval_minutes) <= 0:
            raise ValueError("interval_minutes must be positive")
        self._service = service
        self._interval = int(interval_minutes)
        self._initial_delay = initial_delay_seconds
        self._poll = float(poll_seconds)
        self._scheduler = schedule.Scheduler()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def interval_minutes(self) -> int:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def next_run(self) -> Optional[datetime]:
        """Next scheduled run, local naive time as reported by ``schedule``."""
        return self._scheduler.next_run

    def install_jobs(self) -> None:
        self._scheduler.clear()
        if 60 % self._interval == 0:
            for minute in range(0, 60, self._interval):
                self._scheduler.every().hour.at(f":{minute:02d}").do(self._run_job, "scheduled")
        else:
            self._scheduler.every(self._interval).minutes.do(self._run_job, "scheduled")

        if self._initial_delay is not None:
            self._scheduler.every(max(1, int(self._initial_delay))).seconds.do(self._run_once, "initial")

    def run_pending(self) -> None:
        self._scheduler.run_pending()

    def start(self) -> None:
        if self.is_running:
            return
        self.install_jobs()
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="sync-scheduler", daemon=True)
        self._thread.start()
        logger.info("Scheduler started: every %d minutes", self._interval)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self._scheduler.clear()
        logger.info("Scheduler stopped")

    def trigger(self, reason: str = "manual") -> CycleResult:
        """Run the same cycle outside the schedule (manual/force sync)."""
        logger.info("%s sync triggered", reason.capitalize())
        return self._service.run_cycle(reason)

    def _loop(self) -> None:
        while not self._stop.wait(self._poll):
            self._scheduler.run_pending()

    def _run_job(self, reason: str) -> None:
        result = self._service.run_cycle(reason)
        if result.error:
            logger.error("%s sync failed: %s", reason.capitalize(), result.error)
        else:
            logger.info(
                "%s sync completed. New records: %d, total: %d",
                reason.capitalize(),
                result.new_records_count,
                result.total_records,
            )

    def _run_once(self, reason: str):
        self._run_job(reason)
        return schedule.CancelJob
