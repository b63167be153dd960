"""
Background expiry of old suspensions.

A daemon thread wakes every ``interval_seconds`` (hourly by default). When the
clock shows a new calendar day since the last run it removes suspensions older
than the retention window. A failed pass leaves ``last_run_day`` alone so the
next tick retries.
"""
import logging
import threading
from datetime import date, timedelta
from typing import Optional

from pos_register.core.clock import Clock
from pos_register.core.errors import PersistenceError
from pos_register.services.suspension import SuspensionManager

logger = logging.getLogger(__name__)


class SuspensionCleanupScheduler:

    def __init__(
        self,
        manager: SuspensionManager,
        clock: Clock,
        retention_days: int = 7,
        interval_seconds: float = 3600.0,
        shutdown_timeout: float = 5.0,
    ):
        self.manager = manager
        self.clock = clock
        self.retention_days = retention_days
        self.interval_seconds = interval_seconds
        self.shutdown_timeout = shutdown_timeout
        self.last_run_day: date = clock.today()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="suspension-cleanup", daemon=True)
        self._thread.start()
        logger.info("Suspension cleanup scheduler started (retention: %d days)", self.retention_days)

    def stop(self) -> bool:
        """
        Stop the timer, waiting up to ``shutdown_timeout`` for a running pass.

        Returns True if the thread finished in time.
        """
        if self._thread is None:
            return True
        self._stop.set()
        self._thread.join(self.shutdown_timeout)
        finished = not self._thread.is_alive()
        if finished:
            logger.info("Suspension cleanup scheduler stopped")
        else:
            logger.warning("Suspension cleanup still running after %.1fs; abandoning it", self.shutdown_timeout)
        self._thread = None
        return finished

    def tick(self) -> Optional[int]:
        """
        Run the cleanup if the day has changed since the last run.

        Returns the number of suspensions removed, or None if nothing ran.
        """
        today = self.clock.today()
        if today <= self.last_run_day:
            return None
        try:
            removed = self.perform_cleanup()
        except PersistenceError:
            logger.error("Suspension cleanup failed; retrying next tick", exc_info=True)
            return None
        self.last_run_day = today
        return removed

    def perform_cleanup(self) -> int:
        cutoff = self.clock.now() - timedelta(days=self.retention_days)
        return self.manager.cleanup_older_than(cutoff)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Unexpected error during suspension cleanup")
            self._stop.wait(self.interval_seconds)
