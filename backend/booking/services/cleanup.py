"""
Cleanup Sweeper

Periodically deletes appointments whose end time has passed. This is a
retention policy only; no other component relies on expired appointments
being gone. Failures are logged and the next interval runs as usual.
"""

import logging
from datetime import datetime
from threading import Lock
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "appointment_cleanup"


class AppointmentCleanupSweeper:
    def __init__(
        self,
        store: Any,
        interval_minutes: int = 30,
        clock: Callable[[], datetime] = datetime.now,
        enabled: bool = True,
    ) -> None:
        self.store = store
        self.interval_minutes = interval_minutes
        self.clock = clock
        self.enabled = enabled
        self._lock = Lock()
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    def run_once(self) -> int:
        """Deletes appointments that ended before now; returns how many were removed."""
        try:
            removed = self.store.delete_expired(self.clock())
        except Exception:
            logger.exception("An error occurred while cleaning up expired appointments")
            return 0

        if removed:
            logger.info("Removed %s expired appointments", removed)
        else:
            logger.info("No expired appointments to delete")
        return removed

    def start(self) -> None:
        if not self.enabled:
            logger.info("Appointment cleanup sweeper is disabled, skipping start")
            return

        with self._lock:
            if self._scheduler is not None:
                logger.warning("Appointment cleanup sweeper already running")
                return

            scheduler = BackgroundScheduler(daemon=True)
            scheduler.add_job(
                self.run_once,
                IntervalTrigger(minutes=self.interval_minutes),
                id=CLEANUP_JOB_ID,
                name="Expired appointment cleanup",
                replace_existing=True,
                next_run_time=datetime.now(),
                max_instances=1,
                coalesce=True,
            )
            scheduler.start()
            self._scheduler = scheduler

        logger.info("Appointment cleanup sweeper started (every %s minutes)", self.interval_minutes)

    def shutdown(self) -> None:
        with self._lock:
            scheduler, self._scheduler = self._scheduler, None
        if scheduler is None:
            return
        scheduler.shutdown(wait=False)
        logger.info("Appointment cleanup sweeper stopped")
