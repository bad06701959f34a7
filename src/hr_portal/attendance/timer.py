from __future__ import annotations

import logging
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..core.constants import TICK_SECONDS

logger = logging.getLogger(__name__)


class SessionTimer:
    """Periodic tick source backed by APScheduler: one interval job per logged-in user."""

    def __init__(self, *, tick_seconds: int = TICK_SECONDS, scheduler: Optional[BackgroundScheduler] = None):
        self._tick_seconds = int(tick_seconds)
        self._scheduler = scheduler or BackgroundScheduler()

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    def start(self):
        """Start the scheduler thread (idempotent)."""
        if not self._scheduler.running:
            self._scheduler.start()

    def stop(self):
        """Stop the scheduler without waiting for running jobs."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    def add(self, job_id: str, func: Callable[[], None]) -> None:
        self._scheduler.add_job(
            func,
            trigger=IntervalTrigger(seconds=self._tick_seconds),
            id=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    def remove(self, job_id: str) -> None:
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            logger.debug("no tick job %s to remove", job_id)

    def has(self, job_id: str) -> bool:
        return self._scheduler.get_job(job_id) is not None
