"""Scheduling utilities for firing prayer reminders and daily refreshes."""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Callable, Iterable, List, Optional

import pytz
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from prayer_times import resolve_timezone
from reminders import ReminderRequest

LOGGER = logging.getLogger(__name__)

REFRESH_DELAY = timedelta(minutes=5)


class PrayerScheduler:
    """Wrap APScheduler to manage one-off reminder jobs."""

    def __init__(self, timezone: str) -> None:
        self._scheduler = BackgroundScheduler(timezone=resolve_timezone(timezone).zone)
        self._jobs: List[str] = []
        self._refresh_job_id: Optional[str] = None

    def start(self) -> None:
        if not self._scheduler.running:
            LOGGER.info("Starting background scheduler")
            self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler.running:
            LOGGER.info("Stopping background scheduler")
            self._scheduler.shutdown(wait=False)

    @property
    def timezone(self) -> str:
        tzinfo = self._scheduler.timezone
        zone = getattr(tzinfo, "zone", None) or getattr(tzinfo, "key", None)
        return str(zone or tzinfo)

    def job_ids(self) -> List[str]:
        return list(self._jobs)

    def schedule_reminders(
        self,
        requests: Iterable[ReminderRequest],
        callback: Callable[[ReminderRequest], None],
        now: Optional[datetime] = None,
    ) -> None:
        """Replace scheduled reminder jobs with one job per future request."""
        self._clear_reminder_jobs()

        now = now or datetime.now(pytz.utc)
        for request in requests:
            if request.fire_time <= now:
                continue
            trigger = DateTrigger(run_date=request.fire_time)
            job = self._scheduler.add_job(callback, trigger=trigger, args=[request], id=request.id)
            LOGGER.debug("Scheduled %s job %s at %s", request.category, job.id, request.fire_time)
            self._jobs.append(job.id)

    def schedule_refresh(self, next_run: datetime, refresh_callback: Callable[[], None]) -> None:
        """Schedule a single refresh job, replacing any existing one."""
        if self._refresh_job_id:
            LOGGER.debug("Removing existing refresh job %s", self._refresh_job_id)
            try:
                self._scheduler.remove_job(self._refresh_job_id)
            except JobLookupError:
                LOGGER.debug("Refresh job %s already gone", self._refresh_job_id)
            self._refresh_job_id = None

        trigger = DateTrigger(run_date=next_run)
        job = self._scheduler.add_job(refresh_callback, trigger=trigger)
        LOGGER.debug("Scheduled refresh job %s at %s", job.id, next_run)
        self._refresh_job_id = job.id

    @property
    def refresh_job_id(self) -> Optional[str]:
        return self._refresh_job_id

    def _clear_reminder_jobs(self) -> None:
        for job_id in self._jobs:
            try:
                self._scheduler.remove_job(job_id)
            except JobLookupError:
                LOGGER.debug("Reminder job %s already fired or removed", job_id)
        self._jobs.clear()


def next_refresh_time(reference: datetime, timezone: str) -> datetime:
    """Return a moment just after the next local midnight, when daily schedules roll over."""
    tzinfo = resolve_timezone(timezone)
    next_day = reference.astimezone(tzinfo).date() + timedelta(days=1)
    return tzinfo.localize(datetime.combine(next_day, time()) + REFRESH_DELAY)
