"""Backoff scheduler for delayed retries.

Retries wait out their backoff on an APScheduler background scheduler
instead of on a consumer thread. Each pending retry is a one-off date job
keyed by notification id.

Jobs live in the in-memory job store. A stop drops them; the due time is
persisted on each record, so RetryHandler.recover_pending() reschedules
them on the next start.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

import structlog
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from infrastructure.notifications.models import utc_now

logger = structlog.get_logger()

Task = Callable[[], None]


class Scheduler(Protocol):
    """Delayed execution interface used by the retry handler."""

    def schedule(self, key: str, delay_seconds: float, task: Task) -> None:
        ...

    def schedule_at(self, key: str, due: datetime, task: Task) -> None:
        ...

    def cancel(self, key: str) -> bool:
        ...


def safe_run(key: str, task: Task) -> None:
    """Run a task, logging any exception it raises."""
    try:
        task()
    except Exception as e:
        logger.error(
            "scheduled_task_failed",
            task_key=key,
            error=str(e),
            exc_info=True,
        )


class BackoffScheduler:
    """One-off date jobs on an APScheduler BackgroundScheduler.

    One pending job per key: scheduling a key again replaces the earlier
    job. Jobs that are already overdue when the scheduler wakes up still
    run.

    Args:
        max_workers: Threads executing due jobs

    Example:
        scheduler = BackoffScheduler(max_workers=4)
        scheduler.start()
        scheduler.schedule("abc", 5.0, lambda: handler.resume("abc"))
        ...
        scheduler.stop()
    """

    def __init__(self, max_workers: int = 4):
        self._max_workers = max_workers
        self._scheduler = BackgroundScheduler(
            jobstores={"default": MemoryJobStore()},
            executors={"default": ThreadPoolExecutor(max_workers)},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": None,
            },
            timezone=timezone.utc,
        )

    @property
    def is_running(self) -> bool:
        return self._scheduler.running

    def pending_count(self) -> int:
        return len(self._scheduler.get_jobs())

    def is_scheduled(self, key: str) -> bool:
        return self._scheduler.get_job(key) is not None

    def start(self) -> None:
        if self._scheduler.running:
            return
        self._scheduler.start()
        logger.info("backoff_scheduler_started", max_workers=self._max_workers)

    def schedule(self, key: str, delay_seconds: float, task: Task) -> None:
        """Run task after delay_seconds, replacing any pending job for key."""
        due = utc_now() + timedelta(seconds=max(0.0, delay_seconds))
        self.schedule_at(key, due, task)

    def schedule_at(self, key: str, due: datetime, task: Task) -> None:
        """Run task at a wall-clock time (immediately if already past)."""
        replaced = self.is_scheduled(key)
        self._scheduler.add_job(
            safe_run,
            "date",
            run_date=due,
            id=key,
            args=[key, task],
            replace_existing=True,
        )
        logger.debug(
            "backoff_task_scheduled",
            task_key=key,
            run_date=due.isoformat(),
            replaced=replaced,
        )

    def cancel(self, key: str) -> bool:
        try:
            self._scheduler.remove_job(key)
        except JobLookupError:
            return False
        return True

    def stop(self, wait: bool = True) -> int:
        """Stop the scheduler, dropping jobs that are not yet due.

        Args:
            wait: Wait for running jobs to finish

        Returns:
            Number of dropped pending jobs
        """
        dropped = self.pending_count()
        self._scheduler.remove_all_jobs()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)

        logger.info("backoff_scheduler_stopped", dropped_tasks=dropped)
        return dropped
