"""Periodic execution of the scheduled import."""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.events import EVENT_JOB_MAX_INSTANCES, JobSubmissionEvent
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from jobfeed.logging import get_logger
from jobfeed.pipeline.models import ImportRunResult

logger = get_logger(__name__, component="scheduler")

JOB_ID = "feed-import"


class ImportScheduler:
    """
    Runs the scheduled import on a fixed interval in a background thread.

    At most one run executes at a time: APScheduler is configured with
    ``max_instances=1`` and ``coalesce=True``, and a run that is still in
    progress when the next one is due causes that one to be dropped.
    """

    def __init__(
        self,
        run_import: Callable[[], ImportRunResult],
        interval_minutes: int,
        misfire_grace_seconds: int = 300,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Args:
            run_import: Callable performing one run (FeedImporter.run_scheduled_import)
            interval_minutes: Minutes between runs
            misfire_grace_seconds: How late a run may start and still execute
            shutdown_event: Event set once the scheduler has shut down
        """
        self.run_import = run_import
        self.interval_minutes = interval_minutes
        self.shutdown_event = shutdown_event

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": misfire_grace_seconds,
            },
            timezone=timezone.utc,
        )
        self.scheduler.add_listener(self._on_overlap, EVENT_JOB_MAX_INSTANCES)

    def start(self, run_immediately: bool = True) -> None:
        """Register the import job and start the scheduler thread.

        Args:
            run_immediately: Run the first import right away instead of
                after one interval
        """
        trigger = IntervalTrigger(minutes=self.interval_minutes, timezone=timezone.utc)
        job_options = {}
        if run_immediately:
            job_options["next_run_time"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            func=self._run_job,
            trigger=trigger,
            id=JOB_ID,
            name="Scheduled feed import",
            replace_existing=True,
            **job_options,
        )
        self.scheduler.start()

        next_run = self.get_next_run_time()
        logger.info(
            f"Scheduler started with interval: {self.interval_minutes} minutes",
            extra={
                "event": "scheduler.started",
                "interval_minutes": self.interval_minutes,
                "next_run_time": next_run.isoformat() if next_run else None,
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """Stop the scheduler.

        Args:
            wait: Wait for a running import to finish before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
        if self.shutdown_event:
            self.shutdown_event.set()
        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> Optional[ImportRunResult]:
        """Run one import synchronously in the calling thread."""
        logger.info("Triggering immediate import run", extra={"event": "scheduler.trigger_now"})
        return self._run_job()

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def _run_job(self) -> Optional[ImportRunResult]:
        """Execute one run, logging run-level failures so the schedule keeps going."""
        try:
            return self.run_import()
        except Exception as e:
            logger.error(
                f"Scheduled import failed: {e}",
                extra={
                    "event": "scheduler.run.failed",
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
                exc_info=True,
            )
            return None

    def _on_overlap(self, event: JobSubmissionEvent) -> None:
        logger.warning(
            "Scheduled import skipped: previous run still in progress",
            extra={"event": "scheduler.run.skipped", "job_id": event.job_id},
        )
