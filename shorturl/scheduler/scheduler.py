"""Scheduler implementation for the short URL service.

This module provides a scheduler service that runs the daily sweep
of expired URLs using APScheduler.
"""

import logging
from typing import Any, AsyncContextManager, Callable, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.core.config import Settings
from shorturl.db.session import SessionManager
from shorturl.models.url import utcnow
from shorturl.repositories.url_repository import URLRepository
from shorturl.services.cleanup import CleanupService

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "cleanup_expired_urls"

SessionContext = Callable[[], AsyncContextManager[AsyncSession]]


async def cleanup_expired_urls_job(session_context: Optional[SessionContext] = None) -> Dict[str, Any]:
    """
    Job to cleanup expired URLs.

    Opens its own transactional session. Failures are logged and reported in
    the returned dict; they never propagate, so the next scheduled run is
    unaffected.
    """
    session_context = session_context or SessionManager.transaction_context
    logger.info("Starting scheduled cleanup of expired URLs")
    try:
        async with session_context() as session:
            cleanup_service = CleanupService(URLRepository())
            result = await cleanup_service.cleanup_expired_urls(db=session)

        logger.info(f"Scheduled cleanup completed: Deleted={result['deleted']}")
        return {"status": "ok", **result}
    except Exception as e:
        logger.error(f"Failed to delete expired URLs: {e}", exc_info=True)
        return {
            "status": "error",
            "error": str(e),
            "timestamp": utcnow().isoformat()
        }


class SchedulerService:
    """
    Scheduler service for managing background tasks.

    This service provides a wrapper around APScheduler so the sweep can be
    started, triggered and stopped deterministically.
    """

    def __init__(self, settings: Settings, session_context: Optional[SessionContext] = None):
        """Initialize the scheduler service."""
        self.settings = settings
        self.session_context = session_context
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_running = False
        self.jobs: List[Dict[str, Any]] = []

    def initialize(self) -> None:
        """
        Initialize the scheduler.

        This sets up the APScheduler with an in-memory job store,
        but does not start it yet.
        """
        if self.scheduler:
            logger.warning("Scheduler already initialized")
            return

        options: Dict[str, Any] = {
            "job_defaults": {
                "coalesce": True,
                "max_instances": 1,  # the sweep never overlaps with itself
                "misfire_grace_time": self.settings.SCHEDULER_MISFIRE_GRACE_TIME,
            }
        }
        if self.settings.SCHEDULER_TIMEZONE:
            options["timezone"] = self.settings.SCHEDULER_TIMEZONE

        self.scheduler = AsyncIOScheduler(**options)
        logger.info("Scheduler initialized")

    def start(self) -> None:
        """
        Start the scheduler and register the daily cleanup job.

        Must be called from within a running event loop.
        """
        if not self.scheduler:
            self.initialize()

        if self.is_running:
            logger.warning("Scheduler already running")
            return

        trigger = CronTrigger(
            hour=self.settings.CLEANUP_HOUR,
            minute=self.settings.CLEANUP_MINUTE,
            timezone=self.scheduler.timezone,
        )
        try:
            self.scheduler.add_job(
                cleanup_expired_urls_job,
                trigger=trigger,
                kwargs={"session_context": self.session_context},
                id=CLEANUP_JOB_ID,
                name="Cleanup Expired URLs",
                replace_existing=True
            )

            self.jobs = [{
                "id": CLEANUP_JOB_ID,
                "name": "Cleanup Expired URLs",
                "schedule": f"daily at {self.settings.CLEANUP_HOUR:02d}:{self.settings.CLEANUP_MINUTE:02d} ({self.scheduler.timezone})",
                "function": "cleanup_expired_urls_job"
            }]

            self.scheduler.start()
            self.is_running = True
            logger.info(f"Scheduler started with {len(self.jobs)} jobs")
        except Exception as e:
            logger.error(f"Error starting scheduler: {e}", exc_info=True)
            self.is_running = False
            raise

    async def run_now(self) -> Dict[str, Any]:
        """Run the cleanup job immediately, outside the schedule."""
        return await cleanup_expired_urls_job(self.session_context)

    def shutdown(self) -> None:
        """
        Shutdown the scheduler and drop the registered jobs.
        """
        if not self.scheduler or not self.is_running:
            logger.warning("Scheduler not running, nothing to shut down")
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        self.scheduler = None
        self.jobs = []
        logger.info("Scheduler shut down successfully")

    def get_status(self) -> Dict[str, Any]:
        """
        Get the current status of the scheduler.

        Returns:
            Dict with information about the scheduler status and jobs
        """
        job_details = []
        if self.scheduler and self.is_running:
            for job in self.scheduler.get_jobs():
                job_details.append({
                    "job_id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None
                })

        return {
            "running": self.is_running,
            "jobs": self.jobs,
            "scheduler_jobs_status": job_details
        }
