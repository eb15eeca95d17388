"""APScheduler jobs for soft delete retention cleanup and monitoring."""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.storage import async_session
from app.services.cleanup_service import CleanupConfig, SoftDeleteCleanupService
from app.services.monitoring_service import SoftDeleteMonitoringService

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "soft_delete_cleanup"
MONITORING_JOB_ID = "soft_delete_monitoring"


class CleanupScheduler:
    """Process-wide scheduler owning the daily cleanup and periodic monitoring jobs."""

    _instance: "CleanupScheduler | None" = None
    _scheduler: AsyncIOScheduler | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self._scheduler = None
        self.last_cleanup: dict | None = None
        self.last_monitoring: dict | None = None

    async def start(self):
        """Start the scheduler and register both jobs."""
        if self._scheduler is not None and self._scheduler.running:
            logger.info("Scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)
        self._scheduler.add_job(
            self.run_cleanup_job,
            trigger=CronTrigger(
                hour=settings.cleanup_schedule_hour,
                minute=settings.cleanup_schedule_minute,
                timezone=settings.scheduler_timezone,
            ),
            id=CLEANUP_JOB_ID,
            replace_existing=True,
            misfire_grace_time=3600,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.add_job(
            self.run_monitoring_job,
            trigger=IntervalTrigger(hours=settings.monitoring_interval_hours),
            id=MONITORING_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.start()
        logger.info(
            f"Scheduler started: cleanup daily at {settings.cleanup_schedule_hour:02d}:"
            f"{settings.cleanup_schedule_minute:02d} {settings.scheduler_timezone}, "
            f"monitoring every {settings.monitoring_interval_hours}h"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Scheduler stopped")

    async def run_cleanup_job(self) -> dict | None:
        """Scheduled cleanup using the configured retention settings."""
        logger.info("Starting scheduled soft delete cleanup")
        try:
            async with async_session() as session:
                service = SoftDeleteCleanupService(session, CleanupConfig.from_settings())
                result = await service.run_cleanup()
        except SQLAlchemyError as e:
            logger.error(f"Scheduled cleanup failed: {e}")
            return None

        self.last_cleanup = result
        if result["errors"]:
            logger.warning(
                f"Scheduled cleanup finished with {len(result['errors'])} errors: "
                f"{result['errors'][:5]}"
            )
        else:
            logger.info(
                f"Scheduled cleanup finished: {result['permanentlyDeleted']} deleted, "
                f"{result['archived']} archived in {result['duration']}ms"
            )
        return result

    async def run_monitoring_job(self) -> dict | None:
        """Scheduled monitoring check; critical alerts are logged at ERROR."""
        try:
            async with async_session() as session:
                result = await SoftDeleteMonitoringService(session).run_monitoring_check()
        except SQLAlchemyError as e:
            logger.error(f"Scheduled monitoring failed: {e}")
            return None

        self.last_monitoring = {
            "timestamp": result["timestamp"],
            "alertCount": len(result["alerts"]),
        }
        critical = [a for a in result["alerts"] if a["severity"] == "critical"]
        high = [a for a in result["alerts"] if a["severity"] == "high"]
        if critical:
            logger.error(
                f"Critical soft delete alerts: {[a['title'] for a in critical]}"
            )
        if high:
            logger.warning(
                f"High-severity soft delete alerts: {[a['title'] for a in high]}"
            )
        logger.info(
            f"Scheduled monitoring completed, {len(result['alerts'])} alerts generated"
        )
        return result

    def get_status(self) -> dict:
        """Get scheduler status."""
        if self._scheduler is None:
            return {"schedulerRunning": False, "jobsCount": 0, "nextScheduledRun": None}

        jobs = self._scheduler.get_jobs()
        next_run: datetime | None = None
        next_runs = [j.next_run_time for j in jobs if j.next_run_time]
        if next_runs:
            next_run = min(next_runs).astimezone(ZoneInfo(settings.scheduler_timezone))

        return {
            "schedulerRunning": self._scheduler.running,
            "jobsCount": len(jobs),
            "nextScheduledRun": next_run.isoformat() if next_run else None,
        }


cleanup_scheduler = CleanupScheduler()
