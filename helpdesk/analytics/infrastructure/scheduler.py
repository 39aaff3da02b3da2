"""
Analytics Scheduler
===================

APScheduler wrapper running the periodic analytics summary.
"""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from helpdesk.analytics.application.services import AnalyticsService
from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class AnalyticsScheduler:
    """
    Wrapper for APScheduler for the background analytics report.

    Manages the lifecycle of the scheduler and its single job.
    """

    def __init__(self, service: AnalyticsService, interval_seconds: int = 300):
        self.interval_seconds = interval_seconds
        self._service = service
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    async def report(self) -> None:
        """Compute the dashboard and log its headline numbers."""
        try:
            dashboard = await self._service.dashboard()
        except Exception as e:
            logger.error(
                "Analytics report failed",
                extra={"error_type": type(e).__name__, "error": str(e)}
            )
            return

        logger.info(
            "Analytics summary",
            extra={
                "total_tickets": dashboard.total_tickets,
                "open_tickets": dashboard.open_tickets,
                "resolution_rate": dashboard.resolution_rate,
                "sla_compliance_rate": dashboard.sla_compliance_rate,
                "overdue_tickets": dashboard.overdue_tickets,
            }
        )

    async def start(self) -> None:
        """Start the scheduler."""
        if self._running:
            logger.warning("Analytics scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()

        self._scheduler.add_job(
            self.report,
            "interval",
            seconds=self.interval_seconds,
            id="analytics_report",
            name="Analytics Report Job",
            misfire_grace_time=60,
            max_instances=1,
            replace_existing=True
        )

        self._scheduler.start()
        self._running = True

        logger.info(
            "Analytics scheduler started",
            extra={"interval_seconds": self.interval_seconds}
        )

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("Analytics scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running
