"""Service for scheduling background jobs."""

from __future__ import annotations

import logging
from datetime import date

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from bawasa.services.billing import BillingService
from bawasa.services.readings import ReadingService

logger = logging.getLogger(__name__)


class SchedulerService:
    """Manages scheduled tasks for the application."""

    def __init__(
        self,
        reading_service: ReadingService,
        billing_service: BillingService,
        scheduler: AsyncIOScheduler,
    ):
        self._reading_service = reading_service
        self._billing_service = billing_service
        self._scheduler = scheduler

    def start(self):
        """Starts the scheduler and adds jobs."""
        logger.info("Starting scheduler...")
        self._scheduler.add_job(
            self._open_monthly_readings,
            trigger=CronTrigger(day=1, hour=0, minute=5),
            id="open_monthly_readings",
            replace_existing=True,
        )
        self._scheduler.add_job(
            self._mark_overdue_billings,
            trigger=CronTrigger(hour=1, minute=0),  # Run every day at 1:00 AM
            id="mark_overdue_billings",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Scheduler started.")

    def shutdown(self):
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped.")

    async def _open_monthly_readings(self):
        """Creates this month's placeholder readings for all consumers."""
        logger.info("Starting monthly reading period job.")
        try:
            await self._reading_service.open_reading_period(date.today())
        except Exception as e:
            logger.error(f"Failed to open reading period: {e}", exc_info=True)
        logger.info("Monthly reading period job finished.")

    async def _mark_overdue_billings(self):
        logger.info("Starting overdue billing job.")
        try:
            await self._billing_service.mark_overdue(date.today())
        except Exception as e:
            logger.error(f"Failed to mark overdue billings: {e}", exc_info=True)
        logger.info("Overdue billing job finished.")
