"""Background scheduler that releases expired pending holds."""
import logging
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from court_booking.core.config import settings
from court_booking.core.database import AsyncSessionLocal
from court_booking.services.booking_ledger import BookingLedger, booking_ledger

logger = logging.getLogger(__name__)


class HoldExpiryScheduler:
    """Periodically cancels pending bookings whose payment hold ran out."""

    def __init__(
        self,
        ledger: Optional[BookingLedger] = None,
        session_factory=None,
        interval_minutes: Optional[int] = None,
    ):
        """Initialize the scheduler."""
        self.scheduler = AsyncIOScheduler()
        self.running = False
        self.ledger = ledger or booking_ledger
        self.session_factory = session_factory or AsyncSessionLocal
        self.interval_minutes = interval_minutes or settings.HOLD_SWEEP_INTERVAL_MINUTES

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        logger.info("Starting hold expiry scheduler")

        self.scheduler.add_job(
            self.release_expired_holds,
            IntervalTrigger(minutes=self.interval_minutes),
            id="hold_expiry_job",
            name="Release expired pending holds",
            replace_existing=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info("Hold expiry scheduler started")

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping hold expiry scheduler")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Hold expiry scheduler stopped")

    async def release_expired_holds(self, now: Optional[datetime] = None) -> int:
        """
        Cancel every pending booking past its hold deadline.

        Failures are logged and rolled back so the next run can retry.

        Returns:
            Number of bookings released
        """
        logger.debug("Running hold expiry sweep")

        async with self.session_factory() as db:
            try:
                released = await self.ledger.release_expired_holds(db, now=now)
                await db.commit()
                return released
            except Exception as e:
                logger.error(f"Error releasing expired holds: {e}", exc_info=True)
                await db.rollback()
                return 0


# Singleton instance
hold_expiry_scheduler = HoldExpiryScheduler()
