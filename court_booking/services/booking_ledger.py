"""Booking ledger: query and write paths for reservations."""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, update, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from court_booking.core.config import settings
from court_booking.core.exceptions import BookingNotFound
from court_booking.models.booking import Booking, BookingStatus, ACTIVE_STATUSES

logger = logging.getLogger(__name__)

HOLD_EXPIRED_REASON = "hold_expired"


class BookingLedger:
    """Reads overlapping bookings and records new ones."""

    def __init__(self, count_pending_holds: Optional[bool] = None):
        if count_pending_holds is None:
            count_pending_holds = settings.COUNT_PENDING_HOLDS
        self.count_pending_holds = count_pending_holds

    @property
    def blocking_statuses(self) -> Tuple[str, ...]:
        """Statuses that occupy a court for other users."""
        if self.count_pending_holds:
            return (BookingStatus.CONFIRMED.value, BookingStatus.PENDING.value)
        return (BookingStatus.CONFIRMED.value,)

    async def get_overlapping_bookings(
        self,
        db: AsyncSession,
        facility_id: str,
        sport_id: str,
        start_time: datetime,
        end_time: datetime,
        statuses: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> List[Booking]:
        """
        Get bookings whose window overlaps [start_time, end_time).

        Pending bookings whose hold has expired never count, whether or not
        the sweep has cancelled them yet.

        Args:
            db: Database session
            facility_id: Facility ID
            sport_id: Sport ID
            start_time: Requested window start
            end_time: Requested window end (exclusive)
            statuses: Statuses to consider (defaults to blocking_statuses)
            now: Current UTC time, for hold expiry

        Returns:
            Overlapping bookings ordered by court number
        """
        statuses = tuple(statuses) if statuses is not None else self.blocking_statuses
        now = now or datetime.utcnow()

        result = await db.execute(
            select(Booking)
            .where(
                and_(
                    Booking.facility_id == facility_id,
                    Booking.sport_id == sport_id,
                    Booking.status.in_(statuses),
                    Booking.start_time < end_time,
                    Booking.end_time > start_time,
                    or_(
                        Booking.status != BookingStatus.PENDING.value,
                        Booking.hold_expires_at.is_(None),
                        Booking.hold_expires_at > now,
                    ),
                )
            )
            .order_by(Booking.court_number, Booking.start_time)
        )
        return list(result.scalars().all())

    async def insert_booking(self, db: AsyncSession, **fields) -> Booking:
        """Add a booking to the session and flush it so constraints fire."""
        booking = Booking(**fields)
        db.add(booking)
        await db.flush()
        return booking

    async def get_booking(self, db: AsyncSession, booking_id: str) -> Booking:
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()

        if not booking:
            raise BookingNotFound(f"Booking {booking_id} not found")

        return booking

    async def list_user_bookings(self, db: AsyncSession, user_id: str) -> List[Booking]:
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.start_time.desc())
        )
        return list(result.scalars().all())

    async def list_facility_bookings(
        self,
        db: AsyncSession,
        facility_id: str,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Booking]:
        """
        List every booking at a facility, for its owner.

        Args:
            db: Database session
            facility_id: Facility ID
            statuses: Only bookings in these statuses (defaults to all)

        Returns:
            Bookings ordered by start time, then court number
        """
        query = select(Booking).where(Booking.facility_id == facility_id)
        if statuses is not None:
            query = query.where(Booking.status.in_(tuple(statuses)))

        result = await db.execute(query.order_by(Booking.start_time, Booking.court_number))
        return list(result.scalars().all())

    async def count_upcoming_bookings(
        self,
        db: AsyncSession,
        facility_id: str,
        sport_id: str,
        after: datetime,
        now: Optional[datetime] = None,
    ) -> int:
        """Active bookings for a facility and sport that end after a wall-clock instant."""
        now = now or datetime.utcnow()

        result = await db.execute(
            select(func.count(Booking.id)).where(
                and_(
                    Booking.facility_id == facility_id,
                    Booking.sport_id == sport_id,
                    Booking.status.in_(ACTIVE_STATUSES),
                    Booking.end_time > after,
                    or_(
                        Booking.status != BookingStatus.PENDING.value,
                        Booking.hold_expires_at.is_(None),
                        Booking.hold_expires_at > now,
                    ),
                )
            )
        )
        return result.scalar_one()

    async def release_expired_holds(
        self,
        db: AsyncSession,
        now: Optional[datetime] = None,
        facility_id: Optional[str] = None,
        sport_id: Optional[str] = None,
    ) -> int:
        """
        Cancel pending bookings whose payment hold has run out.

        The caller owns the transaction and commits.

        Args:
            db: Database session
            now: Current UTC time
            facility_id: Restrict to one facility
            sport_id: Restrict to one sport

        Returns:
            Number of bookings released
        """
        now = now or datetime.utcnow()
        conditions = [
            Booking.status == BookingStatus.PENDING.value,
            Booking.hold_expires_at.is_not(None),
            Booking.hold_expires_at <= now,
        ]
        if facility_id is not None:
            conditions.append(Booking.facility_id == facility_id)
        if sport_id is not None:
            conditions.append(Booking.sport_id == sport_id)

        result = await db.execute(
            update(Booking)
            .where(and_(*conditions))
            .values(
                status=BookingStatus.CANCELLED.value,
                cancellation_reason=HOLD_EXPIRED_REASON,
                cancelled_at=now,
                hold_expires_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        released = result.rowcount or 0

        if released:
            logger.info(f"Released {released} expired pending hold(s)")

        return released


# Singleton instance
booking_ledger = BookingLedger()
