"""Booking creation and lifecycle."""
import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from court_booking.core.config import settings
from court_booking.core.exceptions import (
    BookingError,
    BookingHoldExpired,
    BookingPermissionDenied,
    ConcurrentAllocationConflict,
    InvalidBookingRequest,
    FacilityUnavailable,
    InvalidStatusTransition,
    NoCourtsAvailable,
    NotOffered,
)
from court_booking.models.booking import Booking, BookingStatus
from court_booking.models.court_config import CourtConfiguration
from court_booking.services.allocation_lock import AllocationLockRegistry, allocation_locks
from court_booking.services.allocator import AvailabilityAllocator, availability_allocator, validate_window
from court_booking.services.booking_ledger import BookingLedger, booking_ledger, HOLD_EXPIRED_REASON
from court_booking.services.court_config_store import CourtConfigStore, court_config_store, CENTS
from court_booking.services.operating_hours import (
    check_operating_hours,
    facility_now,
    to_facility_local,
)

logger = logging.getLogger(__name__)


def price_for_window(price_per_hour: Decimal, start_time: datetime, end_time: datetime) -> Decimal:
    """Hourly price times the window length, rounded to cents."""
    hours = Decimal(int((end_time - start_time).total_seconds())) / Decimal(3600)
    return (Decimal(price_per_hour) * hours).quantize(CENTS, rounding=ROUND_HALF_UP)


class BookingService:
    """Creates bookings on a free court and moves them through their lifecycle."""

    def __init__(
        self,
        allocator: Optional[AvailabilityAllocator] = None,
        ledger: Optional[BookingLedger] = None,
        court_configs: Optional[CourtConfigStore] = None,
        locks: Optional[AllocationLockRegistry] = None,
        retries: Optional[int] = None,
        hold_minutes: Optional[int] = None,
    ):
        self.allocator = allocator or availability_allocator
        self.ledger = ledger or booking_ledger
        self.court_configs = court_configs or court_config_store
        self.locks = locks or allocation_locks
        self.retries = settings.ALLOCATION_RETRIES if retries is None else retries
        self.hold_minutes = settings.PENDING_HOLD_MINUTES if hold_minutes is None else hold_minutes

    async def create_booking(
        self,
        db: AsyncSession,
        user_id: str,
        facility_id: str,
        sport_id: str,
        start_time: datetime,
        end_time: datetime,
        amount: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Reserve the lowest-numbered free court for a window.

        The booking is created pending, holding the court until it is
        confirmed or the hold expires.

        Args:
            db: Database session
            user_id: Booking user
            facility_id: Facility ID
            sport_id: Sport ID
            start_time: Window start
            end_time: Window end (exclusive)
            amount: Total amount; defaults to the hourly price times the duration
            notes: Free-form notes

        Returns:
            The committed booking with its court number

        Raises:
            InvalidBookingRequest: Malformed input, a past window or outside hours
            FacilityNotFound: Unknown facility
            FacilityUnavailable: The facility is deactivated or not yet approved
            NotOffered: The sport has no courts at this facility
            NoCourtsAvailable: Every court is taken for the window
        """
        for name, value in (("user_id", user_id), ("facility_id", facility_id), ("sport_id", sport_id)):
            if not value or not str(value).strip():
                raise InvalidBookingRequest(f"{name} is required")
        validate_window(start_time, end_time)
        if amount is not None and Decimal(amount) < 0:
            raise InvalidBookingRequest("amount must not be negative")

        facility = await self.court_configs.get_facility(db, facility_id)
        if not facility.is_active or not facility.is_approved:
            raise FacilityUnavailable(f"Facility {facility_id} is not open for bookings")

        start_time = to_facility_local(start_time, facility.timezone)
        end_time = to_facility_local(end_time, facility.timezone)

        if start_time < facility_now(facility.timezone):
            raise InvalidBookingRequest("Cannot book a time slot in the past")
        check_operating_hours(facility.operating_hours, start_time, end_time)

        attempts = 1 + max(self.retries, 0)
        for attempt in range(1, attempts + 1):
            try:
                return await self._allocate(
                    db, user_id, facility_id, sport_id, start_time, end_time, amount, notes
                )
            except ConcurrentAllocationConflict as e:
                logger.warning(
                    f"Allocation conflict for facility {facility_id} sport {sport_id} "
                    f"(attempt {attempt}/{attempts}): {e}"
                )

        raise NoCourtsAvailable("No courts available for the selected time slot")

    async def _allocate(
        self,
        db: AsyncSession,
        user_id: str,
        facility_id: str,
        sport_id: str,
        start_time: datetime,
        end_time: datetime,
        amount: Optional[Decimal],
        notes: Optional[str],
    ) -> Booking:
        """Read the ledger, pick a court and insert the booking under the key's lock."""
        async with self.locks.hold(db, facility_id, sport_id):
            try:
                now = datetime.utcnow()
                await self.ledger.release_expired_holds(
                    db, now=now, facility_id=facility_id, sport_id=sport_id
                )

                config = await self.court_configs.get_court_config(db, facility_id, sport_id)
                if config is None:
                    raise NotOffered(f"Sport {sport_id} is not offered at facility {facility_id}")

                court_number = await self.allocator.get_available_court(
                    db, facility_id, sport_id, start_time, end_time
                )
                if court_number is None:
                    raise NoCourtsAvailable("No courts available for the selected time slot")

                booking = await self.ledger.insert_booking(
                    db,
                    user_id=user_id,
                    facility_id=facility_id,
                    sport_id=sport_id,
                    court_number=court_number,
                    start_time=start_time,
                    end_time=end_time,
                    total_amount=self._total_amount(config, start_time, end_time, amount),
                    status=BookingStatus.PENDING.value,
                    notes=notes,
                    hold_expires_at=now + timedelta(minutes=self.hold_minutes),
                )
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                raise ConcurrentAllocationConflict(
                    f"Court claimed by a concurrent booking: {e.orig}"
                ) from e
            except BookingError:
                await db.rollback()
                raise

        await db.refresh(booking)
        logger.info(
            f"Booked court {booking.court_number} at facility {facility_id} sport {sport_id} "
            f"{start_time}-{end_time} for user {user_id} (booking {booking.id})"
        )

        return booking

    def _total_amount(
        self,
        config: CourtConfiguration,
        start_time: datetime,
        end_time: datetime,
        amount: Optional[Decimal],
    ) -> Decimal:
        if amount is not None:
            return Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
        return price_for_window(config.price_per_hour, start_time, end_time)

    async def confirm_booking(
        self,
        db: AsyncSession,
        booking_id: str,
        payment_intent_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Mark a pending booking as paid.

        Raises:
            BookingNotFound: Unknown booking
            InvalidStatusTransition: The booking is not pending
            BookingHoldExpired: The hold ran out; the booking is cancelled
        """
        now = now or datetime.utcnow()
        booking = await self.ledger.get_booking(db, booking_id)

        if booking.status != BookingStatus.PENDING.value:
            raise InvalidStatusTransition(
                f"Booking {booking_id} is {booking.status}, only pending bookings can be confirmed"
            )

        if booking.hold_expires_at is not None and booking.hold_expires_at <= now:
            # The court may already be sold to someone else
            booking.status = BookingStatus.CANCELLED.value
            booking.cancellation_reason = HOLD_EXPIRED_REASON
            booking.cancelled_at = now
            booking.hold_expires_at = None
            await db.commit()
            logger.warning(f"Booking {booking_id} hold expired before confirmation")
            raise BookingHoldExpired(f"The hold on booking {booking_id} has expired")

        booking.status = BookingStatus.CONFIRMED.value
        booking.hold_expires_at = None
        if payment_intent_id:
            booking.payment_intent_id = payment_intent_id

        await db.commit()
        await db.refresh(booking)
        logger.info(f"Confirmed booking {booking_id} on court {booking.court_number}")

        return booking

    async def cancel_booking(
        self,
        db: AsyncSession,
        booking_id: str,
        user_id: str,
        is_admin: bool = False,
        reason: Optional[str] = None,
    ) -> Booking:
        """
        Cancel a booking, freeing its court for the window.

        Cancelling an already-cancelled booking is a no-op.

        Raises:
            BookingNotFound: Unknown booking
            BookingPermissionDenied: Caller is neither the owner nor an admin
        """
        booking = await self.ledger.get_booking(db, booking_id)

        if not is_admin and booking.user_id != user_id:
            raise BookingPermissionDenied("Not authorized to cancel this booking")

        if booking.status == BookingStatus.CANCELLED.value:
            return booking

        booking.status = BookingStatus.CANCELLED.value
        booking.cancellation_reason = reason
        booking.cancelled_at = datetime.utcnow()
        booking.hold_expires_at = None

        await db.commit()
        await db.refresh(booking)
        logger.info(f"Cancelled booking {booking_id} (court {booking.court_number})")

        return booking

    async def get_booking(self, db: AsyncSession, booking_id: str) -> Booking:
        return await self.ledger.get_booking(db, booking_id)

    async def list_user_bookings(self, db: AsyncSession, user_id: str) -> List[Booking]:
        return await self.ledger.list_user_bookings(db, user_id)

    async def list_facility_bookings(
        self, db: AsyncSession, facility_id: str, statuses: Optional[List[str]] = None
    ) -> List[Booking]:
        await self.court_configs.get_facility(db, facility_id)
        return await self.ledger.list_facility_bookings(db, facility_id, statuses)


# Singleton instance
booking_service = BookingService()
