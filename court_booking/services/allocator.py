"""Court availability allocator.

Given a facility, a sport and a requested half-open window, works out how
many courts are still free and which court a new booking should get.
Courts are handed out lowest number first, so the same ledger always yields
the same court.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from court_booking.core.exceptions import InvalidBookingRequest
from court_booking.models.court_config import CourtConfiguration
from court_booking.schemas.availability import AvailabilityResponse
from court_booking.services.booking_ledger import BookingLedger, booking_ledger
from court_booking.services.court_config_store import CourtConfigStore, court_config_store

logger = logging.getLogger(__name__)


def windows_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """True if [a_start, a_end) and [b_start, b_end) share an instant."""
    return a_start < b_end and b_start < a_end


def lowest_free_court(court_count: int, occupied: Iterable[int]) -> Optional[int]:
    """
    Pick the smallest court number in 1..court_count that is not occupied.

    Args:
        court_count: Number of courts
        occupied: Court numbers already taken for the window

    Returns:
        The court number, or None if every court is taken
    """
    taken = set(occupied)
    for court_number in range(1, court_count + 1):
        if court_number not in taken:
            return court_number
    return None


def validate_window(start_time: datetime, end_time: datetime):
    if start_time is None or end_time is None:
        raise InvalidBookingRequest("start_time and end_time are required")
    if (start_time.tzinfo is None) != (end_time.tzinfo is None):
        raise InvalidBookingRequest("start_time and end_time must both carry a timezone or neither")
    if start_time >= end_time:
        raise InvalidBookingRequest("start_time must be before end_time")


class AvailabilityAllocator:
    """Decides court availability from the court config and the booking ledger."""

    def __init__(
        self,
        court_configs: Optional[CourtConfigStore] = None,
        ledger: Optional[BookingLedger] = None,
    ):
        self.court_configs = court_configs or court_config_store
        self.ledger = ledger or booking_ledger

    async def check_availability(
        self,
        db: AsyncSession,
        facility_id: str,
        sport_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> Optional[int]:
        """
        Count the courts still free for a window.

        Args:
            db: Database session
            facility_id: Facility ID
            sport_id: Sport ID
            start_time: Window start
            end_time: Window end (exclusive)

        Returns:
            Number of free courts, or None when the sport is not offered
            here or every court is taken
        """
        validate_window(start_time, end_time)

        config = await self.court_configs.get_court_config(db, facility_id, sport_id)
        if config is None:
            return None

        occupied = await self._occupied_courts(db, config, start_time, end_time)
        available = config.court_count - len(occupied)

        return available if available > 0 else None

    async def get_available_court(
        self,
        db: AsyncSession,
        facility_id: str,
        sport_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> Optional[int]:
        """
        Pick the court a new booking for this window should use.

        Args:
            db: Database session
            facility_id: Facility ID
            sport_id: Sport ID
            start_time: Window start
            end_time: Window end (exclusive)

        Returns:
            Lowest free court number, or None when the sport is not offered
            here or every court is taken
        """
        validate_window(start_time, end_time)

        config = await self.court_configs.get_court_config(db, facility_id, sport_id)
        if config is None:
            logger.info(f"Sport {sport_id} is not offered at facility {facility_id}")
            return None

        occupied = await self._occupied_courts(db, config, start_time, end_time)
        court_number = lowest_free_court(config.court_count, occupied)

        logger.info(
            f"Facility {facility_id} sport {sport_id} {start_time}-{end_time}: "
            f"occupied={sorted(occupied)} of {config.court_count}, assigned={court_number}"
        )

        return court_number

    async def describe_availability(
        self,
        db: AsyncSession,
        facility_id: str,
        sport_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> AvailabilityResponse:
        """Availability summary for display, e.g. "2 courts left"."""
        validate_window(start_time, end_time)

        response = AvailabilityResponse(
            facility_id=facility_id,
            sport_id=sport_id,
            start_time=start_time,
            end_time=end_time,
            status="not_offered",
        )

        config = await self.court_configs.get_court_config(db, facility_id, sport_id)
        if config is None:
            return response

        occupied = await self._occupied_courts(db, config, start_time, end_time)
        available = config.court_count - len(occupied)

        response.court_count = config.court_count
        response.price_per_hour = config.price_per_hour
        response.available_courts = max(available, 0)
        response.next_court_number = lowest_free_court(config.court_count, occupied)
        response.status = "available" if available > 0 else "fully_booked"

        return response

    async def _occupied_courts(
        self,
        db: AsyncSession,
        config: CourtConfiguration,
        start_time: datetime,
        end_time: datetime,
    ) -> Set[int]:
        """Court numbers within 1..court_count taken by an overlapping booking."""
        bookings = await self.ledger.get_overlapping_bookings(
            db, config.facility_id, config.sport_id, start_time, end_time
        )
        return {
            b.court_number
            for b in bookings
            if 1 <= b.court_number <= config.court_count
        }


# Singleton instance
availability_allocator = AvailabilityAllocator()
