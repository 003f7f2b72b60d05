"""Database models."""
from court_booking.models.sport import Sport
from court_booking.models.facility import Facility
from court_booking.models.court_config import CourtConfiguration
from court_booking.models.booking import Booking, BookingStatus, ACTIVE_STATUSES

__all__ = [
    "Sport",
    "Facility",
    "CourtConfiguration",
    "Booking",
    "BookingStatus",
    "ACTIVE_STATUSES",
]
