"""API schemas."""
from court_booking.schemas.facility import (
    SportCreate,
    SportInDB,
    FacilityCreate,
    FacilityInDB,
    FacilityStatusUpdate,
)
from court_booking.schemas.court_config import (
    CourtConfigUpsert,
    CourtConfigInDB,
)
from court_booking.schemas.booking import (
    BookingCreate,
    BookingConfirm,
    BookingCancel,
    BookingInDB,
)
from court_booking.schemas.availability import AvailabilityResponse

__all__ = [
    "SportCreate",
    "SportInDB",
    "FacilityCreate",
    "FacilityInDB",
    "FacilityStatusUpdate",
    "CourtConfigUpsert",
    "CourtConfigInDB",
    "BookingCreate",
    "BookingConfirm",
    "BookingCancel",
    "BookingInDB",
    "AvailabilityResponse",
]
