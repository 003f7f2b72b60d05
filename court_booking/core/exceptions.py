"""Domain errors raised by the booking services.

Every error carries a stable ``code`` so the HTTP layer and the booking UI
can tell "fully booked" apart from "not offered here" and "please retry".
"""


class BookingError(Exception):
    """Base class for booking domain errors."""

    code = "booking_error"
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class InvalidBookingRequest(BookingError):
    """The booking request is malformed."""

    code = "invalid_request"
    status_code = 400


class OutsideOperatingHours(InvalidBookingRequest):
    """The requested window is outside the facility's operating hours."""

    code = "outside_operating_hours"


class NotOffered(BookingError):
    """This sport is not offered at this facility."""

    code = "not_offered"
    status_code = 404


class NoCourtsAvailable(BookingError):
    """No courts available for the selected time slot."""

    code = "no_courts_available"
    status_code = 409


FullyBooked = NoCourtsAvailable


class ConcurrentAllocationConflict(BookingError):
    """The court was claimed by another booking, please retry."""

    code = "allocation_conflict"
    status_code = 409


class FacilityNotFound(BookingError):
    """Facility not found."""

    code = "facility_not_found"
    status_code = 404


class SportNotFound(BookingError):
    """Sport not found."""

    code = "sport_not_found"
    status_code = 404


class BookingNotFound(BookingError):
    """Booking not found."""

    code = "booking_not_found"
    status_code = 404


class BookingPermissionDenied(BookingError):
    """Not authorized to change this booking."""

    code = "forbidden"
    status_code = 403


class InvalidStatusTransition(BookingError):
    """The booking cannot move to the requested status."""

    code = "invalid_status_transition"
    status_code = 409


class BookingHoldExpired(BookingError):
    """The payment hold on this booking has expired."""

    code = "hold_expired"
    status_code = 409


class FacilityUnavailable(BookingError):
    """This facility is not open for bookings."""

    code = "facility_unavailable"
    status_code = 409


class CourtConfigInUse(BookingError):
    """The sport still has active bookings at this facility."""

    code = "court_config_in_use"
    status_code = 409
