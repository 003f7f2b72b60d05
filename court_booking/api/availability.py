"""Availability endpoints."""
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from court_booking.api.deps import raise_booking_error, raise_unexpected
from court_booking.core.database import get_db
from court_booking.core.exceptions import BookingError
from court_booking.schemas.availability import AvailabilityResponse
from court_booking.services.allocator import availability_allocator
from court_booking.services.court_config_store import court_config_store
from court_booking.services.operating_hours import to_facility_local

router = APIRouter(prefix="/facilities/{facility_id}/courts/{sport_id}", tags=["availability"])


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    facility_id: str,
    sport_id: str,
    start_time: datetime = Query(..., description="Window start, facility wall clock"),
    end_time: datetime = Query(..., description="Window end (exclusive)"),
    db: AsyncSession = Depends(get_db),
):
    """
    Show how many courts are still free for a window.

    The booking UI uses this for "2 courts left" style hints. The answer
    is a snapshot: a booking only holds once it has been created.

    Args:
        facility_id: Facility ID
        sport_id: Sport ID
        start_time: Window start
        end_time: Window end (exclusive)
        db: Database session

    Returns:
        Availability summary with status available, fully_booked or not_offered
    """
    try:
        facility = await court_config_store.get_facility(db, facility_id)
        return await availability_allocator.describe_availability(
            db,
            facility_id,
            sport_id,
            to_facility_local(start_time, facility.timezone),
            to_facility_local(end_time, facility.timezone),
        )
    except BookingError as e:
        raise_booking_error(e)
    except Exception as e:
        raise_unexpected("get availability", e)
