"""Availability schemas."""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal


class AvailabilityResponse(BaseModel):
    """Schema for the availability of one sport at one facility."""

    facility_id: str
    sport_id: str
    start_time: datetime
    end_time: datetime
    status: str  # available, fully_booked, not_offered
    court_count: int = 0
    available_courts: int = 0
    next_court_number: Optional[int] = None
    price_per_hour: Optional[Decimal] = None
