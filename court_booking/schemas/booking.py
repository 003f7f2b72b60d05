"""Booking schemas."""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    facility_id: str = Field(..., min_length=1)
    sport_id: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    total_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_window(self):
        if (self.start_time.tzinfo is None) != (self.end_time.tzinfo is None):
            raise ValueError("start_time and end_time must both carry a timezone or neither")
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class BookingConfirm(BaseModel):
    """Schema for confirming a booking after payment."""

    payment_intent_id: Optional[str] = None


class BookingCancel(BaseModel):
    """Schema for cancelling a booking."""

    reason: Optional[str] = None


class BookingInDB(BaseModel):
    """Schema for booking from database."""

    id: str
    user_id: str
    facility_id: str
    sport_id: str
    court_number: int
    start_time: datetime
    end_time: datetime
    total_amount: Decimal
    status: str
    notes: Optional[str] = None
    payment_intent_id: Optional[str] = None
    hold_expires_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
