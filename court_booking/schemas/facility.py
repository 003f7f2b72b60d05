"""Facility and sport schemas."""
import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime


class SportCreate(BaseModel):
    """Schema for creating a sport."""

    name: str = Field(..., min_length=1)
    sport_type: str = Field(..., min_length=1)
    emoji: Optional[str] = None


class SportInDB(SportCreate):
    """Schema for sport from database."""

    id: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FacilityBase(BaseModel):
    """Base facility schema."""

    name: str = Field(..., min_length=1)
    address: Optional[str] = None
    city: Optional[str] = None
    timezone: str = "UTC"
    operating_hours: Optional[Dict[str, Any]] = None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone '{value}'")
        return value


class FacilityCreate(FacilityBase):
    """Schema for creating a facility."""

    pass


class FacilityStatusUpdate(BaseModel):
    """Schema for opening, closing or approving a facility."""

    is_active: Optional[bool] = None
    is_approved: Optional[bool] = None


class FacilityInDB(FacilityBase):
    """Schema for facility from database."""

    id: str
    owner_id: str
    is_active: bool
    is_approved: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
