"""Court configuration schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class CourtConfigUpsert(BaseModel):
    """Schema for creating or updating a court configuration."""

    court_count: int = Field(..., ge=1)
    price_per_hour: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class CourtConfigInDB(CourtConfigUpsert):
    """Schema for court configuration from database."""

    id: str
    facility_id: str
    sport_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
