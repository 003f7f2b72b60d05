"""Facility model."""
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from court_booking.core.database import Base


class Facility(Base):
    """Represents a sports facility listed by an owner."""

    __tablename__ = "facilities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    timezone = Column(String, nullable=False, default="UTC")
    operating_hours = Column(JSON, nullable=True)  # Store as JSON: {"monday": {"open": "06:00", "close": "23:00"}, ...}
    is_active = Column(Boolean, default=True, nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    court_configs = relationship("CourtConfiguration", back_populates="facility", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="facility", cascade="all, delete-orphan")
