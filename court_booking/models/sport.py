"""Sport model."""
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from court_booking.core.database import Base


class Sport(Base):
    """A bookable sport, e.g. badminton or tennis."""

    __tablename__ = "sports"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, unique=True, nullable=False)
    emoji = Column(String, nullable=True)
    sport_type = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    court_configs = relationship("CourtConfiguration", back_populates="sport", cascade="all, delete-orphan")
