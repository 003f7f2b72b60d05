"""Court configuration model."""
import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from court_booking.core.database import Base


class CourtConfiguration(Base):
    """How many courts a facility dedicates to a sport, and their hourly price."""

    __tablename__ = "court_configurations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    facility_id = Column(String(36), ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False, index=True)
    sport_id = Column(String(36), ForeignKey("sports.id", ondelete="CASCADE"), nullable=False, index=True)
    court_count = Column(Integer, nullable=False, default=1)
    price_per_hour = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    facility = relationship("Facility", back_populates="court_configs")
    sport = relationship("Sport", back_populates="court_configs")

    # One configuration per facility and sport
    __table_args__ = (
        UniqueConstraint("facility_id", "sport_id", name="uq_court_config_facility_sport"),
        CheckConstraint("court_count > 0", name="ck_court_config_court_count_positive"),
        CheckConstraint("price_per_hour >= 0", name="ck_court_config_price_non_negative"),
    )
