"""Booking model."""
import enum
import uuid

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Numeric,
    Index,
    CheckConstraint,
    DDL,
    event,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from court_booking.core.database import Base


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)

_ACTIVE_STATUS_SQL = "status IN ('pending', 'confirmed')"


class Booking(Base):
    """A reservation of one court for a half-open time window."""

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    facility_id = Column(String(36), ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False)
    sport_id = Column(String(36), ForeignKey("sports.id", ondelete="CASCADE"), nullable=False)
    court_number = Column(Integer, nullable=False)  # Auto-assigned by the allocator
    start_time = Column(DateTime, nullable=False)  # Facility-local wall clock
    end_time = Column(DateTime, nullable=False)    # Exclusive
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    notes = Column(Text, nullable=True)
    payment_intent_id = Column(String, nullable=True)
    hold_expires_at = Column(DateTime, nullable=True)  # UTC, pending bookings only
    cancellation_reason = Column(String, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    facility = relationship("Facility", back_populates="bookings")
    sport = relationship("Sport")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_booking_window_ordered"),
        CheckConstraint("court_number >= 1", name="ck_booking_court_number_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')", name="ck_booking_status"
        ),
        # Availability lookups
        Index("ix_bookings_facility_sport_time", "facility_id", "sport_id", "start_time", "end_time"),
        # Two active bookings may not start on the same court at the same instant
        Index(
            "uq_bookings_active_court_start",
            "facility_id",
            "sport_id",
            "court_number",
            "start_time",
            unique=True,
            postgresql_where=text(_ACTIVE_STATUS_SQL),
            sqlite_where=text(_ACTIVE_STATUS_SQL),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} court={self.court_number} "
            f"{self.start_time}-{self.end_time} status={self.status}>"
        )


# PostgreSQL rejects any overlapping active window on the same court.
event.listen(
    Base.metadata,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        "ALTER TABLE bookings ADD CONSTRAINT ex_bookings_active_court_overlap "
        "EXCLUDE USING gist ("
        "facility_id WITH =, sport_id WITH =, court_number WITH =, "
        "tsrange(start_time, end_time, '[)') WITH &&"
        f") WHERE ({_ACTIVE_STATUS_SQL})"
    ).execute_if(dialect="postgresql"),
)
