"""
Booking model representing a request to use a venue on a given day.

Key design decisions:
- Occupancy is day-granular: any pending/approved booking on (venue_id, event_date)
  blocks that whole day, regardless of start/end time
- Composite index on (venue_id, event_date) serves the conflict check and the
  calendar's occupied-date window query
- No unique constraint on (venue_id, event_date): rejected bookings must not
  block the day, and concurrent duplicates are caught at admin review
- Status is the only mutable field; rows are never deleted
"""

from sqlalchemy import Column, Integer, String, Date, Time, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

BOOKING_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)

# Statuses that occupy the day
OCCUPYING_STATUSES = (STATUS_PENDING, STATUS_APPROVED)


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False)
    requester_name = Column(String(255), nullable=False)
    requester_email = Column(String(255), nullable=False)
    event_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_PENDING)
    notes = Column(String(2000), nullable=True)

    venue = relationship("Venue", back_populates="bookings", lazy="joined")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="check_booking_status"
        ),
        Index("ix_bookings_venue_date", "venue_id", "event_date"),
        Index("ix_bookings_status_date", "status", "event_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, venue={self.venue_id}, "
            f"date={self.event_date}, status={self.status})>"
        )
