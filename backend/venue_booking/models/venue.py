"""
Venue model: the read-only catalog of bookable spaces.

Rows are seeded by migration; the application never writes to this table.
"""

from sqlalchemy import Column, Integer, String, Index, CheckConstraint
from sqlalchemy.orm import relationship

from venue_booking.db.base import Base, TimestampMixin


class Venue(Base, TimestampMixin):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=True)
    description = Column(String(2000), nullable=True)

    # Never loaded implicitly; bookings are always queried by (venue_id, event_date)
    bookings = relationship("Booking", back_populates="venue", lazy="raise")

    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="check_venue_capacity_non_negative"),
        Index("ix_venues_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name})>"
