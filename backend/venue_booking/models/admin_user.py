"""
Admin account allowed to sign in to the booking review console.
"""

from sqlalchemy import Column, Integer, String, Boolean

from venue_booking.db.base import Base, TimestampMixin


class AdminUser(Base, TimestampMixin):
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<AdminUser(id={self.id}, email={self.email})>"
