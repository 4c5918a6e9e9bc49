"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import date, time
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class BookingSubmission(BaseModel):
    """A parsed public booking request. Status is always forced to pending."""

    venue_id: int
    requester_name: str = Field(..., min_length=1, max_length=255)
    requester_email: EmailStr
    event_date: date
    start_time: time
    end_time: time
    notes: Optional[str] = Field(None, max_length=2000)


class AdminBookingRow(BaseModel):
    id: int
    venue_id: int
    venue_name: str
    requester_name: str
    requester_email: str
    event_date: date
    start_time: time
    end_time: time
    status: str
    notes: Optional[str] = None


class BookingConfirmationEmail(BaseModel):
    to: str
    requester_name: str
    venue_name: str
    venue_address: Optional[str] = None
    event_date: str
    start_time: str
    end_time: str
