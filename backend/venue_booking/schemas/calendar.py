"""
Pydantic schemas for the availability calendar API.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel


class CalendarCellResponse(BaseModel):
    blank: bool
    day: Optional[date] = None
    state: Optional[str] = None


class VenueCalendarResponse(BaseModel):
    venue_id: int
    year: int
    month: int
    label: str
    selected_date: Optional[date]
    occupied_dates: list[date]
    year_options: list[int]
    cells: list[CalendarCellResponse]
