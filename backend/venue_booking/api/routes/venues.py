"""
Read-only JSON endpoints for the venue catalog and availability calendar.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.api.web.public import open_calendar, parse_date
from venue_booking.db.session import get_db
from venue_booking.schemas.calendar import CalendarCellResponse, VenueCalendarResponse
from venue_booking.schemas.venue import VenueResponse
from venue_booking.services.catalog_service import get_venue, list_venues

router = APIRouter(prefix="/venues", tags=["Venues"])


@router.get("/", response_model=list[VenueResponse])
async def list_venues_endpoint(
    q: Optional[str] = None,
    min_capacity: Optional[int] = Query(None, ge=0),
    max_capacity: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Venues sorted by name, filtered by name/address substring and capacity bounds."""
    return await list_venues(db, q=q, min_capacity=min_capacity, max_capacity=max_capacity)


@router.get("/{venue_id}", response_model=VenueResponse)
async def get_venue_endpoint(venue_id: int, db: AsyncSession = Depends(get_db)):
    venue = await get_venue(db, venue_id)
    if venue is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Venue {venue_id} not found",
        )
    return venue


@router.get("/{venue_id}/calendar", response_model=VenueCalendarResponse)
async def venue_calendar_endpoint(
    venue_id: int,
    year: Optional[int] = Query(None, ge=1, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    event_date: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Month grid for a venue: Sunday-first, leading blanks, one cell per day
    tagged available, booked or past.
    """
    venue = await get_venue(db, venue_id)
    if venue is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Venue {venue_id} not found",
        )

    view = await open_calendar(db, venue.id, parse_date(event_date), year, month)
    cells = [
        CalendarCellResponse(blank=True)
        if cell.is_blank
        else CalendarCellResponse(blank=False, day=cell.date, state=cell.state.value)
        for cell in view.cells()
    ]
    return VenueCalendarResponse(
        venue_id=venue.id,
        year=view.year,
        month=view.month,
        label=view.label,
        selected_date=view.selected,
        occupied_dates=sorted(view.occupied),
        year_options=view.year_options(),
        cells=cells,
    )
