"""
Public pages: catalog, venue detail with availability calendar, booking
request submission and the thank-you confirmation.
"""

import calendar
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.api.templating import templates, url_with_query, redirect_to
from venue_booking.core import clock
from venue_booking.core.config import get_settings
from venue_booking.core.exceptions import BookingRejected
from venue_booking.core.logging import get_logger
from venue_booking.db.session import get_db
from venue_booking.schemas.venue import VenueResponse
from venue_booking.services.availability_service import occupied_dates, occupancy_window
from venue_booking.services.booking_service import conflict_message, submit_booking_request
from venue_booking.services.calendar_grid import MAX_YEAR, MIN_YEAR, CalendarView
from venue_booking.services.catalog_service import get_venue, list_venues, parse_capacity

logger = get_logger(__name__)
router = APIRouter(tags=["Pages"], default_response_class=HTMLResponse)

MONTH_NAMES = [(number, calendar.month_name[number]) for number in range(1, 13)]


def parse_date(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def parse_int(raw: Optional[str]) -> Optional[int]:
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def load_venue_or_404(db: AsyncSession, venue_id: int) -> VenueResponse:
    """
    Load a venue as a plain snapshot. The booking flow may roll the session
    back, which expires every ORM instance it holds.
    """
    venue = await get_venue(db, venue_id)
    if venue is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Venue {venue_id} not found")
    return VenueResponse.model_validate(venue)


async def open_calendar(
    db: AsyncSession,
    venue_id: int,
    requested: Optional[date],
    year: Optional[int],
    month: Optional[int],
) -> CalendarView:
    """Load the occupied window for the displayed month and open the calendar on it."""
    today = clock.today()
    if year is None or month is None or not 1 <= month <= 12 or not MIN_YEAR <= year <= MAX_YEAR:
        anchor = max(requested, today) if requested else today
        shown_year, shown_month = anchor.year, anchor.month
    else:
        shown_year, shown_month = year, month

    window_start, window_end = occupancy_window(
        today, get_settings().OCCUPANCY_WINDOW_DAYS, shown_year, shown_month
    )
    try:
        occupied = await occupied_dates(db, venue_id, window_start, window_end)
    except SQLAlchemyError as e:
        logger.error("occupied_dates_failed", venue_id=venue_id, error=str(e))
        occupied = set()

    return CalendarView.open(today, occupied, requested=requested, year=year, month=month)


@router.get("/")
async def home(
    request: Request,
    q: Optional[str] = None,
    minCapacity: Optional[str] = None,
    maxCapacity: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Landing page with the filterable venue catalog."""
    min_capacity = parse_capacity(minCapacity)
    max_capacity = parse_capacity(maxCapacity)
    venues = await list_venues(db, q=q, min_capacity=min_capacity, max_capacity=max_capacity)
    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "venues": venues,
            "q": (q or "").strip(),
            "min_capacity": min_capacity,
            "max_capacity": max_capacity,
        },
    )


@router.get("/venues")
async def venues_page(request: Request, db: AsyncSession = Depends(get_db)):
    venues = await list_venues(db)
    return templates.TemplateResponse(request, "venues.html", {"venues": venues})


@router.get("/venues/{venue_id}")
async def venue_detail(
    request: Request,
    venue_id: int,
    conflict: Optional[str] = None,
    event_date: Optional[str] = None,
    year: Optional[str] = None,
    month: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Venue details, availability calendar and the booking request form."""
    venue = await load_venue_or_404(db, venue_id)
    view = await open_calendar(db, venue.id, parse_date(event_date), parse_int(year), parse_int(month))

    def nav_url(target: CalendarView) -> str:
        return url_with_query(
            f"/venues/{venue.id}",
            year=target.year,
            month=target.month,
            event_date=target.selected.isoformat() if target.selected else None,
        )

    return templates.TemplateResponse(
        request,
        "venue_detail.html",
        {
            "venue": venue,
            "view": view,
            "message": conflict_message(conflict),
            "month_names": MONTH_NAMES,
            "nav_url": nav_url,
        },
    )


@router.post("/venues/{venue_id}/book")
async def request_booking(
    request: Request,
    venue_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Create a pending booking, then redirect to the thank-you page or back with a flag."""
    venue = await load_venue_or_404(db, venue_id)
    form = await request.form()
    fields = {key: value for key, value in form.items() if isinstance(value, str)}

    try:
        submission = await submit_booking_request(db, venue, fields)
    except BookingRejected as rejected:
        return redirect_to(
            url_with_query(
                f"/venues/{venue.id}",
                conflict=rejected.flag,
                event_date=rejected.event_date,
            )
        )

    return redirect_to(
        url_with_query(
            "/thank-you",
            venue=venue.id,
            name=submission.requester_name,
            event_date=submission.event_date.isoformat(),
            start=submission.start_time.isoformat(timespec="minutes"),
            end=submission.end_time.isoformat(timespec="minutes"),
        )
    )


@router.get("/thank-you")
async def thank_you(
    request: Request,
    venue: Optional[str] = None,
    name: Optional[str] = None,
    event_date: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Confirmation page; the venue name and address are reloaded from the catalog."""
    venue_name = venue_address = None
    venue_id = parse_int(venue)
    if venue_id is not None:
        found = await get_venue(db, venue_id)
        if found is not None:
            venue_name, venue_address = found.name, found.address

    return templates.TemplateResponse(
        request,
        "thank_you.html",
        {
            "name": name.strip() if name and name.strip() else None,
            "venue_name": venue_name,
            "venue_address": venue_address,
            "event_date": event_date,
            "start_time": start,
            "end_time": end,
        },
    )
