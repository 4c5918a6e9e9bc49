"""
Day-level availability checks for a venue.

A day is occupied when the venue has at least one booking in an occupying
status (pending or approved) on that date. Time of day is ignored: two
bookings with non-overlapping hours on the same day still conflict.

The check runs twice per booking: once when rendering the calendar (so the
visitor never picks a known-bad day) and again at submission. The two reads
are not atomic with the insert that follows; see booking_service.
"""

import calendar
from datetime import date, timedelta
from typing import Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.models.booking import Booking, OCCUPYING_STATUSES
from venue_booking.core.logging import get_logger

logger = get_logger(__name__)


def is_past(day: date, today: date) -> bool:
    return day < today


async def occupied_dates(
    db: AsyncSession,
    venue_id: int,
    from_date: date,
    to_date: date,
) -> Set[date]:
    """Distinct dates in [from_date, to_date] with a pending or approved booking."""
    result = await db.execute(
        select(Booking.event_date)
        .where(
            Booking.venue_id == venue_id,
            Booking.status.in_(OCCUPYING_STATUSES),
            Booking.event_date >= from_date,
            Booking.event_date <= to_date,
        )
        .distinct()
    )
    return set(result.scalars().all())


async def has_conflict(db: AsyncSession, venue_id: int, day: date) -> bool:
    """True iff a pending or approved booking exists for exactly (venue_id, day)."""
    result = await db.execute(
        select(Booking.id)
        .where(
            Booking.venue_id == venue_id,
            Booking.event_date == day,
            Booking.status.in_(OCCUPYING_STATUSES),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


def occupancy_window(
    today: date,
    window_days: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> tuple[date, date]:
    """Date range to load occupied days for when rendering a calendar.

    Covers at least `window_days` ahead of today, extended to the end of the
    displayed month when the visitor has navigated further out.
    """
    end = today + timedelta(days=window_days)
    if year is not None and month is not None and 1 <= month <= 12 and 1 <= year <= 9999:
        month_end = date(year, month, calendar.monthrange(year, month)[1])
        end = max(end, month_end)
    return today, end
