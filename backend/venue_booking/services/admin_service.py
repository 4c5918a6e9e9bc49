"""
Booking review operations for the admin console.

Every operation takes the caller's verified `AdminIdentity` explicitly and
refuses to run without one. The web layer obtains the identity from the
session cookie; tests and scripts pass it directly.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.exceptions import AdminAuthRequired
from venue_booking.core.logging import get_logger
from venue_booking.core.metrics import record_status_update
from venue_booking.core.security import AdminIdentity
from venue_booking.models.booking import Booking, BOOKING_STATUSES, STATUS_PENDING
from venue_booking.models.venue import Venue
from venue_booking.schemas.booking import AdminBookingRow

logger = get_logger(__name__)

STATUS_FILTERS = ("all",) + BOOKING_STATUSES
DEFAULT_STATUS_FILTER = STATUS_PENDING


def require_admin(identity: Optional[AdminIdentity]) -> AdminIdentity:
    if identity is None:
        raise AdminAuthRequired()
    return identity


def normalize_status_filter(raw: Optional[str]) -> str:
    return raw if raw in STATUS_FILTERS else DEFAULT_STATUS_FILTER


def normalize_venue_filter(raw: Optional[str]) -> Optional[int]:
    """Venue id to filter on, or None for all venues."""
    if not raw or raw == "all":
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def list_bookings(
    db: AsyncSession,
    identity: Optional[AdminIdentity],
    status: str = DEFAULT_STATUS_FILTER,
    venue_id: Optional[int] = None,
) -> list[AdminBookingRow]:
    """
    Bookings joined with their venue name, by event date then start time.
    A read failure degrades to an empty list.
    """
    require_admin(identity)

    query = (
        select(Booking, Venue.name)
        .join(Venue, Venue.id == Booking.venue_id)
        .order_by(Booking.event_date.asc(), Booking.start_time.asc(), Booking.id.asc())
    )
    if status != "all":
        query = query.where(Booking.status == status)
    if venue_id is not None:
        query = query.where(Booking.venue_id == venue_id)

    try:
        result = await db.execute(query)
        rows = result.unique().all()
    except SQLAlchemyError as e:
        logger.error("admin_booking_list_failed", error=str(e))
        return []

    return [
        AdminBookingRow(
            id=booking.id,
            venue_id=booking.venue_id,
            venue_name=venue_name,
            requester_name=booking.requester_name,
            requester_email=booking.requester_email,
            event_date=booking.event_date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            notes=booking.notes,
        )
        for booking, venue_name in rows
    ]


async def list_venue_choices(db: AsyncSession, identity: Optional[AdminIdentity]) -> list[tuple[int, str]]:
    """(id, name) pairs for the venue filter, sorted by name."""
    require_admin(identity)
    try:
        result = await db.execute(select(Venue.id, Venue.name).order_by(Venue.name.asc()))
    except SQLAlchemyError as e:
        logger.error("admin_venue_list_failed", error=str(e))
        return []
    return [(venue_id, name) for venue_id, name in result.all()]


async def update_booking_status(
    db: AsyncSession,
    identity: Optional[AdminIdentity],
    booking_id: int,
    status: str,
) -> bool:
    """
    Set one booking's status. Only the status column is written.
    Returns True if a row was updated.
    """
    admin = require_admin(identity)

    if status not in BOOKING_STATUSES:
        logger.warning("admin_status_invalid", booking_id=booking_id, status=status)
        return False

    try:
        result = await db.execute(
            update(Booking).where(Booking.id == booking_id).values(status=status)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("admin_status_update_failed", booking_id=booking_id, error=str(e))
        return False

    if result.rowcount == 0:
        logger.warning("admin_status_unknown_booking", booking_id=booking_id)
        return False

    record_status_update(status)
    logger.info(
        "booking_status_updated",
        booking_id=booking_id,
        status=status,
        admin_id=admin.admin_id,
    )
    return True
