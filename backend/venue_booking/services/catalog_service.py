"""
Venue catalog reads.

Read failures never fail the page: they are logged and degrade to an empty
result, so the catalog renders "No venues found" instead of an error.
"""

from typing import Optional

from sqlalchemy import select, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.models.venue import Venue
from venue_booking.schemas.venue import VenueResponse
from venue_booking.services.cache_service import get_cached_venues, set_cached_venues
from venue_booking.core.logging import get_logger

logger = get_logger(__name__)


def parse_capacity(raw: Optional[str]) -> Optional[int]:
    """Capacity filter from a query string; blank or non-numeric values are ignored."""
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def list_venues(
    db: AsyncSession,
    q: Optional[str] = None,
    min_capacity: Optional[int] = None,
    max_capacity: Optional[int] = None,
) -> list[VenueResponse]:
    """
    List venues sorted by name.

    `q` matches name or address, case-insensitively, as a substring.
    Capacity bounds are inclusive; venues without a capacity never match a bound.
    """
    q = q.strip() if q else None
    unfiltered = not q and min_capacity is None and max_capacity is None

    if unfiltered:
        cached = await get_cached_venues()
        if cached is not None:
            return [VenueResponse(**v) for v in cached]

    query = select(Venue)
    if q:
        query = query.where(
            or_(
                Venue.name.icontains(q, autoescape=True),
                Venue.address.icontains(q, autoescape=True),
            )
        )
    if min_capacity is not None:
        query = query.where(Venue.capacity >= min_capacity)
    if max_capacity is not None:
        query = query.where(Venue.capacity <= max_capacity)

    try:
        result = await db.execute(query.order_by(Venue.name.asc()))
        venues = [VenueResponse.model_validate(v) for v in result.scalars().all()]
    except SQLAlchemyError as e:
        logger.error("venue_list_failed", error=str(e))
        return []

    if unfiltered:
        await set_cached_venues([v.model_dump() for v in venues])

    return venues


async def get_venue(db: AsyncSession, venue_id: int) -> Optional[Venue]:
    """Get a single venue by ID, or None."""
    try:
        result = await db.execute(select(Venue).where(Venue.id == venue_id))
    except SQLAlchemyError as e:
        logger.error("venue_load_failed", venue_id=venue_id, error=str(e))
        return None
    return result.scalar_one_or_none()
