"""
Public booking request flow.

CONFLICT STRATEGY: Read-then-write, human-reviewed
==================================================

Sequence per submission:
  1. Validate required fields, formats and the past-date rule
  2. Read: is there a pending/approved booking for (venue_id, event_date)?
  3. If not, insert the booking as pending and commit
  4. Best-effort confirmation email; its failure never undoes step 3

Steps 2 and 3 are not wrapped in a transaction and there is no unique
constraint, so two near-simultaneous submissions for the same day can both
pass the read. That window is accepted: request volume is low and every
booking goes through admin approval, where duplicates are rejected by hand.
A partial unique index on (venue_id, event_date) for occupying statuses
would close it, at the cost of turning the race into an insert error.

Validation failures raise BookingRejected with the flag the venue page
renders as a message. Upstream failures are logged; a failed conflict read
is treated as "no conflict", a failed insert becomes the "insert" flag.
"""

from typing import Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core import clock
from venue_booking.core.exceptions import BookingRejected
from venue_booking.core.logging import get_logger
from venue_booking.core.metrics import record_booking_request
from venue_booking.models.booking import Booking, STATUS_PENDING
from venue_booking.schemas.venue import VenueResponse
from venue_booking.schemas.booking import BookingSubmission, BookingConfirmationEmail
from venue_booking.services import email_service
from venue_booking.services.availability_service import has_conflict, is_past

logger = get_logger(__name__)

REQUIRED_FIELDS = ("requester_name", "requester_email", "event_date", "start_time", "end_time")

FLAG_BOOKED = "booked"
FLAG_MISSING = "missing"
FLAG_INVALID = "invalid"
FLAG_PAST = "past"
FLAG_INSERT = "insert"

CONFLICT_MESSAGES = {
    FLAG_BOOKED: "This venue is already booked or requested for that day. Please choose a different date.",
    FLAG_MISSING: "Please fill in all required fields.",
    FLAG_INSERT: "There was an error saving your booking. Please try again.",
    FLAG_PAST: "You cannot book events in the past. Please select a future date.",
    FLAG_INVALID: "Please enter a valid date and time.",
}


def conflict_message(flag: Optional[str]) -> Optional[str]:
    if not flag:
        return None
    return CONFLICT_MESSAGES.get(flag)


def parse_submission(venue_id: int, form: Mapping[str, Optional[str]]) -> BookingSubmission:
    """Turn raw form fields into a BookingSubmission or raise BookingRejected."""
    values = {key: (form.get(key) or "").strip() for key in REQUIRED_FIELDS}
    raw_date = values["event_date"]

    missing = [key for key, value in values.items() if not value]
    if missing:
        logger.warning("booking_missing_fields", venue_id=venue_id, missing=missing)
        raise BookingRejected(FLAG_MISSING, raw_date)

    notes = (form.get("notes") or "").strip() or None
    try:
        return BookingSubmission(venue_id=venue_id, notes=notes, **values)
    except ValidationError as e:
        logger.warning(
            "booking_invalid_fields",
            venue_id=venue_id,
            fields=[".".join(str(p) for p in err["loc"]) for err in e.errors()],
        )
        raise BookingRejected(FLAG_INVALID, raw_date)


async def create_booking(db: AsyncSession, submission: BookingSubmission) -> Booking:
    """
    Persist a pending booking after the server-side day checks.

    Raises BookingRejected for past dates, occupied days and failed inserts.
    """
    today = clock.today()
    event_date = submission.event_date

    if is_past(event_date, today):
        logger.warning("booking_in_past", venue_id=submission.venue_id, event_date=str(event_date))
        raise BookingRejected(FLAG_PAST, today.isoformat())

    try:
        occupied = await has_conflict(db, submission.venue_id, event_date)
    except SQLAlchemyError as e:
        # Degraded read: proceed and let admin review catch a duplicate
        logger.error("booking_conflict_check_failed", venue_id=submission.venue_id, error=str(e))
        await db.rollback()
        occupied = False

    if occupied:
        logger.info("booking_conflict", venue_id=submission.venue_id, event_date=str(event_date))
        raise BookingRejected(FLAG_BOOKED, event_date.isoformat())

    booking = Booking(
        venue_id=submission.venue_id,
        requester_name=submission.requester_name,
        requester_email=str(submission.requester_email),
        event_date=event_date,
        start_time=submission.start_time,
        end_time=submission.end_time,
        notes=submission.notes,
        status=STATUS_PENDING,
    )
    db.add(booking)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("booking_insert_failed", venue_id=submission.venue_id, error=str(e))
        raise BookingRejected(FLAG_INSERT, event_date.isoformat())

    logger.info(
        "booking_created",
        booking_id=booking.id,
        venue_id=booking.venue_id,
        event_date=str(event_date),
    )
    return booking


def confirmation_email_for(venue: VenueResponse, submission: BookingSubmission) -> BookingConfirmationEmail:
    return BookingConfirmationEmail(
        to=str(submission.requester_email),
        requester_name=submission.requester_name,
        venue_name=venue.name,
        venue_address=venue.address,
        event_date=submission.event_date.isoformat(),
        start_time=submission.start_time.isoformat(timespec="minutes"),
        end_time=submission.end_time.isoformat(timespec="minutes"),
    )


async def notify_requester(venue: VenueResponse, submission: BookingSubmission) -> None:
    """Send the confirmation email; failures are logged and never reach the requester."""
    try:
        await email_service.send_booking_confirmation(confirmation_email_for(venue, submission))
    except Exception as e:
        logger.error(
            "booking_email_failed",
            venue_id=venue.id,
            to=str(submission.requester_email),
            error=str(e),
        )


async def submit_booking_request(
    db: AsyncSession,
    venue: VenueResponse,
    form: Mapping[str, Optional[str]],
) -> BookingSubmission:
    """
    Full public request flow: validate, check the day, insert, notify.

    Returns the accepted submission; raises BookingRejected otherwise.
    """
    try:
        submission = parse_submission(venue.id, form)
        await create_booking(db, submission)
    except BookingRejected as rejected:
        record_booking_request(rejected.flag if rejected.flag != FLAG_INSERT else "insert_error")
        raise

    record_booking_request("created")
    await notify_requester(venue, submission)
    return submission
