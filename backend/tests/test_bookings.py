"""
Tests for the public booking request flow and venue pages.
"""

from datetime import date
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from venue_booking.models.booking import Booking
from venue_booking.services import booking_service, email_service
from tests.conftest import add_booking


def booking_form(**overrides) -> dict:
    form = {
        "requester_name": "Alex Rivera",
        "requester_email": "alex@example.com",
        "event_date": "2025-11-30",
        "start_time": "14:00",
        "end_time": "16:30",
        "notes": "Chairs for 50 people",
    }
    form.update(overrides)
    return {key: value for key, value in form.items() if value is not None}


def redirect_query(response) -> tuple[str, dict]:
    location = urlparse(response.headers["location"])
    return location.path, {key: values[0] for key, values in parse_qs(location.query).items()}


async def count_bookings(db_session) -> int:
    return (await db_session.execute(select(func.count()).select_from(Booking))).scalar()


@pytest.mark.asyncio
async def test_free_day_creates_pending_booking(client: AsyncClient, db_session, community_hall, sent_emails):
    """A well-formed request on a free day creates one pending row and goes to the thank-you page."""
    response = await client.post(f"/venues/{community_hall.id}/book", data=booking_form())

    assert response.status_code == 303
    path, query = redirect_query(response)
    assert path == "/thank-you"
    assert query == {
        "venue": str(community_hall.id),
        "name": "Alex Rivera",
        "event_date": "2025-11-30",
        "start": "14:00",
        "end": "16:30",
    }

    bookings = (await db_session.execute(select(Booking))).scalars().all()
    assert len(bookings) == 1
    assert bookings[0].status == "pending"
    assert bookings[0].event_date == date(2025, 11, 30)
    assert bookings[0].notes == "Chairs for 50 people"

    assert len(sent_emails) == 1
    assert sent_emails[0].to == "alex@example.com"
    assert sent_emails[0].venue_name == "Community Hall"
    assert sent_emails[0].venue_address == "Park Avenue 10"


@pytest.mark.asyncio
async def test_occupied_day_is_rejected(client: AsyncClient, db_session, community_hall, booked_community_hall, sent_emails):
    """Community Hall is booked on 2025-11-29: requesting it is rejected, the 30th succeeds."""
    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(event_date="2025-11-29")
    )
    assert response.status_code == 303
    path, query = redirect_query(response)
    assert path == f"/venues/{community_hall.id}"
    assert query == {"conflict": "booked", "event_date": "2025-11-29"}
    assert await count_bookings(db_session) == 1
    assert sent_emails == []

    page = await client.get(response.headers["location"])
    assert "already booked or requested for that day" in page.text

    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(event_date="2025-11-30")
    )
    assert redirect_query(response)[0] == "/thank-you"
    assert await count_bookings(db_session) == 2


@pytest.mark.asyncio
async def test_same_day_different_hours_still_conflicts(client: AsyncClient, db_session, community_hall, sent_emails):
    await add_booking(db_session, community_hall, date(2025, 12, 3))

    response = await client.post(
        f"/venues/{community_hall.id}/book",
        data=booking_form(event_date="2025-12-03", start_time="18:00", end_time="21:00"),
    )
    assert redirect_query(response)[1]["conflict"] == "booked"


@pytest.mark.asyncio
async def test_rejected_booking_frees_the_day(client: AsyncClient, db_session, community_hall, sent_emails):
    await add_booking(db_session, community_hall, date(2025, 12, 3), status="rejected")

    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(event_date="2025-12-03")
    )
    assert redirect_query(response)[0] == "/thank-you"


@pytest.mark.asyncio
async def test_missing_email_is_rejected_without_write_or_email(client: AsyncClient, db_session, community_hall, sent_emails):
    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(requester_email=None)
    )
    assert response.status_code == 303
    path, query = redirect_query(response)
    assert path == f"/venues/{community_hall.id}"
    assert query["conflict"] == "missing"
    assert await count_bookings(db_session) == 0
    assert sent_emails == []

    page = await client.get(response.headers["location"])
    assert "Please fill in all required fields." in page.text


@pytest.mark.asyncio
async def test_blank_required_field_counts_as_missing(client: AsyncClient, db_session, community_hall, sent_emails):
    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(requester_name="   ")
    )
    assert redirect_query(response)[1]["conflict"] == "missing"
    assert await count_bookings(db_session) == 0


@pytest.mark.asyncio
async def test_past_date_is_rejected(client: AsyncClient, db_session, community_hall, sent_emails):
    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(event_date="2025-11-27")
    )
    _, query = redirect_query(response)
    assert query == {"conflict": "past", "event_date": "2025-11-28"}
    assert await count_bookings(db_session) == 0


@pytest.mark.asyncio
async def test_today_is_bookable(client: AsyncClient, db_session, community_hall, sent_emails):
    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(event_date="2025-11-28")
    )
    assert redirect_query(response)[0] == "/thank-you"


@pytest.mark.asyncio
async def test_unparsable_values_are_invalid(client: AsyncClient, db_session, community_hall, sent_emails):
    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(start_time="teatime")
    )
    assert redirect_query(response)[1]["conflict"] == "invalid"

    response = await client.post(
        f"/venues/{community_hall.id}/book", data=booking_form(event_date="30/11/2025")
    )
    assert redirect_query(response)[1]["conflict"] == "invalid"
    assert await count_bookings(db_session) == 0


@pytest.mark.asyncio
async def test_email_failure_does_not_block_booking(client: AsyncClient, db_session, community_hall, monkeypatch):
    async def failing_send(payload, client=None):
        raise httpx.ConnectError("provider unreachable")

    monkeypatch.setattr(email_service, "send_booking_confirmation", failing_send)

    response = await client.post(f"/venues/{community_hall.id}/book", data=booking_form())
    assert redirect_query(response)[0] == "/thank-you"
    assert await count_bookings(db_session) == 1


@pytest.mark.asyncio
async def test_unconfigured_email_still_creates_booking(client: AsyncClient, db_session, community_hall):
    """With no email provider configured the booking is recorded and the redirect proceeds."""
    assert not email_service.is_configured()

    response = await client.post(f"/venues/{community_hall.id}/book", data=booking_form())
    assert redirect_query(response)[0] == "/thank-you"

    booking = (await db_session.execute(select(Booking))).scalar_one()
    assert booking.status == "pending"


@pytest.mark.asyncio
async def test_book_unknown_venue_returns_404(client: AsyncClient, db_session, venues):
    response = await client.post("/venues/9999/book", data=booking_form())
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_venue_page_marks_booked_day_disabled(client: AsyncClient, community_hall, booked_community_hall):
    response = await client.get(f"/venues/{community_hall.id}")
    assert response.status_code == 200
    html = response.text
    assert "Community Hall" in html
    assert "November 2025" in html

    booked = html.split('value="2025-11-29"')[-1].split(">")[0]
    assert "disabled" in booked
    past = html.split('value="2025-11-27"')[-1].split(">")[0]
    assert "disabled" in past
    today = html.split('value="2025-11-28"')[-1].split(">")[0]
    assert "disabled" not in today
    assert "checked" in today


@pytest.mark.asyncio
async def test_venue_page_navigates_months(client: AsyncClient, community_hall):
    response = await client.get(f"/venues/{community_hall.id}?year=2026&month=2")
    assert "February 2026" in response.text
    assert 'value="2026-02-28"' in response.text


@pytest.mark.asyncio
async def test_venue_page_unknown_venue(client: AsyncClient, venues):
    response = await client.get("/venues/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_thank_you_page_shows_summary(client: AsyncClient, community_hall):
    response = await client.get(
        "/thank-you",
        params={
            "venue": community_hall.id,
            "name": "Alex Rivera",
            "event_date": "2025-11-30",
            "start": "14:00",
            "end": "16:30",
        },
    )
    assert response.status_code == 200
    assert "Thank you, Alex Rivera" in response.text
    assert "Community Hall - Park Avenue 10" in response.text
    assert "2025-11-30" in response.text


def database_down(statement: str) -> OperationalError:
    return OperationalError(statement, {}, Exception("database is locked"))


@pytest.mark.asyncio
async def test_failed_insert_redirects_with_insert_flag(
    client: AsyncClient, db_session, community_hall, sent_emails, monkeypatch
):
    """A write failure goes back to the venue page with the try-again flag and writes nothing."""
    hall_id = community_hall.id

    async def failing_commit():
        raise database_down("INSERT INTO bookings")

    monkeypatch.setattr(db_session, "commit", failing_commit)

    response = await client.post(f"/venues/{hall_id}/book", data=booking_form())
    assert response.status_code == 303
    path, query = redirect_query(response)
    assert path == f"/venues/{hall_id}"
    assert query == {"conflict": "insert", "event_date": "2025-11-30"}
    assert await count_bookings(db_session) == 0
    assert sent_emails == []


@pytest.mark.asyncio
async def test_failed_conflict_read_still_books(
    client: AsyncClient, db_session, community_hall, sent_emails, monkeypatch
):
    """If the conflict check cannot run, the request is still recorded for admin review."""
    hall_id = community_hall.id

    async def failing_check(db, venue_id, day):
        raise database_down("SELECT bookings.id FROM bookings")

    monkeypatch.setattr(booking_service, "has_conflict", failing_check)

    response = await client.post(f"/venues/{hall_id}/book", data=booking_form())
    assert response.status_code == 303
    path, query = redirect_query(response)
    assert path == "/thank-you"
    assert query["venue"] == str(hall_id)

    booking = (await db_session.execute(select(Booking))).scalar_one()
    assert booking.status == "pending"
    assert [email.venue_name for email in sent_emails] == ["Community Hall"]


@pytest.mark.asyncio
async def test_selection_from_another_month_stays_in_radio_group(client: AsyncClient, community_hall):
    response = await client.get(
        f"/venues/{community_hall.id}", params={"year": "2025", "month": "12", "event_date": "2025-11-30"}
    )
    html = response.text
    assert "December 2025" in html
    carried = '<input type="radio" name="event_date" value="2025-11-30" checked>'
    assert carried in html
    # Rendered ahead of the grid so a day clicked in the grid is the later value
    assert html.index(carried) < html.index('value="2025-12-10"')
    calendar_html = html.split('<form method="post"')[1]
    assert 'type="hidden" name="event_date"' not in calendar_html


@pytest.mark.asyncio
async def test_clicked_day_wins_over_carried_selection(
    client: AsyncClient, db_session, community_hall, sent_emails
):
    """Both event_date values arrive in page order; the day clicked in the grid is booked."""
    hall_id = community_hall.id
    response = await client.post(
        f"/venues/{hall_id}/book",
        data=booking_form(event_date=["2025-11-30", "2025-12-10"]),
    )
    path, query = redirect_query(response)
    assert path == "/thank-you"
    assert query["event_date"] == "2025-12-10"

    booking = (await db_session.execute(select(Booking))).scalar_one()
    assert booking.event_date == date(2025, 12, 10)


@pytest.mark.asyncio
async def test_calendar_at_year_bounds_hides_out_of_range_links(client: AsyncClient, community_hall):
    response = await client.get(f"/venues/{community_hall.id}", params={"year": "9999", "month": "12"})
    assert response.status_code == 200
    assert "December 9999" in response.text
    assert 'aria-label="Next month"' not in response.text
    assert 'aria-label="Previous month"' in response.text

    response = await client.get(f"/venues/{community_hall.id}", params={"year": "1", "month": "1"})
    assert response.status_code == 200
    assert "January 1" in response.text
    assert 'aria-label="Previous month"' not in response.text
    assert 'aria-label="Next month"' in response.text
