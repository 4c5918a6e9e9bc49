"""
Admin console: login/logout and booking review.

The session cookie is only read by the `get_admin_identity` dependency; the
resulting identity (or None) is passed to the admin services, which refuse
to run without one. A missing identity becomes a redirect to the login page.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.api.templating import templates, url_with_query, redirect_to
from venue_booking.core.config import get_settings
from venue_booking.core.exceptions import AdminAuthRequired
from venue_booking.core.logging import get_logger
from venue_booking.core.security import (
    ADMIN_SESSION_COOKIE,
    AdminIdentity,
    create_session_token,
    get_admin_identity,
)
from venue_booking.db.session import get_db
from venue_booking.services import admin_service
from venue_booking.services.auth_service import authenticate_admin

logger = get_logger(__name__)
router = APIRouter(prefix="/admin", tags=["Admin"], default_response_class=HTMLResponse)

LOGIN_URL = "/admin/login"
BOOKINGS_URL = "/admin/bookings"

LOGIN_MESSAGES = {
    "invalid": "Invalid email or password. Please try again.",
    "missing": "Please enter both email and password.",
}


def safe_return_url(raw: Optional[str]) -> str:
    """Only redirect back to the bookings page itself, never to another host or path."""
    if raw and raw.startswith(BOOKINGS_URL) and not raw.startswith("//"):
        rest = raw[len(BOOKINGS_URL):]
        if rest == "" or rest.startswith("?"):
            return raw
    return BOOKINGS_URL


@router.get("/login")
async def login_page(request: Request, error: Optional[str] = None):
    return templates.TemplateResponse(
        request, "admin_login.html", {"message": LOGIN_MESSAGES.get(error or "")}
    )


@router.post("/login")
async def login(
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Verify credentials and set the admin session cookie."""
    if not email or not password:
        return redirect_to(url_with_query(LOGIN_URL, error="missing"))

    identity = await authenticate_admin(db, email, password)
    if identity is None:
        return redirect_to(url_with_query(LOGIN_URL, error="invalid"))

    settings = get_settings()
    response = redirect_to(BOOKINGS_URL)
    response.set_cookie(
        ADMIN_SESSION_COOKIE,
        create_session_token(identity),
        max_age=settings.ADMIN_SESSION_EXPIRE_MINUTES * 60,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.post("/logout")
async def logout():
    response = redirect_to(LOGIN_URL)
    response.delete_cookie(ADMIN_SESSION_COOKIE, path="/")
    return response


@router.get("/bookings")
async def bookings_page(
    request: Request,
    status: Optional[str] = None,
    venue: Optional[str] = None,
    identity: Optional[AdminIdentity] = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    """Filterable booking list with approve/reject/reset actions."""
    status_filter = admin_service.normalize_status_filter(status)
    venue_filter = admin_service.normalize_venue_filter(venue)

    try:
        venues = await admin_service.list_venue_choices(db, identity)
        bookings = await admin_service.list_bookings(db, identity, status_filter, venue_filter)
    except AdminAuthRequired:
        return redirect_to(LOGIN_URL)

    current_url = url_with_query(
        BOOKINGS_URL,
        status=status_filter if status_filter != admin_service.DEFAULT_STATUS_FILTER else None,
        venue=venue_filter,
    )
    return templates.TemplateResponse(
        request,
        "admin_bookings.html",
        {
            "identity": identity,
            "venues": venues,
            "bookings": bookings,
            "status_filter": status_filter,
            "venue_filter": venue_filter,
            "current_url": current_url,
        },
    )


@router.post("/bookings/status")
async def update_status(
    raw_id: Optional[str] = Form(None, alias="id"),
    status: Optional[str] = Form(None),
    redirect_to_url: Optional[str] = Form(None, alias="redirect_to"),
    identity: Optional[AdminIdentity] = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    """Change one booking's status and go back to the filtered list."""
    if identity is None:
        return redirect_to(LOGIN_URL)

    try:
        booking_id = int(raw_id) if raw_id else None
    except ValueError:
        booking_id = None

    if booking_id is None or not status:
        logger.warning("admin_status_payload_invalid", id=raw_id, status=status)
    else:
        try:
            await admin_service.update_booking_status(db, identity, booking_id, status)
        except AdminAuthRequired:
            return redirect_to(LOGIN_URL)

    return redirect_to(safe_return_url(redirect_to_url))
