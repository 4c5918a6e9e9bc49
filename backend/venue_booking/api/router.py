"""
Central routers: the JSON API under /api/v1 and the server-rendered pages.
"""

from fastapi import APIRouter
from venue_booking.api.routes import venues
from venue_booking.api.web import admin, public

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(venues.router)

web_router = APIRouter()
web_router.include_router(public.router)
web_router.include_router(admin.router)
