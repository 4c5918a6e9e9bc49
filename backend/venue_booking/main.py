"""
Venue Booking - Main Application Entry Point

Public venue catalog with a day-level availability calendar and booking
request form, plus an admin console to approve or reject requests.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from venue_booking.core.config import get_settings
from venue_booking.core.logging import setup_logging, get_logger
from venue_booking.core.metrics import metrics_endpoint
from venue_booking.api.router import api_router, web_router
from venue_booking.api.middleware import RequestLoggingMiddleware
from venue_booking.db.session import AsyncSessionLocal
from venue_booking.services.auth_service import ensure_bootstrap_admin
from venue_booking.services.cache_service import get_redis, close_redis, get_cache_stats
from venue_booking.services.email_service import is_configured as email_configured

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if not email_configured():
        logger.warning("email_disabled", message="RESEND_API_KEY or BOOKING_FROM_EMAIL not set")

    try:
        async with AsyncSessionLocal() as session:
            await ensure_bootstrap_admin(session)
    except SQLAlchemyError as e:
        logger.error("admin_bootstrap_failed", error=str(e))

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without catalog cache")

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Venue catalog, availability calendar and booking requests with admin review",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)
app.include_router(web_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "email": "configured" if email_configured() else "disabled",
        "cache": cache_stats,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()
