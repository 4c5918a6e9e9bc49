"""
Admin authentication: credential check and bootstrap account.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.models.admin_user import AdminUser
from venue_booking.core.config import get_settings
from venue_booking.core.security import AdminIdentity, hash_password, verify_password
from venue_booking.core.logging import get_logger

logger = get_logger(__name__)


async def authenticate_admin(db: AsyncSession, email: str, password: str) -> Optional[AdminIdentity]:
    """
    Verify admin credentials.
    Returns the verified identity, or None if the email/password pair is
    invalid or the account could not be looked up.
    """
    try:
        result = await db.execute(select(AdminUser).where(AdminUser.email == email.strip().lower()))
    except SQLAlchemyError as e:
        logger.error("admin_login_lookup_failed", email=email, error=str(e))
        return None
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(password, admin.hashed_password):
        logger.warning("admin_login_failed", email=email)
        return None

    if not admin.is_active:
        logger.warning("admin_login_inactive", admin_id=admin.id)
        return None

    logger.info("admin_logged_in", admin_id=admin.id)
    return AdminIdentity(admin_id=admin.id, email=admin.email)


async def create_admin(db: AsyncSession, email: str, password: str) -> AdminUser:
    admin = AdminUser(email=email.strip().lower(), hashed_password=hash_password(password))
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info("admin_created", admin_id=admin.id, email=admin.email)
    return admin


async def ensure_bootstrap_admin(db: AsyncSession) -> Optional[AdminUser]:
    """
    Create the admin account named in ADMIN_BOOTSTRAP_EMAIL/PASSWORD if it does
    not exist yet. Existing accounts are left untouched.
    """
    settings = get_settings()
    if not settings.ADMIN_BOOTSTRAP_EMAIL or not settings.ADMIN_BOOTSTRAP_PASSWORD:
        return None

    email = settings.ADMIN_BOOTSTRAP_EMAIL.strip().lower()
    result = await db.execute(select(AdminUser).where(AdminUser.email == email))
    existing = result.scalar_one_or_none()
    if existing:
        return existing

    return await create_admin(db, email, settings.ADMIN_BOOTSTRAP_PASSWORD)
