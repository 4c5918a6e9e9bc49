"""
Password hashing and admin session tokens.

The admin session is a signed JWT kept in an httpOnly cookie. Handlers never
read the cookie themselves: the `get_admin_identity` dependency decodes it
into an `AdminIdentity` which is then passed explicitly to every admin
service call.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Request

from venue_booking.core.config import get_settings
from venue_booking.core.logging import get_logger

logger = get_logger(__name__)

ADMIN_SESSION_COOKIE = "admin_session"


@dataclass(frozen=True)
class AdminIdentity:
    admin_id: int
    email: str


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash or over-long password
        return False


def create_session_token(identity: AdminIdentity, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ADMIN_SESSION_EXPIRE_MINUTES)
    )
    payload = {
        "sub": str(identity.admin_id),
        "email": identity.email,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str) -> Optional[AdminIdentity]:
    """Return the identity carried by a session token, or None if it is invalid or expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return AdminIdentity(admin_id=int(payload["sub"]), email=payload["email"])
    except (jwt.PyJWTError, KeyError, ValueError) as e:
        logger.info("admin_session_rejected", reason=type(e).__name__)
        return None


async def get_admin_identity(request: Request) -> Optional[AdminIdentity]:
    """FastAPI dependency: the verified admin identity for this request, if any."""
    token = request.cookies.get(ADMIN_SESSION_COOKIE)
    if not token:
        return None
    return decode_session_token(token)
