"""
Session resolver.

Reads a bearer JWT from the ``Authorization`` header and turns it into an
``Identity``. The identity is handed to every service call explicitly;
nothing about the caller is kept in module state.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from jose import JWTError, jwt

from exam_portal.config import settings
from exam_portal.errors import Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Who is calling, as asserted by the session provider."""
    email: str


def create_access_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token whose subject is the user's email"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": email, "exp": expire, "type": "access"}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def resolve_identity(request: Request) -> Optional[Identity]:
    """Identity for the request, or None when there is no valid session."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None

    payload = decode_token(auth_header[len("Bearer "):])
    if not payload or payload.get("type") != "access":
        logger.debug("Rejected token on %s", request.url.path)
        return None

    email = payload.get("sub")
    if not email:
        return None
    return Identity(email=email)


async def require_identity(request: Request) -> Identity:
    """Dependency: the caller's identity, or 401."""
    identity = resolve_identity(request)
    if identity is None:
        raise Unauthenticated()
    return identity
