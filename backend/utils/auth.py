"""
Bearer-token authentication.

Tokens are HS256 JWTs signed with ``JWT_SECRET``; the ``sub`` claim is the
owner id used by the credit ledger and plan store.  A missing or invalid
token resolves to no principal rather than an HTTP error, so the
generation pipeline can report the failure in its own result.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config.settings import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller."""

    id: str
    email: Optional[str] = None


def create_access_token(
    subject: str,
    expires_delta: timedelta = timedelta(hours=12),
    email: Optional[str] = None,
    secret: Optional[str] = None,
) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": subject}
    if email:
        to_encode["email"] = email
    return jwt.encode(to_encode, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, secret: Optional[str] = None) -> Optional[Principal]:
    """Principal for a valid token, else None."""
    secret = secret or settings.JWT_SECRET
    if not token or not secret:
        return None

    try:
        claims = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        return None

    subject = claims.get("sub")
    if not subject:
        return None
    return Principal(id=str(subject), email=claims.get("email"))


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    """FastAPI dependency: the caller, or None when unauthenticated."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials)
