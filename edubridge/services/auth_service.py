"""Bearer-token resolution of the acting profile.

Sign-in itself happens outside this service; tokens are signed with the shared
``JWT_SECRET_KEY`` and carry the profile id as their subject.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import Profile

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)

ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
DEFAULT_TOKEN_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))

_PLACEHOLDER_SECRETS = {"changeme", "change-me", "placeholder", "secret"}


class MissingSecretError(RuntimeError):
    """Raised when ``JWT_SECRET_KEY`` is unset or still a placeholder."""


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    value = (os.getenv("JWT_SECRET_KEY") or "").strip()
    if not value or value.lower() in _PLACEHOLDER_SECRETS:
        raise MissingSecretError("JWT_SECRET_KEY must be set to a non-placeholder value")
    return value


def create_access_token(subject: UUID, *, expires_minutes: Optional[int] = None) -> str:
    """Create a signed JWT holding the provided ``subject``."""

    expire_delta = timedelta(minutes=expires_minutes or DEFAULT_TOKEN_MINUTES)
    now = datetime.now(timezone.utc)
    payload = {"sub": str(subject), "exp": now + expire_delta, "iat": now}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> UUID:
    """Decode and validate a JWT, returning the embedded subject UUID."""

    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    try:
        return UUID(subject)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload") from exc


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_security),
    db: Session = Depends(get_session),
) -> Profile:
    """Resolve the acting profile from the provided bearer token."""

    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    profile_id = decode_access_token(credentials.credentials)
    profile = db.get(Profile, profile_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return profile


__all__ = [
    "MissingSecretError",
    "create_access_token",
    "decode_access_token",
    "get_current_user",
]
