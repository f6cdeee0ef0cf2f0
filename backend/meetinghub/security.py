"""Password hashing and bearer-token primitives.

Tokens are stateless: a signed JWT carrying the user id and email, valid for
``access_token_expire_hours``. There is no refresh or revocation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from meetinghub.config import get_settings
from meetinghub.models.user import User

logger = logging.getLogger("meetinghub.auth")


class TokenError(Exception):
    """Raised when a bearer token is malformed, tampered with or expired."""


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.access_token_expire_hours))
    claims: Dict[str, Any] = {
        "sub": str(user.id),
        "id": user.id,
        "email": user.email,
        "type": "access",
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry and return the claims."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise TokenError(str(exc)) from exc
    if payload.get("type") != "access" or not isinstance(payload.get("id"), int):
        raise TokenError("Malformed token claims")
    return payload
