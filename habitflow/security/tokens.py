from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from ..config import settings

RESET_PURPOSE = "password_reset"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(ValueError):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: Dict[str, Any], expires_delta: timedelta, now: Optional[datetime] = None) -> str:
    to_encode = dict(claims)
    to_encode["exp"] = (now or datetime.now(timezone.utc)) + expires_delta
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int, email: str, now: Optional[datetime] = None) -> str:
    """Session token carrying the user id and email, valid ACCESS_TOKEN_EXPIRE_DAYS."""
    return _encode(
        {"sub": str(user_id), "email": email},
        timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
        now,
    )


def create_reset_token(user_id: int, email: str, now: Optional[datetime] = None) -> str:
    """Short-lived token that only the reset-password endpoint accepts."""
    return _encode(
        {"sub": str(user_id), "email": email, "purpose": RESET_PURPOSE},
        timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        now,
    )


def decode_token(token: str, purpose: Optional[str] = None) -> Dict[str, Any]:
    """
    Decode and verify a token. Session tokens have no purpose claim, so a
    reset token is never accepted as a session and vice versa.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise TokenError("Invalid token") from e
    if payload.get("purpose") != purpose:
        raise TokenError("Invalid token")
    if not payload.get("sub"):
        raise TokenError("Invalid token")
    return payload
