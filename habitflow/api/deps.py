from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import session_dependency
from ..models.users import User
from ..notifications.email import EmailDispatcher
from ..security.tokens import TokenError, decode_token

_dispatcher = EmailDispatcher()


def get_dispatcher() -> EmailDispatcher:
    return _dispatcher


def get_now() -> datetime:
    """Request time; overridden in tests to pin "today"."""
    return datetime.now(timezone.utc)


async def get_current_user(
    authorization: Optional[str] = Header(None),
    session: AsyncSession = Depends(session_dependency),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token, authorization denied")
    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = decode_token(token)
        user_id = int(payload["sub"])
    except (TokenError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token is not valid")

    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user
