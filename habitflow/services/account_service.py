from __future__ import annotations
from typing import Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from loguru import logger

from ..config import settings
from ..models.users import User
from ..notifications.email import EmailDispatcher
from ..security.tokens import (
    TokenError,
    create_access_token,
    create_reset_token,
    decode_token,
    hash_password,
    verify_password,
    RESET_PURPOSE,
)
from .errors import ConflictError, InvalidCredentialsError, NotFoundError

MIN_PASSWORD_LENGTH = 6


class AccountService:
    """
    Manage user account lifecycle: signup, login, password changes and resets.
    """

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> Optional[User]:
        result = await session.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def signup(session: AsyncSession, name: str, email: str, password: str) -> tuple[User, str]:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise ValueError("All fields are required")
        if await AccountService.get_by_email(session, email):
            raise ConflictError("Email already registered")

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            timezone=settings.DEFAULT_TIMEZONE,
        )
        session.add(user)
        await session.flush()
        logger.info("Registered user {}", user.id)
        return user, create_access_token(user.id, user.email)

    @staticmethod
    async def login(session: AsyncSession, email: str, password: str) -> tuple[User, str]:
        if not email or not password:
            raise ValueError("Email and password required")
        user = await AccountService.get_by_email(session, email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials")
        return user, create_access_token(user.id, user.email)

    @staticmethod
    async def change_password(session: AsyncSession, user: User, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise ValueError("Current and new password are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if not verify_password(current_password, user.password_hash):
            raise ValueError("Current password is incorrect")
        AccountService._set_password(session, user, new_password)
        logger.info("Password changed for user {}", user.id)

    @staticmethod
    async def request_password_reset(
        session: AsyncSession,
        email: str,
        dispatcher: EmailDispatcher,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Email a reset link if the address belongs to an account. Callers answer
        the same way either way so account existence does not leak.
        """
        user = await AccountService.get_by_email(session, email or "")
        if not user:
            logger.info("Password reset requested for unknown email")
            return

        token = create_reset_token(user.id, user.email, now)
        base = (settings.CLIENT_URL or "http://localhost:4200").rstrip("/")
        body = (
            f"Hi {user.name},\n\n"
            "Use the link below to reset your HabitFlow password. "
            f"It expires in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes.\n\n"
            f"{base}/reset-password?token={token}\n\n"
            "If you did not ask for this, you can ignore this email."
        )
        await dispatcher.send(user.email, "Reset your HabitFlow password", body)

    @staticmethod
    async def reset_password(session: AsyncSession, token: str, new_password: str) -> User:
        if not token or not new_password:
            raise ValueError("Token and new password are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
        try:
            payload = decode_token(token, purpose=RESET_PURPOSE)
        except TokenError:
            raise ValueError("Reset link is invalid or has expired")

        user = await session.get(User, int(payload["sub"]))
        if not user or user.email != payload.get("email"):
            raise NotFoundError("User not found")
        AccountService._set_password(session, user, new_password)
        logger.info("Password reset for user {}", user.id)
        return user

    @staticmethod
    def _set_password(session: AsyncSession, user: User, new_password: str) -> None:
        user.password_hash = hash_password(new_password)
        user.touch()
        session.add(user)
