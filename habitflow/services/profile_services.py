from __future__ import annotations
from typing import Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from ..models.users import User
from ..utils.validators import is_valid_timezone, is_valid_week_start, is_valid_theme

_STRING_FIELDS = ("name", "location", "phone", "avatar")
_BOOL_FIELDS = ("email_reminders", "daily_reminder", "weekly_summary")


async def update_user_profile(session: AsyncSession, user: User, changes: Dict[str, Any]) -> User:
    """
    Apply the profile fields present in `changes`. Values of the wrong type
    are ignored; invalid timezone/week start/theme values raise ValueError.
    """
    changed = False
    for field in _STRING_FIELDS:
        value = changes.get(field)
        if isinstance(value, str):
            setattr(user, field, value); changed = True
    for field in _BOOL_FIELDS:
        value = changes.get(field)
        if isinstance(value, bool):
            setattr(user, field, value); changed = True

    tz = changes.get("timezone")
    if isinstance(tz, str):
        if not is_valid_timezone(tz):
            raise ValueError(f"Unknown timezone '{tz}'")
        user.timezone = tz; changed = True
    week_start = changes.get("week_start")
    if isinstance(week_start, str):
        if not is_valid_week_start(week_start):
            raise ValueError("weekStart must be 'monday' or 'sunday'")
        user.week_start = week_start; changed = True
    theme = changes.get("theme_preference")
    if isinstance(theme, str):
        if not is_valid_theme(theme):
            raise ValueError("themePreference must be 'light', 'dark' or 'system'")
        user.theme_preference = theme; changed = True

    if changed:
        user.touch()
        session.add(user)
        await session.flush()
        logger.info("Updated profile for user {}", user.id)
    return user
