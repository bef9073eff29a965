from __future__ import annotations
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from ...db import session_dependency
from ...models.users import User
from ...services.stats_service import StatsService
from ..deps import get_current_user

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/{year}/{month}")
async def month_view(
    year: int = Path(..., ge=1970, le=9999),
    month: int = Path(..., ge=1, le=12),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    """Per-day completion totals for a month (1-12). Days without completions are left out."""
    return {"success": True, "data": await StatsService.calendar(session, user, year, month)}
