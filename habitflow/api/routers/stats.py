from __future__ import annotations
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...db import session_dependency
from ...models.users import User
from ...services.stats_service import StatsService
from ..deps import get_current_user, get_now

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/overview")
async def overview(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
    now: datetime = Depends(get_now),
):
    return {"success": True, "data": await StatsService.overview(session, user, now)}


@router.get("/weekly")
async def weekly(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
    now: datetime = Depends(get_now),
):
    return {"success": True, "data": await StatsService.weekly(session, user, now)}


@router.get("/top-habits")
async def top_habits(
    limit: int = Query(5, ge=1, le=50),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    return {"success": True, "data": await StatsService.top_habits(session, user, limit)}
