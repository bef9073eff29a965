from __future__ import annotations
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...db import session_dependency
from ...llm import coach
from ...models.users import User
from ...services.habit_service import HabitService
from ...services.stats_service import StatsService
from ...utils.days import today_key, window_start
from ..deps import get_current_user, get_now
from ..schemas import CoachIn

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/coach")
async def ask_coach(
    body: CoachIn,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
    now: datetime = Depends(get_now),
):
    if not body.message or not body.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")

    habits = await HabitService.list_habits(session, user.id)
    since = window_start(today_key(now, user.timezone), 31)
    checkins = await StatsService.checkins_since(session, user.id, since)

    try:
        reply = await coach.ask_coach(body.message.strip(), [h.title for h in habits], checkins)
    except coach.CoachUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return {"success": True, "reply": reply}
