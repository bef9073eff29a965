from __future__ import annotations
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...db import session_dependency
from ...models.users import User
from ...services.habit_service import HabitService
from ...services.stats_service import StatsService
from ...utils.days import today_key
from ..deps import get_current_user, get_now
from ..schemas import HabitCreate, HabitUpdate

router = APIRouter(prefix="/api/habits", tags=["habits"])


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_habit(
    body: HabitCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    habit = await HabitService.create_habit(
        session,
        user.id,
        title=body.title or "",
        description=body.description,
        frequency=body.frequency or "daily",
        reminder_time=body.effective_reminder_time,
        reminder_enabled=body.reminder_enabled,
    )
    return {"success": True, "message": "Habit created", "habit": habit.to_dict()}


@router.get("")
@router.get("/", include_in_schema=False)
async def list_my_habits(user: User = Depends(get_current_user), session: AsyncSession = Depends(session_dependency)):
    habits = await HabitService.list_habits(session, user.id)
    return {"success": True, "habits": await HabitService.to_payloads(session, habits)}


@router.get("/user/{user_id}")
async def list_user_habits(
    user_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    if user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to see these habits")
    habits = await HabitService.list_habits(session, user.id)
    return {"success": True, "habits": await HabitService.to_payloads(session, habits)}


@router.get("/stats/overview")
async def habits_overview(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
    now: datetime = Depends(get_now),
):
    return {"success": True, "data": await StatsService.habits_overview(session, user, now)}


@router.get("/one/{habit_id}")
async def get_habit(
    habit_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    habit = await HabitService.get_habit(session, user.id, habit_id)
    return {"success": True, "habit": await HabitService.to_payload(session, habit)}


@router.put("/update/{habit_id}")
async def update_habit(
    habit_id: int,
    body: HabitUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    habit = await HabitService.update_habit(session, user.id, habit_id, body.changes())
    return {"success": True, "message": "Habit updated", "habit": await HabitService.to_payload(session, habit)}


@router.delete("/delete/{habit_id}")
async def delete_habit(
    habit_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    await HabitService.archive_habit(session, user.id, habit_id)
    return {"success": True, "message": "Habit deleted"}


@router.post("/{habit_id}/check-in")
async def check_in(
    habit_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
    now: datetime = Depends(get_now),
):
    habit, _ = await HabitService.check_in(session, user.id, habit_id, now, user.timezone)
    return {"success": True, "message": "Marked done for today", "habit": await HabitService.to_payload(session, habit)}


@router.get("/{habit_id}/stats")
async def habit_stats(
    habit_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
    now: datetime = Depends(get_now),
):
    stats = await HabitService.get_habit_stats(session, user.id, habit_id, today_key(now, user.timezone))
    return {"success": True, "data": stats}
