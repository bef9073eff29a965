from __future__ import annotations
from typing import Dict, List, Optional
from datetime import date, datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, and_, func
from loguru import logger

from ..models.habit import Habit, HabitCompletion, HABIT_FREQUENCIES
from ..utils.days import DayKey, today_key
from ..utils.timeparse import normalize_hhmm
from .aggregator import best_streak, current_streak
from .errors import NotFoundError

_UPDATABLE_FIELDS = ("title", "description", "frequency", "reminder_time", "reminder_enabled")


class HabitService:
    """
    CRUD and check-ins for habits.
    """

    @staticmethod
    async def create_habit(
        session: AsyncSession,
        user_id: int,
        title: str,
        description: Optional[str] = None,
        frequency: str = "daily",
        reminder_time: Optional[str] = None,
        reminder_enabled: bool = False,
    ) -> Habit:
        """Create a new habit."""
        title = (title or "").strip()
        if not title:
            raise ValueError("Title is required")
        if frequency not in HABIT_FREQUENCIES:
            raise ValueError(f"frequency must be one of {', '.join(HABIT_FREQUENCIES)}")
        try:
            reminder_t = normalize_hhmm(reminder_time)
        except ValueError:
            logger.warning("Invalid reminder_time format '{}' for user {}", reminder_time, user_id)
            raise

        habit = Habit(
            user_id=user_id,
            title=title,
            description=(description or "").strip() or None,
            frequency=frequency,
            reminder_time=reminder_t,
            reminder_enabled=bool(reminder_enabled),
        )
        session.add(habit)
        await session.flush()
        logger.info("Created habit {} for user {}", habit.id, user_id)
        return habit

    @staticmethod
    async def list_habits(session: AsyncSession, user_id: int, active_only: bool = True) -> List[Habit]:
        """List user's habits."""
        filters = [Habit.user_id == user_id]
        if active_only:
            filters.append(Habit.active == True)

        result = await session.execute(select(Habit).where(and_(*filters)).order_by(Habit.created_at, Habit.id))
        return list(result.scalars().all())

    @staticmethod
    async def get_habit(session: AsyncSession, user_id: int, habit_id: int, active_only: bool = True) -> Habit:
        """Fetch a habit owned by user_id or raise NotFoundError."""
        habit = await session.get(Habit, habit_id)
        if not habit or habit.user_id != user_id or (active_only and not habit.active):
            raise NotFoundError(f"Habit {habit_id} not found")
        return habit

    @staticmethod
    async def update_habit(session: AsyncSession, user_id: int, habit_id: int, changes: dict) -> Habit:
        """Apply a partial update. Unknown keys are ignored."""
        habit = await HabitService.get_habit(session, user_id, habit_id)

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValueError("Title is required")
            changes["title"] = title
        if "frequency" in changes and changes["frequency"] not in HABIT_FREQUENCIES:
            raise ValueError(f"frequency must be one of {', '.join(HABIT_FREQUENCIES)}")
        if "reminder_time" in changes:
            # last_reminder_date is kept: a habit gets at most one reminder per day
            changes["reminder_time"] = normalize_hhmm(changes["reminder_time"])

        for field in _UPDATABLE_FIELDS:
            if field in changes:
                setattr(habit, field, changes[field])

        habit.touch()
        session.add(habit)
        await session.flush()
        logger.info("Updated habit {} ({})", habit_id, ", ".join(k for k in changes if k in _UPDATABLE_FIELDS))
        return habit

    @staticmethod
    async def archive_habit(session: AsyncSession, user_id: int, habit_id: int) -> Habit:
        """Archive (deactivate) a habit. Its completions are kept."""
        habit = await HabitService.get_habit(session, user_id, habit_id, active_only=False)
        habit.active = False
        habit.touch()
        session.add(habit)
        await session.flush()
        logger.info("Archived habit {}", habit_id)
        return habit

    @staticmethod
    async def check_in(
        session: AsyncSession,
        user_id: int,
        habit_id: int,
        now: datetime,
        tz_name: Optional[str] = None,
    ) -> tuple[Habit, bool]:
        """
        Mark the habit done for the owner's local day of `now`.

        Idempotent per day: a second check-in leaves the existing row as is.
        Returns (habit, created).
        """
        habit = await HabitService.get_habit(session, user_id, habit_id)
        day = today_key(now, tz_name)

        existing = await HabitService._find_completion(session, user_id, habit_id, day)
        if existing:
            logger.info("Habit {} already checked in on {}", habit_id, day)
            return habit, False

        try:
            async with session.begin_nested():
                session.add(HabitCompletion(user_id=user_id, habit_id=habit_id, day=day))
        except IntegrityError:
            # lost a race with a concurrent check-in for the same day
            logger.info("Concurrent check-in for habit {} on {}", habit_id, day)
            return habit, False

        habit.touch()
        session.add(habit)
        await session.flush()
        logger.info("Checked in habit {} on {}", habit_id, day)
        return habit, True

    @staticmethod
    async def _find_completion(
        session: AsyncSession, user_id: int, habit_id: int, day: date
    ) -> Optional[HabitCompletion]:
        result = await session.execute(
            select(HabitCompletion).where(
                HabitCompletion.user_id == user_id,
                HabitCompletion.habit_id == habit_id,
                HabitCompletion.day == day,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def completed_days(session: AsyncSession, habit_ids: List[int]) -> Dict[int, List[date]]:
        """Completed days per habit id, ascending."""
        days: Dict[int, List[date]] = {hid: [] for hid in habit_ids}
        if not habit_ids:
            return days
        result = await session.execute(
            select(HabitCompletion.habit_id, HabitCompletion.day)
            .where(HabitCompletion.habit_id.in_(habit_ids))
            .order_by(HabitCompletion.day)
        )
        for habit_id, day in result.all():
            days[habit_id].append(day)
        return days

    @staticmethod
    async def to_payload(session: AsyncSession, habit: Habit) -> dict:
        days = await HabitService.completed_days(session, [habit.id])
        return habit.to_dict(days[habit.id])

    @staticmethod
    async def to_payloads(session: AsyncSession, habits: List[Habit]) -> List[dict]:
        days = await HabitService.completed_days(session, [h.id for h in habits])
        return [h.to_dict(days[h.id]) for h in habits]

    @staticmethod
    async def get_habit_stats(session: AsyncSession, user_id: int, habit_id: int, today: DayKey) -> dict:
        """
        Get statistics for a habit.
        """
        habit = await HabitService.get_habit(session, user_id, habit_id)

        result = await session.execute(
            select(func.count(HabitCompletion.id), func.sum(HabitCompletion.count))
            .where(HabitCompletion.habit_id == habit_id)
        )
        row = result.one()
        total_logs = row[0] or 0
        total_count = row[1] or 0

        days = (await HabitService.completed_days(session, [habit_id]))[habit_id]

        return {
            "habitId": habit.id,
            "title": habit.title,
            "currentStreak": current_streak(days, today),
            "longestStreak": best_streak(days),
            "totalCheckIns": total_logs,
            "totalCount": total_count,
            "lastCompleted": days[-1].isoformat() if days else None,
        }
