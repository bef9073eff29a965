from __future__ import annotations
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func

from ..models.habit import Habit, HabitCompletion
from ..models.users import User
from ..utils.days import DayKey, today_key, window_start
from . import aggregator
from .aggregator import CompletionEvent

OVERVIEW_WINDOW_DAYS = 30


class StatsService:
    """
    Loads a user's completion events and feeds them to the aggregator.
    Only active habits take part in any statistic.
    """

    @staticmethod
    async def count_active_habits(session: AsyncSession, user_id: int) -> int:
        result = await session.execute(
            select(func.count(Habit.id)).where(Habit.user_id == user_id, Habit.active == True)
        )
        return result.scalar_one()

    @staticmethod
    async def load_events(
        session: AsyncSession,
        user_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[CompletionEvent]:
        """Completion events of the user's active habits, optionally limited to [start, end]."""
        query = (
            select(HabitCompletion.habit_id, HabitCompletion.day, HabitCompletion.count)
            .join(Habit, Habit.id == HabitCompletion.habit_id)
            .where(HabitCompletion.user_id == user_id, Habit.active == True)
        )
        if start is not None:
            query = query.where(HabitCompletion.day >= start)
        if end is not None:
            query = query.where(HabitCompletion.day <= end)
        result = await session.execute(query)
        return [CompletionEvent(habit_id=h, day=DayKey(d), count=c or 1) for h, d, c in result.all()]

    @staticmethod
    async def overview(session: AsyncSession, user: User, now: datetime) -> dict:
        """Dashboard cards."""
        today = today_key(now, user.timezone)
        total_habits = await StatsService.count_active_habits(session, user.id)
        events = await StatsService.load_events(session, user.id)

        rate = aggregator.completion_rate(events, today, total_habits, OVERVIEW_WINDOW_DAYS)
        return {
            "totalHabits": total_habits,
            "todaysCompletions": aggregator.todays_completion_count(events, today),
            "completionRate": aggregator.rate_percent(rate),
            "bestStreak": aggregator.best_streak(aggregator.distinct_days(events)),
            "currentStreak": aggregator.current_streak(aggregator.distinct_days(events), today),
        }

    @staticmethod
    async def habits_overview(session: AsyncSession, user: User, now: datetime) -> dict:
        """Check-in counters shown on the habits page."""
        today = today_key(now, user.timezone)
        total_habits = await StatsService.count_active_habits(session, user.id)
        events = await StatsService.load_events(session, user.id)
        return {
            "totalHabits": total_habits,
            "activeHabits": total_habits,
            "totalCheckIns": len(events),
            "checkInsToday": aggregator.todays_completion_count(events, today),
        }

    @staticmethod
    async def weekly(session: AsyncSession, user: User, now: datetime) -> List[dict]:
        today = today_key(now, user.timezone)
        events = await StatsService.load_events(session, user.id, start=window_start(today, 7))
        return aggregator.weekly_histogram(events, today, user.week_start)

    @staticmethod
    async def top_habits(session: AsyncSession, user: User, limit: int = 5) -> List[dict]:
        events = await StatsService.load_events(session, user.id)
        ranked = aggregator.top_habits(events, limit)
        if not ranked:
            return []

        result = await session.execute(select(Habit.id, Habit.title).where(Habit.id.in_([r.habit_id for r in ranked])))
        titles = dict(result.all())
        return [
            {
                "habitId": r.habit_id,
                "title": titles.get(r.habit_id, ""),
                "totalCompletions": r.total,
                "lastCompleted": r.last_completed.isoformat(),
            }
            for r in ranked
        ]

    @staticmethod
    async def calendar(session: AsyncSession, user: User, year: int, month: int) -> List[dict]:
        if not 1 <= month <= 12:
            raise ValueError("month must be between 1 and 12")
        start = date(year, month, 1)
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        events = await StatsService.load_events(session, user.id, start=start, end=end)
        return [{"day": day, "total": total} for day, total in aggregator.calendar_month(events, year, month)]

    @staticmethod
    async def checkins_since(session: AsyncSession, user_id: int, since: date) -> int:
        """Sum of completion counts from `since` on, used for the coach prompt."""
        events = await StatsService.load_events(session, user_id, start=since)
        return sum(e.count for e in events)
