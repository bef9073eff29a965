"""
Minute-granularity email reminders.

Every tick looks at each active, reminder-enabled habit, works out the
owner's local "HH:MM" and local day, and fires the habit at most once per
local day. The once-per-day gate is last_reminder_date, claimed with a
conditional UPDATE before the email goes out, so two overlapping ticks (or
two processes) cannot both send. A failed send still counts as fired.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Protocol, Set

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger
from pytz import utc
from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
from sqlmodel import select

from ..models.habit import Habit
from ..utils.days import current_slots, local_hhmm, today_key
from .scheduler_instance import create_scheduler

TICK_JOB_ID = "habit_reminder_tick"


class Dispatcher(Protocol):
    async def send(self, to: str, subject: str, body: str) -> bool: ...


@dataclass(frozen=True)
class ReminderCandidate:
    habit_id: int
    title: str
    description: Optional[str]
    reminder_time: str
    last_reminder_date: Optional[date]
    email: str
    user_name: str
    tz_name: Optional[str]
    email_reminders: bool


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReminderScheduler:
    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        dispatcher: Dispatcher,
        clock: Callable[[], datetime] = utc_now,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.session_factory = session_factory
        self.dispatcher = dispatcher
        self.clock = clock
        self._scheduler = scheduler

    @property
    def running(self) -> bool:
        return bool(self._scheduler and self._scheduler.running)

    def start(self) -> None:
        if self._scheduler is None:
            self._scheduler = create_scheduler()
        if self._scheduler.running:
            return
        self._scheduler.add_job(
            self.tick,
            trigger=CronTrigger(minute="*", timezone=utc),
            id=TICK_JOB_ID,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Reminder scheduler started")

    def stop(self) -> None:
        if self._scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")

    async def tick(self, now: Optional[datetime] = None) -> int:
        """Run one scan. Returns how many reminders were fired."""
        now = now or self.clock()
        fired = 0
        session = self.session_factory()
        try:
            candidates = await self._load_candidates(session, current_slots(now))
            for candidate in candidates:
                try:
                    if await self._process(session, candidate, now):
                        fired += 1
                except Exception as e:
                    logger.exception("Reminder for habit {} failed: {}", candidate.habit_id, e)
                    await session.rollback()
        finally:
            await session.close()

        if fired:
            logger.info("Reminder tick at {} fired {} reminder(s)", now.isoformat(), fired)
        return fired

    async def _load_candidates(self, session: AsyncSession, slots: Set[str]) -> List[ReminderCandidate]:
        # only habits whose slot is the current minute somewhere on earth
        result = await session.execute(
            select(Habit)
            .options(joinedload(Habit.user))
            .where(
                Habit.active == True,
                Habit.reminder_enabled == True,
                Habit.reminder_time != None,
                Habit.reminder_time.in_(sorted(slots)),
            )
        )
        candidates = []
        for habit in result.scalars().all():
            user = habit.user
            if user is None:
                continue
            candidates.append(
                ReminderCandidate(
                    habit_id=habit.id,
                    title=habit.title,
                    description=habit.description,
                    reminder_time=habit.reminder_time,
                    last_reminder_date=habit.last_reminder_date,
                    email=user.email,
                    user_name=user.name,
                    tz_name=user.timezone,
                    email_reminders=user.email_reminders,
                )
            )
        return candidates

    async def _process(self, session: AsyncSession, c: ReminderCandidate, now: datetime) -> bool:
        if c.reminder_time != local_hhmm(now, c.tz_name):
            return False
        today = today_key(now, c.tz_name)
        if c.last_reminder_date == today:
            return False
        if not c.email_reminders:
            return False

        if not await self._claim(session, c.habit_id, today):
            logger.info("Reminder for habit {} on {} already claimed", c.habit_id, today)
            return False

        sent = await self.dispatcher.send(c.email, f"Reminder: {c.title}", self._body(c))
        if not sent:
            logger.warning("Reminder email for habit {} was not delivered; not retrying today", c.habit_id)
        return True

    async def _claim(self, session: AsyncSession, habit_id: int, today: date) -> bool:
        result = await session.execute(
            update(Habit)
            .where(
                Habit.id == habit_id,
                or_(Habit.last_reminder_date.is_(None), Habit.last_reminder_date != today),
            )
            .values(last_reminder_date=today)
            .execution_options(synchronize_session=False)
        )
        await session.commit()
        return result.rowcount == 1

    @staticmethod
    def _body(c: ReminderCandidate) -> str:
        lines = [f"Hi {c.user_name},", "", f"It's {c.reminder_time}: time for \"{c.title}\"."]
        if c.description:
            lines += ["", c.description]
        lines += ["", "Open HabitFlow to check it off for today.", "", "- HabitFlow"]
        return "\n".join(lines)
