from typing import Optional, Iterable, List, TYPE_CHECKING
from datetime import datetime, date, timezone
from sqlmodel import SQLModel, Field, Relationship, UniqueConstraint
from sqlalchemy import Column, DateTime


if TYPE_CHECKING:
    from .users import User

HABIT_FREQUENCIES = ("daily", "weekly", "custom")


class Habit(SQLModel, table=True):
    """
    User habits with frequency and daily reminder settings.
    """
    __tablename__ = "habits"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="users.id")
    user: "User" = Relationship(back_populates="habits")

    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)

    # daily, weekly, custom
    frequency: str = Field(default="daily", max_length=20)

    # Reminder: "HH:MM" in the owner's timezone
    reminder_time: Optional[str] = Field(default=None, max_length=5, index=True)
    reminder_enabled: bool = Field(default=False, index=True)
    last_reminder_date: Optional[date] = Field(default=None)

    # Soft delete marker
    active: bool = Field(default=True, index=True)

    completions: List["HabitCompletion"] = Relationship(back_populates="habit")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def to_dict(self, completed_days: Iterable[date] = ()) -> dict:
        return {
            "id": self.id,
            "user": self.user_id,
            "title": self.title,
            "description": self.description or "",
            "frequency": self.frequency,
            "timeOfDay": self.reminder_time or "",
            "reminderTime": self.reminder_time or "",
            "reminderEnabled": self.reminder_enabled,
            "lastReminderDate": self.last_reminder_date.isoformat() if self.last_reminder_date else None,
            "isActive": self.active,
            "completedDates": sorted(d.isoformat() for d in completed_days),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class HabitCompletion(SQLModel, table=True):
    """
    One row per (user, habit, local day) on which the habit was done.
    """
    __tablename__ = "habit_completions"
    __table_args__ = (
        UniqueConstraint("user_id", "habit_id", "day", name="uq_habit_completions_user_habit_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="users.id")
    habit_id: int = Field(index=True, foreign_key="habits.id")
    habit: "Habit" = Relationship(back_populates="completions")

    day: date = Field(index=True)
    count: int = Field(default=1, ge=1)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
