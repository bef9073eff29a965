from typing import Optional, List, TYPE_CHECKING
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, UniqueConstraint, Relationship
from sqlalchemy import DateTime, Column, Text


if TYPE_CHECKING:
    from .habit import Habit
    from .support import SupportMessage


class User(SQLModel, table=True):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=200)
    email: str = Field(index=True, max_length=320)
    password_hash: str

    # Profile extras
    location: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    avatar: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))  # base64 or URL

    # Notification settings
    email_reminders: bool = Field(default=True)
    daily_reminder: bool = Field(default=True)
    weekly_summary: bool = Field(default=False)

    # App settings
    timezone: str = Field(default="Asia/Kolkata", max_length=64)
    week_start: str = Field(default="monday", max_length=10)  # monday | sunday
    theme_preference: str = Field(default="system", max_length=10)  # light | dark | system

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    # --- Relationships ---
    habits: List["Habit"] = Relationship(back_populates="user")
    support_messages: List["SupportMessage"] = Relationship(back_populates="user")

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def to_public_dict(self) -> dict:
        """Profile as returned by the API (never includes the password hash)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "location": self.location,
            "phone": self.phone,
            "avatar": self.avatar,
            "emailReminders": self.email_reminders,
            "dailyReminder": self.daily_reminder,
            "weeklySummary": self.weekly_summary,
            "timezone": self.timezone,
            "weekStart": self.week_start,
            "themePreference": self.theme_preference,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
