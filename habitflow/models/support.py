from typing import Optional, TYPE_CHECKING
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, Text


if TYPE_CHECKING:
    from .users import User

SUPPORT_CATEGORIES = ("Bug or issue", "Feature request", "Question", "Other")


class SupportMessage(SQLModel, table=True):
    """
    Messages sent through the in-app support form.
    """
    __tablename__ = "support_messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, index=True, foreign_key="users.id")
    user: Optional["User"] = Relationship(back_populates="support_messages")

    name: str = Field(max_length=200)
    email: str = Field(max_length=320)
    category: str = Field(default="Other", max_length=40)
    message: str = Field(sa_column=Column(Text, nullable=False))

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user": self.user_id,
            "name": self.name,
            "email": self.email,
            "category": self.category,
            "message": self.message,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
