"""
Request bodies. Fields are snake_case in Python and camelCase on the wire.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- auth ---

class SignupIn(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

class LoginIn(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

class ChangePasswordIn(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None

class ForgotPasswordIn(CamelModel):
    email: Optional[str] = None

class ResetPasswordIn(CamelModel):
    token: Optional[str] = None
    new_password: Optional[str] = None


# --- profile ---

class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    email_reminders: Optional[bool] = None
    daily_reminder: Optional[bool] = None
    weekly_summary: Optional[bool] = None
    timezone: Optional[str] = None
    week_start: Optional[str] = None
    theme_preference: Optional[str] = None


# --- habits ---

class HabitCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[str] = None
    time_of_day: Optional[str] = None
    reminder_time: Optional[str] = None
    reminder_enabled: bool = False

    @property
    def effective_reminder_time(self) -> Optional[str]:
        return self.reminder_time or self.time_of_day


class HabitUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[str] = None
    time_of_day: Optional[str] = None
    reminder_time: Optional[str] = None
    reminder_enabled: Optional[bool] = None

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        time_of_day = data.pop("time_of_day", None)
        if "reminder_time" not in data and "time_of_day" in self.model_fields_set:
            data["reminder_time"] = time_of_day
        if data.get("reminder_enabled") is None:
            data.pop("reminder_enabled", None)
        return data


# --- support / ai ---

class SupportIn(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    category: Optional[str] = None
    message: Optional[str] = None

class CoachIn(CamelModel):
    message: Optional[str] = None
