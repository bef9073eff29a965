from __future__ import annotations
from zoneinfo import available_timezones

WEEK_STARTS = ("monday", "sunday")
THEME_PREFERENCES = ("light", "dark", "system")

def is_valid_timezone(tz: str) -> bool:
    return tz in available_timezones()

def is_valid_week_start(value: str) -> bool:
    return value in WEEK_STARTS

def is_valid_theme(value: str) -> bool:
    return value in THEME_PREFERENCES
