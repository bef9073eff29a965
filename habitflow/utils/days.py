"""
Day keys: the only way two timestamps are compared for "same day".

A DayKey is a calendar date in a user's timezone. Build one with
normalize_day() (or today_key()); never compare raw datetimes or strings.
"""
from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
from typing import NewType, Optional, Union
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from ..config import settings

DayKey = NewType("DayKey", date)

Timestamp = Union[datetime, date, str, None]

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def resolve_zone(tz_name: Optional[str]) -> ZoneInfo:
    """ZoneInfo for tz_name, falling back to DEFAULT_TIMEZONE when unknown."""
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return ZoneInfo(settings.DEFAULT_TIMEZONE)


def normalize_day(ts: Timestamp, tz_name: Optional[str] = None) -> Optional[DayKey]:
    """
    Map a timestamp to the local calendar day in tz_name.

    Aware datetimes are converted to the zone, naive ones are taken as UTC.
    Plain dates are already day-granular and pass through. ISO strings are
    parsed first. Anything unparsable returns None so callers can skip it.
    """
    if ts is None:
        return None
    if isinstance(ts, str):
        try:
            ts = datetime.fromisoformat(ts.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(ts, datetime):
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return DayKey(ts.astimezone(resolve_zone(tz_name)).date())
    if isinstance(ts, date):
        return DayKey(ts)
    return None


def today_key(now: datetime, tz_name: Optional[str] = None) -> DayKey:
    day = normalize_day(now, tz_name)
    assert day is not None
    return day


def local_hhmm(now: datetime, tz_name: Optional[str] = None) -> str:
    """Wall-clock minute of `now` in tz_name, as "HH:MM"."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(resolve_zone(tz_name)).strftime("%H:%M")


@lru_cache(maxsize=1)
def _known_zones() -> tuple[ZoneInfo, ...]:
    zones = []
    for name in sorted(available_timezones() | {"UTC", settings.DEFAULT_TIMEZONE}):
        try:
            zones.append(ZoneInfo(name))
        except (ZoneInfoNotFoundError, ValueError):
            continue
    return tuple(zones)


def current_slots(now: datetime) -> set[str]:
    """Every "HH:MM" that is the wall-clock minute of `now` in some known timezone."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return {now.astimezone(zone).strftime("%H:%M") for zone in _known_zones()}


def shift_day(day: DayKey, days: int) -> DayKey:
    return DayKey(day + timedelta(days=days))


def window_start(today: DayKey, window_days: int) -> DayKey:
    """First day of the inclusive window of window_days ending on today."""
    return shift_day(today, -(window_days - 1))


def week_bounds(day: DayKey, week_start: str = "monday") -> tuple[DayKey, DayKey]:
    """First and last day of the week containing day."""
    if week_start == "sunday":
        offset = (day.weekday() + 1) % 7
    else:
        offset = day.weekday()
    first = shift_day(day, -offset)
    return first, shift_day(first, 6)


def to_day_string(day: DayKey) -> str:
    return day.isoformat()
