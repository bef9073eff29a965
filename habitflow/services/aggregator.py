"""
Read-only metrics over completion events.

Everything here is pure: callers load the events of a user's active habits,
pick "today" with today_key() and pass both in.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional

from ..utils.days import DayKey, WEEKDAY_LABELS, week_bounds, window_start


@dataclass(frozen=True)
class CompletionEvent:
    habit_id: int
    day: Optional[DayKey]
    count: int = 1


@dataclass(frozen=True)
class HabitTotal:
    habit_id: int
    total: int
    last_completed: DayKey


def _valid(events: Iterable[CompletionEvent]) -> List[CompletionEvent]:
    # rows with a missing day are skipped, not fatal
    return [e for e in events if isinstance(e.day, date)]


def distinct_days(events: Iterable[CompletionEvent]) -> List[DayKey]:
    return sorted({e.day for e in _valid(events)})


def todays_completion_count(events: Iterable[CompletionEvent], today: DayKey) -> int:
    """Number of distinct habits checked in on today."""
    return len({e.habit_id for e in _valid(events) if e.day == today})


def rolling_window_total(events: Iterable[CompletionEvent], today: DayKey, window_days: int = 30) -> int:
    """Completions (habit-days) in the window_days ending on today, both ends inclusive."""
    start = window_start(today, window_days)
    return sum(1 for e in _valid(events) if start <= e.day <= today)


def completion_rate(
    events: Iterable[CompletionEvent],
    today: DayKey,
    active_habits: int,
    window_days: int = 30,
) -> float:
    """Share of possible habit-days completed in the window; 0.0 without habits."""
    if active_habits <= 0 or window_days <= 0:
        return 0.0
    return rolling_window_total(events, today, window_days) / (active_habits * window_days)


def rate_percent(rate: float) -> int:
    """Integer percentage, halves rounded up."""
    return int(rate * 100 + 0.5)


def best_streak(days: Iterable[date]) -> int:
    """Length of the longest run of calendar-consecutive days."""
    ordered = sorted(set(d for d in days if isinstance(d, date)))
    best = 0
    current = 0
    prev: Optional[date] = None
    for day in ordered:
        if prev is not None and day - prev == timedelta(days=1):
            current += 1
        else:
            current = 1
        best = max(best, current)
        prev = day
    return best


def current_streak(days: Iterable[date], today: DayKey) -> int:
    """
    Length of the run ending today. A run ending yesterday still counts
    since today may not be checked in yet.
    """
    day_set = set(d for d in days if isinstance(d, date))
    if today in day_set:
        cursor = today
    elif today - timedelta(days=1) in day_set:
        cursor = today - timedelta(days=1)
    else:
        return 0
    streak = 0
    while cursor in day_set:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def weekly_histogram(events: Iterable[CompletionEvent], today: DayKey, week_start: str = "monday") -> List[dict]:
    """
    Completion counts for the week containing today, always listed Mon..Sun.
    week_start only decides which seven days make up "this week".
    """
    first, last = week_bounds(today, week_start)
    buckets = [0] * 7
    for e in _valid(events):
        if first <= e.day <= last:
            buckets[e.day.weekday()] += e.count
    return [{"label": label, "value": value} for label, value in zip(WEEKDAY_LABELS, buckets)]


def top_habits(events: Iterable[CompletionEvent], limit: int = 5) -> List[HabitTotal]:
    """Habits by total count, most recently completed first on ties."""
    totals: dict[int, int] = {}
    last: dict[int, DayKey] = {}
    for e in _valid(events):
        totals[e.habit_id] = totals.get(e.habit_id, 0) + e.count
        if e.habit_id not in last or e.day > last[e.habit_id]:
            last[e.habit_id] = e.day

    ranked = sorted(
        (HabitTotal(habit_id=h, total=t, last_completed=last[h]) for h, t in totals.items()),
        key=lambda ht: (ht.total, ht.last_completed),
        reverse=True,
    )
    return ranked[:max(limit, 0)]


def calendar_month(events: Iterable[CompletionEvent], year: int, month: int) -> List[tuple[int, int]]:
    """(day_of_month, total) for days of year/month with completions, day ascending."""
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    per_day: dict[int, int] = {}
    for e in _valid(events):
        if e.day.year == year and e.day.month == month:
            per_day[e.day.day] = per_day.get(e.day.day, 0) + e.count
    return [(day, total) for day, total in sorted(per_day.items()) if total > 0]
