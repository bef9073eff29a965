import pytest
from datetime import date, datetime, timedelta, timezone
from sqlmodel import select

from habitflow.models.habit import HabitCompletion
from habitflow.services.habit_service import HabitService
from habitflow.services.errors import NotFoundError
from conftest import make_user

NOW = datetime(2024, 1, 10, 7, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_check_in_is_idempotent_per_day(db_session):
    user = await make_user(db_session)
    habit = await HabitService.create_habit(db_session, user.id, title="Read")
    await db_session.commit()

    _, created = await HabitService.check_in(db_session, user.id, habit.id, NOW, "UTC")
    await db_session.commit()
    assert created is True

    # later the same day
    _, created = await HabitService.check_in(db_session, user.id, habit.id, NOW + timedelta(hours=10), "UTC")
    await db_session.commit()
    assert created is False

    rows = (await db_session.execute(select(HabitCompletion).where(HabitCompletion.habit_id == habit.id))).scalars().all()
    assert len(rows) == 1
    assert rows[0].day == date(2024, 1, 10)
    assert rows[0].count == 1


@pytest.mark.asyncio
async def test_check_in_uses_owner_local_day(db_session):
    user = await make_user(db_session, tz="Asia/Kolkata")
    habit = await HabitService.create_habit(db_session, user.id, title="Stretch")
    await db_session.commit()

    # 20:00 UTC is already the next day in Kolkata
    late = datetime(2024, 1, 10, 20, 0, tzinfo=timezone.utc)
    await HabitService.check_in(db_session, user.id, habit.id, late, user.timezone)
    await db_session.commit()

    days = await HabitService.completed_days(db_session, [habit.id])
    assert days[habit.id] == [date(2024, 1, 11)]


@pytest.mark.asyncio
async def test_create_habit_validates_input(db_session):
    user = await make_user(db_session)
    with pytest.raises(ValueError):
        await HabitService.create_habit(db_session, user.id, title="   ")
    with pytest.raises(ValueError):
        await HabitService.create_habit(db_session, user.id, title="Run", frequency="hourly")
    with pytest.raises(ValueError):
        await HabitService.create_habit(db_session, user.id, title="Run", reminder_time="7pm")

    habit = await HabitService.create_habit(db_session, user.id, title=" Run ", reminder_time="7:30", reminder_enabled=True)
    assert habit.title == "Run"
    assert habit.reminder_time == "07:30"
    assert habit.reminder_enabled is True
    assert habit.active is True


@pytest.mark.asyncio
async def test_archived_habit_is_hidden(db_session):
    user = await make_user(db_session)
    habit = await HabitService.create_habit(db_session, user.id, title="Meditate")
    await db_session.commit()

    await HabitService.archive_habit(db_session, user.id, habit.id)
    await db_session.commit()

    assert await HabitService.list_habits(db_session, user.id) == []
    assert len(await HabitService.list_habits(db_session, user.id, active_only=False)) == 1
    with pytest.raises(NotFoundError):
        await HabitService.get_habit(db_session, user.id, habit.id)
    with pytest.raises(NotFoundError):
        await HabitService.check_in(db_session, user.id, habit.id, NOW, "UTC")


@pytest.mark.asyncio
async def test_habit_of_other_user_is_not_found(db_session):
    owner = await make_user(db_session)
    other = await make_user(db_session, email="bo@example.com", name="Bo")
    habit = await HabitService.create_habit(db_session, owner.id, title="Walk")
    await db_session.commit()

    with pytest.raises(NotFoundError):
        await HabitService.get_habit(db_session, other.id, habit.id)
    with pytest.raises(NotFoundError):
        await HabitService.update_habit(db_session, other.id, habit.id, {"title": "Mine now"})


@pytest.mark.asyncio
async def test_changing_reminder_time_keeps_last_reminder_date(db_session):
    user = await make_user(db_session)
    habit = await HabitService.create_habit(db_session, user.id, title="Water", reminder_time="07:00", reminder_enabled=True)
    habit.last_reminder_date = date(2024, 1, 10)
    await db_session.commit()

    updated = await HabitService.update_habit(db_session, user.id, habit.id, {"reminder_time": "8:00"})
    assert updated.reminder_time == "08:00"
    assert updated.last_reminder_date == date(2024, 1, 10)

    updated = await HabitService.update_habit(db_session, user.id, habit.id, {"description": "2 litres"})
    assert updated.description == "2 litres"
    assert updated.reminder_time == "08:00"


@pytest.mark.asyncio
async def test_habit_stats_streaks(db_session):
    user = await make_user(db_session)
    habit = await HabitService.create_habit(db_session, user.id, title="Journal")
    await db_session.commit()

    for days_ago in (0, 1, 2, 5, 6):
        await HabitService.check_in(db_session, user.id, habit.id, NOW - timedelta(days=days_ago), "UTC")
    await db_session.commit()

    stats = await HabitService.get_habit_stats(db_session, user.id, habit.id, date(2024, 1, 10))
    assert stats["currentStreak"] == 3
    assert stats["longestStreak"] == 3
    assert stats["totalCheckIns"] == 5
    assert stats["lastCompleted"] == "2024-01-10"
