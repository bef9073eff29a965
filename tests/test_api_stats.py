import pytest
from datetime import timedelta

from habitflow.api.deps import get_now
from habitflow.main import app
from conftest import FIXED_NOW


async def setup_habits(client, headers):
    ids = []
    for title in ("Read", "Walk"):
        resp = await client.post("/api/habits/create", json={"title": title}, headers=headers)
        ids.append(resp.json()["habit"]["id"])
    return ids


async def check_in(client, headers, habit_id, days_ago=0):
    app.dependency_overrides[get_now] = lambda: FIXED_NOW - timedelta(days=days_ago)
    resp = await client.post(f"/api/habits/{habit_id}/check-in", headers=headers)
    assert resp.status_code == 200, resp.text
    app.dependency_overrides[get_now] = lambda: FIXED_NOW


@pytest.mark.asyncio
async def test_overview_without_habits(client, auth):
    headers = await auth()
    resp = await client.get("/api/stats/overview", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "totalHabits": 0,
        "todaysCompletions": 0,
        "completionRate": 0,
        "bestStreak": 0,
        "currentStreak": 0,
    }


@pytest.mark.asyncio
async def test_overview_counts(client, auth):
    headers = await auth()
    read, walk = await setup_habits(client, headers)
    await check_in(client, headers, read)
    await check_in(client, headers, read, days_ago=1)
    await check_in(client, headers, walk, days_ago=1)
    await check_in(client, headers, walk, days_ago=5)

    data = (await client.get("/api/stats/overview", headers=headers)).json()["data"]
    assert data["totalHabits"] == 2
    assert data["todaysCompletions"] == 1
    # 4 habit-days out of 2 habits * 30 days
    assert data["completionRate"] == 7
    assert data["bestStreak"] == 2
    assert data["currentStreak"] == 2


@pytest.mark.asyncio
async def test_archived_habits_leave_the_stats(client, auth):
    headers = await auth()
    read, walk = await setup_habits(client, headers)
    await check_in(client, headers, read)
    await check_in(client, headers, walk)
    await client.delete(f"/api/habits/delete/{walk}", headers=headers)

    data = (await client.get("/api/stats/overview", headers=headers)).json()["data"]
    assert data["totalHabits"] == 1
    assert data["todaysCompletions"] == 1


@pytest.mark.asyncio
async def test_weekly_has_seven_buckets(client, auth):
    headers = await auth()
    read, walk = await setup_habits(client, headers)
    await check_in(client, headers, read)            # Wednesday
    await check_in(client, headers, walk)
    await check_in(client, headers, read, days_ago=2)  # Monday
    await check_in(client, headers, read, days_ago=7)  # last week

    resp = await client.get("/api/stats/weekly", headers=headers)
    assert resp.status_code == 200
    week = resp.json()["data"]
    assert [b["label"] for b in week] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert [b["value"] for b in week] == [1, 0, 2, 0, 0, 0, 0]


@pytest.mark.asyncio
async def test_top_habits(client, auth):
    headers = await auth()
    read, walk = await setup_habits(client, headers)
    await check_in(client, headers, walk)
    await check_in(client, headers, walk, days_ago=1)
    await check_in(client, headers, read, days_ago=3)

    data = (await client.get("/api/stats/top-habits", headers=headers)).json()["data"]
    assert [(h["title"], h["totalCompletions"]) for h in data] == [("Walk", 2), ("Read", 1)]
    assert data[0]["lastCompleted"] == "2024-01-10"

    data = (await client.get("/api/stats/top-habits?limit=1", headers=headers)).json()["data"]
    assert len(data) == 1


@pytest.mark.asyncio
async def test_calendar_month(client, auth):
    headers = await auth()
    read, walk = await setup_habits(client, headers)
    await check_in(client, headers, read)
    await check_in(client, headers, walk)
    await check_in(client, headers, read, days_ago=9)   # Jan 1
    await check_in(client, headers, read, days_ago=10)  # Dec 31

    resp = await client.get("/api/calendar/2024/1", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == [{"day": 1, "total": 1}, {"day": 10, "total": 2}]

    resp = await client.get("/api/calendar/2023/12", headers=headers)
    assert resp.json()["data"] == [{"day": 31, "total": 1}]

    resp = await client.get("/api/calendar/2024/2", headers=headers)
    assert resp.json()["data"] == []


@pytest.mark.asyncio
async def test_calendar_rejects_bad_month(client, auth):
    headers = await auth()
    resp = await client.get("/api/calendar/2024/13", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["success"] is False
