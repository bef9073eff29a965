import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from habitflow.llm import coach


@pytest.mark.asyncio
async def test_support_message_roundtrip(client, auth):
    headers = await auth()

    resp = await client.post(
        "/api/support",
        json={"category": "Question", "message": "How do reminders work?"},
        headers=headers,
    )
    assert resp.status_code == 201
    msg = resp.json()["data"]
    assert msg["name"] == "Ana"
    assert msg["email"] == "ana@example.com"
    assert msg["category"] == "Question"

    await client.post("/api/support", json={"message": "Second"}, headers=headers)

    resp = await client.get("/api/support", headers=headers)
    assert [m["message"] for m in resp.json()["data"]] == ["Second", "How do reminders work?"]
    assert resp.json()["data"][0]["category"] == "Other"


@pytest.mark.asyncio
async def test_support_message_validation(client, auth):
    headers = await auth()
    resp = await client.post("/api/support", json={"message": "   "}, headers=headers)
    assert resp.status_code == 400

    resp = await client.post("/api/support", json={"message": "Hi", "category": "Complaint"}, headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_coach_passes_user_context(client, auth, monkeypatch):
    headers = await auth()
    created = await client.post("/api/habits/create", json={"title": "Read"}, headers=headers)
    await client.post(f"/api/habits/{created.json()['habit']['id']}/check-in", headers=headers)

    ask = AsyncMock(return_value="Keep going!")
    monkeypatch.setattr(coach, "ask_coach", ask)

    resp = await client.post("/api/ai/coach", json={"message": "  How am I doing? "}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "reply": "Keep going!"}
    ask.assert_awaited_once_with("How am I doing?", ["Read"], 1)


@pytest.mark.asyncio
async def test_coach_requires_message(client, auth, monkeypatch):
    headers = await auth()
    ask = AsyncMock()
    monkeypatch.setattr(coach, "ask_coach", ask)

    resp = await client.post("/api/ai/coach", json={"message": " "}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Message is required"
    ask.assert_not_awaited()


@pytest.mark.asyncio
async def test_coach_unavailable(client, auth, monkeypatch):
    headers = await auth()
    monkeypatch.setattr(coach, "ask_coach", AsyncMock(side_effect=coach.CoachUnavailableError("AI Coach is temporarily unavailable")))

    resp = await client.post("/api/ai/coach", json={"message": "Hello"}, headers=headers)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "AI Coach is temporarily unavailable"}


def fake_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.mark.asyncio
async def test_ask_coach_returns_model_reply(monkeypatch):
    create = AsyncMock(return_value=completion("  Try reading before bed.  "))
    monkeypatch.setattr(coach, "async_client", fake_client(create))

    reply = await coach.ask_coach("Tips?", ["Read", "Walk"], 12)
    assert reply == "Try reading before bed."

    messages = create.await_args.kwargs["messages"]
    assert messages[0]["role"] == "system"
    assert "Read, Walk" in messages[0]["content"]
    assert "Check-ins in the last 30 days: 12" in messages[0]["content"]
    assert "Tips?" in messages[1]["content"]


@pytest.mark.asyncio
async def test_ask_coach_falls_back_on_empty_reply(monkeypatch):
    monkeypatch.setattr(coach, "async_client", fake_client(AsyncMock(return_value=completion(""))))
    assert await coach.ask_coach("Hi", [], 0) == coach.FALLBACK_REPLY


@pytest.mark.asyncio
async def test_ask_coach_wraps_provider_errors(monkeypatch):
    monkeypatch.setattr(coach, "async_client", fake_client(AsyncMock(side_effect=RuntimeError("rate limited"))))
    with pytest.raises(coach.CoachUnavailableError):
        await coach.ask_coach("Hi", [], 0)
