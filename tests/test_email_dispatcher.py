import pytest
from unittest.mock import AsyncMock

from habitflow.notifications import email as email_module
from habitflow.notifications.email import EmailDispatcher


@pytest.mark.asyncio
async def test_unconfigured_dispatcher_drops_email(monkeypatch):
    send = AsyncMock()
    monkeypatch.setattr(email_module.aiosmtplib, "send", send)

    dispatcher = EmailDispatcher(host="")
    assert await dispatcher.send("ana@example.com", "Hi", "Body") is False
    send.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_builds_message(monkeypatch):
    send = AsyncMock()
    monkeypatch.setattr(email_module.aiosmtplib, "send", send)

    dispatcher = EmailDispatcher(host="smtp.example.com", port=2525, username="u", password="p", sender="bot@example.com")
    assert await dispatcher.send("ana@example.com", "Reminder: Read", "Time to read") is True

    send.assert_awaited_once()
    msg = send.await_args.args[0]
    assert msg["To"] == "ana@example.com"
    assert msg["From"] == "bot@example.com"
    assert msg["Subject"] == "Reminder: Read"
    assert "Time to read" in msg.get_content()
    kwargs = send.await_args.kwargs
    assert kwargs["hostname"] == "smtp.example.com"
    assert kwargs["port"] == 2525
    assert kwargs["timeout"] == email_module.SEND_TIMEOUT_SECONDS


@pytest.mark.asyncio
async def test_send_failure_is_reported_not_raised(monkeypatch):
    monkeypatch.setattr(email_module.aiosmtplib, "send", AsyncMock(side_effect=OSError("connection refused")))

    dispatcher = EmailDispatcher(host="smtp.example.com")
    assert await dispatcher.send("ana@example.com", "Hi", "Body") is False
