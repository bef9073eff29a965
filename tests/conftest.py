import os
import sys
from datetime import datetime, timezone
from unittest.mock import AsyncMock

# Make the repository root importable without installing the package
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENABLE_REMINDER_SCHEDULER", "false")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("DEFAULT_TIMEZONE", "Asia/Kolkata")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from habitflow.models.users import User
from habitflow.models.habit import Habit, HabitCompletion  # noqa: F401
from habitflow.models.support import SupportMessage  # noqa: F401
from habitflow.security.tokens import hash_password

# Wednesday 2024-01-10, 07:00 UTC
FIXED_NOW = datetime(2024, 1, 10, 7, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


async def make_user(session, email="ana@example.com", name="Ana", tz="UTC", **kwargs) -> User:
    user = User(name=name, email=email, password_hash=hash_password("secret123"), timezone=tz, **kwargs)
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def dispatcher():
    d = AsyncMock()
    d.send = AsyncMock(return_value=True)
    return d


@pytest_asyncio.fixture
async def client(session_factory, dispatcher):
    from habitflow.main import app
    from habitflow.db import session_dependency
    from habitflow.api.deps import get_dispatcher, get_now

    async def _session_override():
        session = session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    app.dependency_overrides[session_dependency] = _session_override
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_now] = lambda: FIXED_NOW

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def signup(client, email="ana@example.com", name="Ana", password="secret123") -> dict:
    resp = await client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return {"Authorization": f"Bearer {data['token']}", "user_id": data["user"]["id"]}


@pytest.fixture
def auth(client):
    """Sign up a user whose timezone is UTC and return its auth headers."""
    async def _auth(email="ana@example.com", tz="UTC"):
        info = await signup(client, email=email)
        headers = {"Authorization": info["Authorization"]}
        resp = await client.put("/api/profile", json={"timezone": tz}, headers=headers)
        assert resp.status_code == 200, resp.text
        return headers
    return _auth
