import os

os.environ.setdefault("SECRET", "test-secret-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx
import pytest

from familyhub.database import async_session_maker, engine, init_db
from familyhub.main import app
from familyhub.services.calendar_sync import get_calendar_client

PASSWORD = "correct-horse-battery"


class FakeCalendar:
    """Stands in for GoogleCalendarClient; records what would have been sent."""

    def __init__(self):
        self.inserted = []
        self.fail = False

    def authorization_url(self, redirect_uri):
        return f"https://accounts.example/o/oauth2/auth?redirect_uri={redirect_uri}"

    def exchange_code(self, code, redirect_uri):
        if code == "bad":
            raise RuntimeError("invalid_grant")
        if code == "no-refresh":
            return None
        return f"refresh-{code}"

    def list_upcoming(self, refresh_token, limit=10):
        if self.fail:
            raise RuntimeError("calendar unavailable")
        return [{"id": "g-upcoming", "summary": "Dentist"}]

    def insert_event(self, refresh_token, event):
        if self.fail:
            raise RuntimeError("calendar unavailable")
        self.inserted.append((refresh_token, event))
        return f"g-{len(self.inserted)}"


@pytest.fixture
async def store():
    """Fresh in-memory schema per test; disposing the engine drops the database."""
    await init_db()
    yield
    await engine.dispose()


@pytest.fixture
async def session(store):
    async with async_session_maker() as s:
        yield s


@pytest.fixture
def calendar():
    fake = FakeCalendar()
    app.dependency_overrides[get_calendar_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_calendar_client, None)


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


@pytest.fixture
async def anon(store, calendar):
    async with _client() as client:
        yield client


@pytest.fixture
async def login(store, calendar):
    """Factory: register + log in a user, returning a client holding its session cookie."""
    clients = []

    async def _login(username: str) -> httpx.AsyncClient:
        client = _client()
        clients.append(client)
        email = f"{username}@example.com"
        r = await client.post(
            "/auth/register",
            json={"email": email, "password": PASSWORD, "username": username, "name": username.title()},
        )
        assert r.status_code == 201, r.text
        r = await client.post("/auth/jwt/login", data={"username": email, "password": PASSWORD})
        assert r.status_code == 204, r.text
        client.user_id = r_id = (await client.get("/users/me")).json()["id"]
        assert r_id
        return client

    yield _login
    for c in clients:
        await c.aclose()


@pytest.fixture
async def family(login):
    """U1 (admin) and U2 (member) sharing family F1."""
    u1 = await login("alice")
    u2 = await login("bob")
    r = await u1.post("/api/families", json={"name": "The Smiths"})
    assert r.status_code == 201, r.text
    fid = r.json()["id"]
    r = await u1.post(f"/api/families/{fid}/members", json={"userId": u2.user_id, "role": "member"})
    assert r.status_code == 201, r.text
    return u1, u2, fid
