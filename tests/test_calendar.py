from datetime import datetime


async def _connect(client, code="ok"):
    r = await client.get("/api/auth/google/callback", params={"code": code})
    assert r.status_code == 303
    return r.headers["location"]


async def test_auth_url(login):
    alice = await login("alice")
    r = await alice.get("/api/auth/google")
    assert r.status_code == 200
    assert r.json()["authUrl"].endswith("redirect_uri=http://testserver/api/auth/google/callback")


async def test_auth_url_requires_login(anon):
    assert (await anon.get("/api/auth/google")).status_code == 401


async def test_callback_links_calendar(login):
    alice = await login("alice")
    assert (await alice.get("/users/me")).json()["calendar_connected"] is False

    assert await _connect(alice) == "/settings?success=Calendar%20connected"
    assert (await alice.get("/users/me")).json()["calendar_connected"] is True


async def test_callback_failures_redirect(login, anon):
    alice = await login("alice")
    assert await _connect(anon) == "/auth?error=Not%20authenticated"
    assert await _connect(alice, code="bad") == "/settings?error=Authorization%20failed"
    assert await _connect(alice, code="no-refresh") == "/settings?error=No%20refresh%20token%20received"
    r = await alice.get("/api/auth/google/callback")
    assert r.headers["location"] == "/settings?error=Authorization%20failed"
    assert (await alice.get("/users/me")).json()["calendar_connected"] is False


async def test_event_mirrored_when_connected(login, calendar):
    alice = await login("alice")
    await _connect(alice)
    r = await alice.post(
        "/api/events",
        json={"title": "Dentist", "startDate": "2025-03-10T09:00:00Z", "location": "Main St"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["googleEventId"] == "g-1"

    token, sent = calendar.inserted[0]
    assert token == "refresh-ok"
    body = sent.to_google()
    assert body["summary"] == "Dentist"
    assert body["start"]["dateTime"] == datetime(2025, 3, 10, 9).isoformat()
    assert body["end"]["dateTime"] == datetime(2025, 3, 10, 10).isoformat()
    assert body["location"] == "Main St"


async def test_no_mirror_without_link(login, calendar):
    alice = await login("alice")
    ev = (await alice.post("/api/events", json={"title": "x", "startDate": "2025-03-10T09:00:00Z"})).json()
    assert ev["googleEventId"] is None
    assert calendar.inserted == []


async def test_failed_mirror_stores_nothing(login, calendar):
    alice = await login("alice")
    await _connect(alice)
    calendar.fail = True
    r = await alice.post("/api/events", json={"title": "x", "startDate": "2025-03-10T09:00:00Z"})
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to create calendar event"
    assert (await alice.get("/api/events")).json() == []


async def test_calendar_endpoints_need_link(login):
    alice = await login("alice")
    r = await alice.get("/api/calendar/events")
    assert r.status_code == 400
    assert r.json()["detail"] == "Google Calendar not connected"
    r = await alice.post("/api/calendar/events", json={"title": "x", "start": "2025-03-10T09:00:00Z"})
    assert r.status_code == 400


async def test_upcoming_and_create_via_calendar(login, calendar):
    alice = await login("alice")
    await _connect(alice)

    r = await alice.get("/api/calendar/events")
    assert r.status_code == 200
    assert r.json() == [{"id": "g-upcoming", "summary": "Dentist"}]

    r = await alice.post(
        "/api/calendar/events",
        json={"title": "Recital", "start": "2025-04-01T18:00:00Z", "end": "2025-04-01T19:30:00Z"},
    )
    assert r.status_code == 201, r.text
    ev = r.json()
    assert ev["googleEventId"] == "g-1"
    assert ev["endDate"] == "2025-04-01T19:30:00"
    assert [e["id"] for e in (await alice.get("/api/events")).json()] == [ev["id"]]

    calendar.fail = True
    assert (await alice.get("/api/calendar/events")).status_code == 500
