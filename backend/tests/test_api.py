# tests/test_api.py
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.database import db_helper
from app.models.base import utcnow
from main import app

PASSWORD = "calmMind42"


@pytest.fixture
async def client(db):
    async def override_session():
        async with db.session_factory() as s:
            yield s

    app.dependency_overrides[db_helper.session_getter] = override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def register(client, username):
    response = await client.post("/api/v1/auth/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "password": PASSWORD,
    })
    assert response.status_code == 201, response.text
    return response.json()


async def login(client, username):
    response = await client.post("/api/v1/auth/login", data={
        "username": f"{username}@example.com",
        "password": PASSWORD,
    })
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def create_meditation(client, headers, duration=10):
    response = await client.post("/api/v1/meditations/", headers=headers, json={
        "title": "Body Scan",
        "duration": duration,
        "type": "guided",
        "category": "breathing",
    })
    assert response.status_code == 201, response.text
    return response.json()


async def test_register_login_and_me(client):
    user = await register(client, "mira")
    headers = await login(client, "mira")

    me = await client.get("/api/v1/auth/me", headers=headers)

    assert me.status_code == 200
    assert me.json()["id"] == user["id"]
    assert me.json()["username"] == "mira"


async def test_register_duplicate_and_bad_login(client):
    await register(client, "mira")
    duplicate = await client.post("/api/v1/auth/register", json={
        "username": "mira2", "email": "mira@example.com", "password": PASSWORD,
    })
    assert duplicate.status_code == 400

    wrong = await client.post("/api/v1/auth/login", data={"username": "mira@example.com", "password": "wrong123x"})
    assert wrong.status_code == 401


async def test_protected_routes_need_token(client):
    assert (await client.get("/api/v1/achievements/points")).status_code == 401
    assert (await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"})).status_code == 401


async def test_registration_seeds_achievements(client):
    await register(client, "mira")
    headers = await login(client, "mira")

    achievements = (await client.get("/api/v1/achievements/", headers=headers)).json()
    points = (await client.get("/api/v1/achievements/points", headers=headers)).json()

    assert len(achievements) > 0
    assert all(a["progress"] == 0 and not a["completed"] for a in achievements)
    assert points == {"total": 0}


async def test_personal_session_flow(client):
    await register(client, "mira")
    headers = await login(client, "mira")
    meditation = await create_meditation(client, headers)

    started = await client.post("/api/v1/sessions/", headers=headers, json={
        "meditation_id": meditation["id"], "duration": 10, "mood_before": "anxious",
    })
    assert started.status_code == 201
    session_id = started.json()["id"]

    active = await client.get("/api/v1/sessions/active", headers=headers)
    assert active.json()["id"] == session_id

    await client.post(f"/api/v1/sessions/{session_id}/interrupt", headers=headers)
    completed = await client.post(f"/api/v1/sessions/{session_id}/complete", headers=headers, json={
        "duration_completed": 10, "mood_after": "calm",
    })
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"

    history = (await client.get("/api/v1/analytics/history", headers=headers)).json()
    assert history["total_sessions"] == 1
    assert history["sessions"][0]["focus_score"] == 9

    mood = (await client.get("/api/v1/analytics/mood-stats", headers=headers)).json()
    assert mood["improvement_rate"] == 100

    points = (await client.get("/api/v1/achievements/points", headers=headers)).json()
    assert points["total"] >= 10


async def test_error_response_shape(client):
    await register(client, "mira")
    headers = await login(client, "mira")

    missing = await client.get("/api/v1/meditations/999")
    assert missing.status_code == 404
    body = missing.json()
    assert body["detail"] == "Meditation not found"
    assert body["error"] == "NotFoundError"
    assert "timestamp" in body

    bad_page = await client.get("/api/v1/analytics/history?page=0", headers=headers)
    assert bad_page.status_code in (400, 422)


async def test_group_session_endpoints(client):
    for name in ("host", "alice", "bob", "carol"):
        await register(client, name)
    host, alice, bob, carol = [await login(client, n) for n in ("host", "alice", "bob", "carol")]
    meditation = await create_meditation(client, host)

    created = await client.post("/api/v1/group-sessions/", headers=host, json={
        "meditation_id": meditation["id"],
        "title": "Sunset Sit",
        "scheduled_time": (utcnow() + timedelta(hours=1)).isoformat(),
        "duration": 15,
        "max_participants": 2,
    })
    assert created.status_code == 201, created.text
    group_id = created.json()["id"]

    assert (await client.post(f"/api/v1/group-sessions/{group_id}/join", headers=alice)).status_code == 200
    assert (await client.post(f"/api/v1/group-sessions/{group_id}/join", headers=bob)).status_code == 200
    full = await client.post(f"/api/v1/group-sessions/{group_id}/join", headers=carol)
    assert full.status_code == 409
    assert full.json()["detail"] == "Session is full"

    upcoming = (await client.get("/api/v1/group-sessions/upcoming", headers=carol)).json()
    assert [g["id"] for g in upcoming] == [group_id]
    assert len(upcoming[0]["participants"]) == 2

    posted = await client.post(f"/api/v1/group-sessions/{group_id}/messages", headers=alice, json={"content": "hi"})
    assert posted.status_code == 201
    denied = await client.post(f"/api/v1/group-sessions/{group_id}/messages", headers=carol, json={"content": "hi"})
    assert denied.status_code == 403

    forbidden = await client.post(f"/api/v1/group-sessions/{group_id}/start", headers=alice)
    assert forbidden.status_code == 403
    started = await client.post(f"/api/v1/group-sessions/{group_id}/start", headers=host)
    assert started.json()["status"] == "in_progress"

    for user in (alice, bob):
        done = await client.post(f"/api/v1/group-sessions/{group_id}/complete", headers=user, json={
            "duration_completed": 15, "mood_before": "stressed", "mood_after": "peaceful",
        })
        assert done.status_code == 200, done.text
    assert done.json()["status"] == "completed"

    messages = (await client.get(f"/api/v1/group-sessions/{group_id}/messages", headers=alice)).json()
    assert messages[0]["type"] == "system"
    assert messages[0]["content"] == "Session ended"

    cancel = await client.post(f"/api/v1/group-sessions/{group_id}/cancel", headers=host)
    assert cancel.status_code == 409


async def test_friend_endpoints(client):
    alice = await register(client, "alice")
    bob = await register(client, "bob")
    alice_h, bob_h = await login(client, "alice"), await login(client, "bob")

    request = await client.post("/api/v1/friends/requests", headers=alice_h, json={"recipient_id": bob["id"]})
    assert request.status_code == 201

    pending = (await client.get("/api/v1/friends/requests", headers=bob_h)).json()
    assert [r["requester_id"] for r in pending] == [alice["id"]]

    accepted = await client.post(f"/api/v1/friends/requests/{request.json()['id']}/accept", headers=bob_h)
    assert accepted.json()["status"] == "accepted"

    friends = (await client.get("/api/v1/friends/", headers=alice_h)).json()
    assert [f["username"] for f in friends] == ["bob"]

    assert (await client.delete(f"/api/v1/friends/{bob['id']}", headers=alice_h)).status_code == 204
    assert (await client.get("/api/v1/friends/", headers=alice_h)).json() == []
