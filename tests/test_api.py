"""
HTTP tests for the kvjournal API, running the real app on in-memory storage.
"""

import time

import jwt
import pytest
from fastapi.testclient import TestClient

from kvjournal.modules.auth import TokenCodec

from conftest import TEST_SECRET, digest

pytestmark = pytest.mark.integration


@pytest.fixture
def entry_clock(client, clock):
    """Drive entry timestamps from the fake clock so saves never share a millisecond."""
    import kvjournal.main as main

    main.entry_module._clock = clock
    return clock


def _register(client, username="alice", password="hunter22"):
    return client.post("/register", json={"username": username, "password": digest(password)})


def _login(client, username="alice", password="hunter22"):
    response = client.post("/login", json={"username": username, "password": digest(password)})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def test_journal_scenario(client, entry_clock):
    """Test register, login, save, list and delete end to end."""
    assert _register(client).status_code == 201
    headers = _login(client)

    first = client.post("/entries", json={"content": "first", "tags": ["x"]}, headers=headers)
    entry_clock.advance(1)
    second = client.post(
        "/entries", json={"title": "T", "content": "  second  ", "mood": "😀"}, headers=headers
    )
    assert first.status_code == 201
    assert second.json() == {"success": True}

    entries = client.get("/entries", headers=headers).json()
    assert [e["content"] for e in entries] == ["second", "first"]
    assert entries[0]["title"] == "T"
    assert entries[0]["mood"] == "😀"
    assert entries[1]["tags"] == ["x"]
    assert entries[0]["timestamp"] - entries[1]["timestamp"] == 1000

    deleted = client.delete(f"/entries/{entries[1]['timestamp']}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}

    remaining = client.get("/entries", headers=headers).json()
    assert [e["content"] for e in remaining] == ["second"]


def test_register_response_and_duplicate(client):
    response = _register(client)
    assert response.status_code == 201
    assert response.json() == {"success": True}

    duplicate = _register(client, password="different")
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "Username already taken"}

    # The original password still works
    _login(client)


@pytest.mark.parametrize(
    "body,message",
    [
        ({}, "Username and password are required"),
        ({"username": "al", "password": digest("pw")}, "Username must be at least 3 characters long"),
        (
            {"username": "al/ice", "password": digest("pw")},
            "Username may only contain letters, numbers, underscores and hyphens",
        ),
        ({"username": "alice", "password": "plaintext"}, "Password must be a SHA-256 hex digest"),
    ],
)
def test_register_validation_messages(client, body, message):
    response = client.post("/register", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": message}


def test_login_token_carries_username_and_lifetime(client):
    _register(client)

    token = client.post(
        "/login", json={"username": "alice", "password": digest("hunter22")}
    ).json()["token"]

    claims = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])
    assert claims["username"] == "alice"
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_login_failures(client):
    _register(client)

    wrong = client.post("/login", json={"username": "alice", "password": digest("nope")})
    unknown = client.post("/login", json={"username": "bob", "password": digest("hunter22")})
    missing = client.post("/login", json={"username": "alice"})

    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid credentials"}
    assert unknown.status_code == 401
    assert unknown.json() == wrong.json()
    assert missing.status_code == 400
    assert missing.json() == {"error": "Username and password are required"}


def test_login_without_secret_is_500(app_env):
    app_env.delenv("JWT_SECRET")
    from kvjournal.main import app

    with TestClient(app) as client:
        assert _register(client).status_code == 201
        response = client.post(
            "/login", json={"username": "alice", "password": digest("hunter22")}
        )
        entries = client.get("/entries", headers={"Authorization": "Bearer a.b.c"})

    assert response.status_code == 500
    assert response.json() == {"error": "Server misconfigured"}
    assert entries.status_code == 500


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Token abc"},
        {"Authorization": "Bearer "},
        {"Authorization": "Bearer not.a.token"},
    ],
)
def test_entries_require_bearer_token(client, headers):
    for response in (
        client.get("/entries", headers=headers),
        client.post("/entries", json={"content": "x"}, headers=headers),
        client.delete("/entries/1", headers=headers),
    ):
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}


def test_expired_token_rejected(client):
    _register(client)
    now = int(time.time())
    token = TokenCodec(TEST_SECRET).encode(
        {"username": "alice", "iat": now - 2 * 86400, "exp": now - 86400}
    )

    response = client.get("/entries", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_signed_with_other_secret_rejected(client):
    now = int(time.time())
    token = TokenCodec("another-deployment").encode(
        {"username": "alice", "iat": now, "exp": now + 3600}
    )

    response = client.get("/entries", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_save_entry_requires_content(client):
    _register(client)
    headers = _login(client)

    response = client.post("/entries", json={"title": "empty", "content": "   "}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Content is required"}
    assert client.get("/entries", headers=headers).json() == []


def test_entries_are_isolated_between_users(client):
    _register(client, "alice")
    _register(client, "bob")
    alice = _login(client, "alice")
    bob = _login(client, "bob")

    client.post("/entries", json={"content": "alice only"}, headers=alice)
    timestamp = client.get("/entries", headers=alice).json()[0]["timestamp"]

    assert client.get("/entries", headers=bob).json() == []
    response = client.delete(f"/entries/{timestamp}", headers=bob)
    assert response.status_code == 404
    assert len(client.get("/entries", headers=alice).json()) == 1


def test_delete_errors(client):
    _register(client)
    headers = _login(client)

    missing = client.delete("/entries/12345", headers=headers)
    no_timestamp = client.delete("/entries", headers=headers)

    assert missing.status_code == 404
    assert missing.json() == {"error": "Entry not found"}
    assert no_timestamp.status_code == 400
    assert no_timestamp.json() == {"error": "Entry timestamp required"}


def test_delete_accepts_timestamp_query_parameter(client):
    _register(client)
    headers = _login(client)
    client.post("/entries", json={"content": "x"}, headers=headers)
    timestamp = client.get("/entries", headers=headers).json()[0]["timestamp"]

    response = client.delete("/entries", params={"timestamp": timestamp}, headers=headers)

    assert response.status_code == 200
    assert client.get("/entries", headers=headers).json() == []


def test_invalid_json_body(client):
    response = client.post(
        "/register", content="not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request body")


def test_wrongly_typed_field(client):
    _register(client)
    headers = _login(client)

    response = client.post("/entries", json={"content": "x", "tags": "not-a-list"}, headers=headers)

    assert response.status_code == 400
    assert "tags" in response.json()["error"]


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert "error" in response.json()


def test_cors_preflight(client):
    response = client.options(
        "/entries",
        headers={
            "Origin": "https://journal.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]


def test_health_endpoints(client):
    assert client.get("/healthz").json() == {"status": "ok"}

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["storage"] == "connected"


def test_health_reports_unreachable_storage(client, monkeypatch):
    import kvjournal.main as main

    async def failing_ping():
        return False

    monkeypatch.setattr(main.kv_store, "ping", failing_ping)

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["storage"] == "disconnected"
