"""Registration, login and profile endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session

from meetinghub.deps import get_storage
from meetinghub.main import create_app
from meetinghub.models.base import engine
from meetinghub.storage.memory import MemoryStorage
from meetinghub.storage.sql import SqlStorage

from conftest import auth_headers, register


# ── Register / login ──────────────────────────────────────────────────────────


def test_register_login_me_end_to_end(client):
    registered = register(client, "alice")
    assert "password" not in registered["user"]
    assert registered["user"]["fullName"] == "Alice Example"

    login = client.post("/api/login", json={"email": "alice@example.com", "password": "secret-pw"})
    assert login.status_code == 200
    body = login.json()
    claims = jwt.decode(body["token"], "test-secret-key", algorithms=["HS256"])
    assert claims["id"] == registered["user"]["id"]

    me = client.get("/api/me", headers=auth_headers(body["token"]))
    assert me.status_code == 200
    assert me.json() == registered["user"]


def test_register_duplicate_email_or_username_is_rejected(client):
    register(client, "alice")

    same_email = client.post(
        "/api/register",
        json={"username": "alice2", "password": "secret-pw", "fullName": "A", "email": "alice@example.com"},
    )
    assert same_email.status_code == 400
    assert same_email.json()["message"] == "Email is already registered"

    same_name = client.post(
        "/api/register",
        json={"username": "alice", "password": "secret-pw", "fullName": "A", "email": "other@example.com"},
    )
    assert same_name.status_code == 400


def test_register_validation_errors_are_400(client):
    response = client.post("/api/register", json={"username": "al", "password": "x", "email": "nope"})
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request data"
    assert body["errors"]


def test_login_with_wrong_password_is_401(client):
    register(client, "alice")
    response = client.post("/api/login", json={"email": "alice@example.com", "password": "wrong-pw"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_login_unknown_email_is_401(client):
    response = client.post("/api/login", json={"email": "ghost@example.com", "password": "secret-pw"})
    assert response.status_code == 401


# ── Bearer auth ───────────────────────────────────────────────────────────────


def test_missing_token_is_401(client):
    assert client.get("/api/me").status_code == 401
    assert client.get("/api/meetings").status_code == 401


def test_invalid_token_is_403(client):
    response = client.get("/api/me", headers=auth_headers("not-a-jwt"))
    assert response.status_code == 403
    assert response.json()["message"] == "Invalid or expired token"


def test_token_for_deleted_user_is_401(client):
    token = jwt.encode({"id": 999, "sub": "999", "type": "access"}, "test-secret-key", algorithm="HS256")
    assert client.get("/api/me", headers=auth_headers(token)).status_code == 401


# ── Profile ───────────────────────────────────────────────────────────────────


def test_update_profile(client, alice_headers):
    response = client.patch(
        "/api/me",
        json={"fullName": "Alice Cooper", "avatarUrl": "https://example.com/a.png"},
        headers=alice_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["fullName"] == "Alice Cooper"
    assert body["avatarUrl"] == "https://example.com/a.png"
    assert body["email"] == "alice@example.com"

    cleared = client.patch("/api/me", json={"avatarUrl": None}, headers=alice_headers)
    assert cleared.json()["avatarUrl"] is None


def test_update_profile_to_taken_email_is_400(client, alice_headers, bob):
    response = client.patch("/api/me", json={"email": "bob@example.com"}, headers=alice_headers)
    assert response.status_code == 400


# ── Password length ───────────────────────────────────────────────────────────


def _register_payload(password: str) -> dict:
    return {"username": "longpw", "password": password, "fullName": "Long Password", "email": "longpw@example.com"}


def test_register_rejects_password_over_72_characters(client):
    response = client.post("/api/register", json=_register_payload("p" * 100))
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request data"


def test_register_rejects_password_over_72_utf8_bytes(client):
    # 30 four-byte characters: short in characters, 120 bytes on the wire
    response = client.post("/api/register", json=_register_payload("\U0001F600" * 30))
    assert response.status_code == 400


def test_register_accepts_multibyte_password_at_the_limit(client):
    password = "\U0001F600" * 18
    assert client.post("/api/register", json=_register_payload(password)).status_code == 201

    login = client.post("/api/login", json={"email": "longpw@example.com", "password": password})
    assert login.status_code == 200


def test_login_with_overlong_password_is_401(client):
    register(client, "alice")
    response = client.post("/api/login", json={"email": "alice@example.com", "password": "p" * 100})
    assert response.status_code == 401


# ── Registration races ────────────────────────────────────────────────────────


class _StaleLookups:
    """Lookups that miss, as when a concurrent request inserts between check and write."""

    def get_user_by_email(self, email):
        return None

    def get_user_by_username(self, username):
        return None


class _StaleSqlStorage(_StaleLookups, SqlStorage):
    pass


class _StaleMemoryStorage(_StaleLookups, MemoryStorage):
    pass


@pytest.mark.parametrize("backend", ["sql", "memory"])
def test_duplicate_insert_after_passed_check_is_400(backend):
    app = create_app()
    if backend == "memory":
        memory = _StaleMemoryStorage()
        app.dependency_overrides[get_storage] = lambda: memory
    else:
        def _stale_sql():
            with Session(engine) as session:
                yield _StaleSqlStorage(session)

        app.dependency_overrides[get_storage] = _stale_sql

    with TestClient(app) as c:
        register(c, "alice")
        response = c.post(
            "/api/register",
            json={"username": "alice", "password": "secret-pw", "fullName": "A", "email": "alice@example.com"},
        )

    assert response.status_code == 400
    assert response.json()["message"] == "Email or username is already registered"
