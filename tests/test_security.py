"""Password hashing and bearer-token tests."""

from __future__ import annotations

from datetime import timedelta

import pytest
from jose import jwt

from meetinghub.models.user import User
from meetinghub.security import (
    TokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def _user() -> User:
    return User(id=7, username="alice", password="x", full_name="Alice", email="alice@example.com")


# ── Passwords ─────────────────────────────────────────────────────────────────


def test_hash_is_salted_and_verifies():
    first = hash_password("secret-pw")
    second = hash_password("secret-pw")

    assert first != "secret-pw"
    assert first != second
    assert verify_password("secret-pw", first)
    assert not verify_password("wrong-pw", first)


def test_verify_rejects_non_bcrypt_value():
    assert verify_password("secret-pw", "plain-text") is False


# ── Tokens ────────────────────────────────────────────────────────────────────


def test_token_round_trip_carries_identity():
    payload = decode_access_token(create_access_token(_user()))

    assert payload["id"] == 7
    assert payload["sub"] == "7"
    assert payload["email"] == "alice@example.com"
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == 24 * 3600


def test_expired_token_is_rejected():
    token = create_access_token(_user(), expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenError):
        decode_access_token(token)


def test_tampered_token_is_rejected():
    token = create_access_token(_user())
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])
    with pytest.raises(TokenError):
        decode_access_token(forged)


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"id": 7, "type": "access"}, "another-secret", algorithm="HS256")
    with pytest.raises(TokenError):
        decode_access_token(token)


def test_token_without_access_type_is_rejected():
    token = jwt.encode({"id": 7, "type": "refresh"}, "test-secret-key", algorithm="HS256")
    with pytest.raises(TokenError):
        decode_access_token(token)
