"""Shared fixtures.

The environment is pointed at an in-memory SQLite database and a temporary
data directory before anything from ``meetinghub`` is imported, because the
engine and settings are created at import time.
"""

from __future__ import annotations

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="meetinghub-tests-")
os.environ["MH_DATABASE_URL"] = "sqlite://"
os.environ["MH_STORAGE_BACKEND"] = "sql"
os.environ["MH_DATA_DIR"] = _TMP
os.environ["MH_LOGS_DIR"] = os.path.join(_TMP, "logs")
os.environ["MH_JWT_SECRET_KEY"] = "test-secret-key"

from collections.abc import Iterator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from meetinghub.deps import get_storage  # noqa: E402
from meetinghub.main import create_app  # noqa: E402
from meetinghub.models.base import engine, init_db  # noqa: E402
from meetinghub.models.user import User  # noqa: E402
from meetinghub.security import hash_password  # noqa: E402
from meetinghub.storage.base import Storage  # noqa: E402
from meetinghub.storage.memory import MemoryStorage  # noqa: E402
from meetinghub.storage.sql import SqlStorage  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_database() -> Iterator[None]:
    init_db()
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(params=["sql", "memory"])
def app(request):
    """Route tests run against both storage backends."""
    app = create_app()
    if request.param == "memory":
        memory = MemoryStorage()
        app.dependency_overrides[get_storage] = lambda: memory
    return app


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture(params=["sql", "memory"])
def storage(request) -> Iterator[Storage]:
    """Every storage test runs against both backends."""
    if request.param == "memory":
        yield MemoryStorage()
        return
    with Session(engine) as session:
        yield SqlStorage(session)


def make_user(storage: Storage, username: str = "alice") -> User:
    return storage.create_user(
        User(
            username=username,
            password=hash_password("secret-pw"),
            full_name=username.title(),
            email=f"{username}@example.com",
        )
    )


def register(client: TestClient, username: str = "alice", password: str = "secret-pw") -> dict:
    response = client.post(
        "/api/register",
        json={
            "username": username,
            "password": password,
            "fullName": f"{username.title()} Example",
            "email": f"{username}@example.com",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client) -> dict:
    return register(client, "alice")


@pytest.fixture
def bob(client) -> dict:
    return register(client, "bob")


@pytest.fixture
def alice_headers(alice) -> dict:
    return auth_headers(alice["token"])


@pytest.fixture
def bob_headers(bob) -> dict:
    return auth_headers(bob["token"])
