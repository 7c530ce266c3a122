# tests/conftest.py
"""
Shared pytest fixtures for the TactJam server tests.

Provides:
- A fresh in-memory datastore per test
- Services and acting users bound to that store
- An HTTP client against the FastAPI app, plus register/login helpers
"""
import os

# settings are read at import time
os.environ["STORE_BACKEND"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport

from tactjam.db.store import MemoryDataStore
from tactjam.main import app
from tactjam.services import ActingUser, TactonService, TeamService, UserService

fake = Faker()


# ═══════════════════════════════════════════════════════
# SERVICE FIXTURES
# ═══════════════════════════════════════════════════════

@pytest.fixture
def store():
    return MemoryDataStore()


@pytest.fixture
def tacton_service(store):
    return TactonService(store)


@pytest.fixture
def user_service(store):
    return UserService(store)


@pytest.fixture
def team_service(store):
    return TeamService(store)


@pytest.fixture
def alice():
    return ActingUser(id="user-alice", username="alice")


@pytest.fixture
def bob():
    return ActingUser(id="user-bob", username="bob")


@pytest.fixture
def admin():
    return ActingUser(id="user-admin", username="admin", admin=True)


def tacton_payload(**overrides):
    """A valid create payload; override any field."""
    payload = {
        "title": "Morning Buzz",
        "description": fake.sentence(nb_words=6),
        "payload_blob": "AAECAw==",
        "xs": [1, 4],
        "ys": [2, 5],
        "zs": [3, 6],
        "tags": [{"name": "fun"}],
        "bodyTags": [{"name": "wrist"}],
    }
    payload.update(overrides)
    return payload


# ═══════════════════════════════════════════════════════
# HTTP FIXTURES
# ═══════════════════════════════════════════════════════

@pytest.fixture
async def async_client(store):
    """Async HTTP client for testing FastAPI endpoints.

    The lifespan does not run under ASGITransport, so the store is
    attached to the app directly.
    """
    app.state.store = store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.state.store = None


def new_account():
    return {
        "username": fake.lexify(text="user??????????"),
        "email": fake.unique.email(),
        "name": fake.name(),
        "password": fake.password(length=12),
    }


async def register_and_login(client, account=None):
    """Register an account, log in, and return (auth headers, login body)."""
    account = account or new_account()
    response = await client.post("/api/auth/register", json=account)
    assert response.status_code == 201, response.text

    response = await client.post(
        "/api/auth/login",
        json={"username": account["username"], "password": account["password"]},
    )
    assert response.status_code == 200, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['access_token']}"}, body


@pytest.fixture
async def auth_headers(async_client):
    headers, _ = await register_and_login(async_client)
    return headers
