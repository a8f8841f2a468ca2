"""
Jotter Backend: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures and test doubles for the entire suite.
How:   Environment variables are set before anything from `jotter` is
       imported, so the settings singleton picks them up.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── kv_store:        InMemoryKeyValueStore (dict-backed KeyValueStore)
    ├── auth_provider:   FakeAuthProvider with two registered users
    ├── sql_store:       SqlKeyValueStore on a throwaway SQLite file
    ├── app:             fresh FastAPI app with the doubles injected
    └── test_client:     HTTPX AsyncClient talking to `app` over ASGI
"""

import copy
import os
import uuid
from typing import Any, Dict, List, Optional

# Must run before any jotter import: `settings` is built at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["SUPABASE_URL"] = "https://project.supabase.test"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from jotter.database import build_engine, create_tables
from jotter.exceptions import AuthError, ValidationError
from jotter.services.auth_base import AuthProvider, AuthUser
from jotter.storage.kv_store import KeyValueStore, SqlKeyValueStore

ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"
ANON_KEY = "anon-key"


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed KeyValueStore.

    Values are deep-copied on the way in and out, like a real store that
    serializes them. `calls` counts every operation so tests can assert that
    a request never reached storage.
    """

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.calls = 0

    async def get(self, key: str) -> Optional[Any]:
        self.calls += 1
        return copy.deepcopy(self.data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self.calls += 1
        self.data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self.calls += 1
        self.data.pop(key, None)

    async def get_by_prefix(self, prefix: str) -> List[Any]:
        self.calls += 1
        return [copy.deepcopy(self.data[key]) for key in sorted(self.data) if key.startswith(prefix)]


class FakeAuthProvider(AuthProvider):
    """Token → user mapping plus an in-memory user table."""

    def __init__(self):
        self.users: Dict[str, AuthUser] = {}
        self.tokens: Dict[str, str] = {}
        self.passwords: Dict[str, str] = {}
        self.deleted: List[str] = []

    def register(self, user_id: str, email: str, username: str, token: Optional[str] = None) -> AuthUser:
        user = AuthUser(id=user_id, email=email, username=username, metadata={"username": username})
        self.users[user_id] = user
        if token:
            self.tokens[token] = user_id
        return user

    async def get_user(self, access_token: str) -> AuthUser:
        if not access_token:
            raise AuthError("Unauthorized: No token provided")
        user_id = self.tokens.get(access_token)
        if user_id is None or user_id not in self.users:
            raise AuthError()
        return self.users[user_id]

    async def create_user(self, email: str, password: str, username: str) -> AuthUser:
        if any(user.email == email for user in self.users.values()):
            raise ValidationError(message="A user with this email address has already been registered")
        user = self.register(str(uuid.uuid4()), email, username)
        self.passwords[user.id] = password
        return user

    async def update_password(self, user_id: str, new_password: str) -> None:
        self.passwords[user_id] = new_password

    async def delete_user(self, user_id: str) -> None:
        self.users.pop(user_id, None)
        self.deleted.append(user_id)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def auth_provider():
    provider = FakeAuthProvider()
    provider.register("alice-id", "alice@example.com", "alice", token=ALICE_TOKEN)
    provider.register("bob-id", "bob@example.com", "bob", token=BOB_TOKEN)
    return provider


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """
    SqlKeyValueStore on a fresh SQLite database file.

    Exercises the real SQLAlchemy code path (merge upserts, LIKE prefix scans,
    JSON column round-trips) without a PostgreSQL server.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}")
    await create_tables(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    yield SqlKeyValueStore(session_factory=factory)
    await engine.dispose()


@pytest.fixture
def app(kv_store, auth_provider):
    """A fresh application per test so rate-limit state never leaks between tests."""
    from jotter.dependencies import get_auth_provider, get_kv_store
    from jotter.main import create_app

    application = create_app()
    application.dependency_overrides[get_kv_store] = lambda: kv_store
    application.dependency_overrides[get_auth_provider] = lambda: auth_provider
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
