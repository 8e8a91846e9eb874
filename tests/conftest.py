"""
tests/conftest.py -- Shared test fixtures for RecordGate tests.

This module provides:
  - store: connected in-memory UserStore for unit tests (single thread)
  - api_client: TestClient over the real app with an isolated store
  - down_client: TestClient whose store failed its startup probe
  - register(): helper that posts a registration and returns the response

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for TestClient because it runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. Each api_client gets a fresh uuid-named database so tests do
not see each other's accounts.

The DEBUG env var must be set before any auth module import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore

ALICE = {"username": "alice", "email": "a@x.com", "password": "secret1", "fullName": "Alice A"}

# A path under a directory that does not exist: SQLite cannot open it.
_UNREACHABLE_DB_URL = "sqlite:////nonexistent-recordgate-dir/unreachable.db"


def _patch_lifespan(store: UserStore):
    """Return a lifespan that installs a pre-built store instead of the real one."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        yield

    return test_lifespan


def register(client: TestClient, **overrides):
    body = {**ALICE, **overrides}
    return client.post("/api/register", json=body)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    assert s.connect()
    yield s
    s.close()


@pytest.fixture
def api_client() -> Generator[TestClient, None, None]:
    """TestClient against the real app with a fresh, connected store."""
    db_url = f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    user_store = UserStore(db_url)
    assert user_store.connect()
    app.router.lifespan_context = _patch_lifespan(user_store)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client
    user_store.close()


@pytest.fixture
def down_client() -> Generator[TestClient, None, None]:
    """TestClient whose store never connected -- every data call must 503."""
    user_store = UserStore(_UNREACHABLE_DB_URL, connect_timeout=1)
    assert not user_store.connect()
    app.router.lifespan_context = _patch_lifespan(user_store)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client
    user_store.close()
