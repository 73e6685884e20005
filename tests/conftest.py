# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeSupabase: in-memory stand-in for the supabase-py query builder
# - Profile fixtures for each role and an authenticated TestClient
# =============================================================================

import os
from typing import Any
from unittest.mock import MagicMock
from uuid import uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("JARVIS_API_KEY", "test-jarvis-key")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "false")

import pytest
from fastapi.testclient import TestClient

from app.auth.dependencies import get_current_user, get_current_user_optional
from app.auth.models import AuthUser, UserProfile
from app.auth.roles import Role
from lib.supabase_client import SupabaseClient


# =============================================================================
# Supabase Test Double
# =============================================================================

class FakeResponse:
    """Mimics postgrest's APIResponse (data + count)."""

    def __init__(self, data: Any = None, count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """
    Records every builder call and returns itself, like the real builder.

    execute() pops the next queued response (or exception) for the table.
    """

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.calls: list[tuple[str, tuple, dict]] = []

    def called(self, name: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for method, args, kwargs in self.calls if method == name]

    def execute(self) -> FakeResponse:
        queue = self.db.responses.get(self.table)
        if queue:
            item = queue.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return FakeResponse([], 0)


def _chain(name: str):
    def method(self, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        return self
    return method


CHAIN_METHODS = (
    "select", "insert", "update", "upsert", "delete",
    "eq", "neq", "in_", "or_", "ilike", "contains", "gte", "lte",
    "order", "range", "limit", "single",
)

for _name in CHAIN_METHODS:
    setattr(FakeQuery, _name, _chain(_name))


class FakeSupabase:
    """
    Minimal supabase.Client replacement.

    Example:
        db.queue("customers", data=[{"id": "c1"}])
        CustomerService.insert_customer({...})
        db.payloads("customers", "insert")  # [{...}]
    """

    def __init__(self):
        self.responses: dict[str, list[Any]] = {}
        self.queries: list[FakeQuery] = []
        self.auth = MagicMock()
        self.storage = MagicMock()

    def table(self, name: str) -> FakeQuery:
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query

    def queue(self, table: str, data: Any = None, count: int | None = None) -> None:
        self.responses.setdefault(table, []).append(FakeResponse(data, count))

    def fail(self, table: str, error: Exception) -> None:
        self.responses.setdefault(table, []).append(error)

    def queries_for(self, table: str) -> list[FakeQuery]:
        return [query for query in self.queries if query.table == table]

    def payloads(self, table: str, method: str) -> list[Any]:
        """First positional argument of every `method` call on `table`."""
        return [
            args[0]
            for query in self.queries_for(table)
            for args, _ in query.called(method)
        ]


@pytest.fixture
def fake_db(monkeypatch):
    """Route SupabaseClient.get_client() to a fresh FakeSupabase."""
    db = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "_instance", db)
    return db


# =============================================================================
# Profiles
# =============================================================================

def make_profile(role: Role, is_active: bool = True, **overrides) -> UserProfile:
    data = {
        "id": uuid4(),
        "email": f"{role.value}@novique.ai",
        "full_name": f"Test {role.value.title()}",
        "role": role,
        "is_active": is_active,
    }
    data.update(overrides)
    return UserProfile(**data)


@pytest.fixture
def admin_profile():
    return make_profile(Role.ADMIN)


@pytest.fixture
def editor_profile():
    return make_profile(Role.EDITOR)


@pytest.fixture
def viewer_profile():
    return make_profile(Role.VIEWER)


@pytest.fixture
def inactive_admin_profile():
    return make_profile(Role.ADMIN, is_active=False)


# =============================================================================
# API Client
# =============================================================================

@pytest.fixture
def api_client():
    """TestClient for the full application."""
    from app.main import app

    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(monkeypatch):
    """
    Sign requests in as a profile.

    The token layer is overridden; profile loading and role guards run
    for real against the given profile.

    Example:
        login(admin_profile)
        api_client.get("/api/v1/customers")
    """
    from app.main import app

    def _login(profile: UserProfile) -> None:
        user = AuthUser(id=profile.id, email=profile.email)
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_current_user_optional] = lambda: user
        monkeypatch.setattr(
            SupabaseClient,
            "fetch_profile",
            lambda user_id: profile.model_dump(mode="json"),
        )

    yield _login
    app.dependency_overrides.clear()


JARVIS_HEADERS = {"Authorization": "Bearer test-jarvis-key"}
CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}
