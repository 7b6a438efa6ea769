"""
Pytest configuration and fixtures for ServiceFlow tests.

FakeSupabase stands in for the platform: an in-memory table store with the
PostgREST builder calls the app uses, plus a storage bucket and auth lookup.
"""

import asyncio
import copy
import itertools
import os
from types import SimpleNamespace

import pytest

# Set test environment before importing serviceflow modules
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
os.environ["SERVICEFLOW_ENV"] = "development"

from serviceflow.web.auth import AuthenticatedUser, Role  # noqa: E402


def run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class PlatformError(Exception):
    """What a failed platform call raises in tests."""


# Unique constraints enforced on insert
UNIQUE_KEYS = {
    "creator_profiles": ["user_id"],
    "creator_specializations": ["creator_id", "category"],
    "creator_availability": ["creator_id", "day_of_week"],
}


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable query over one table. Filters apply to every operation."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.count = None
        self.filters = []
        self.order_by = []
        self.row_limit = None

    def select(self, columns="*", count=None):
        self.op = "select"
        self.count = count
        return self

    def insert(self, values):
        self.op = "insert"
        self.payload = values
        return self

    def update(self, values):
        self.op = "update"
        self.payload = values
        return self

    def upsert(self, values, on_conflict=""):
        self.op = "upsert"
        self.payload = values
        self.on_conflict = [c.strip() for c in on_conflict.split(",") if c.strip()]
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by.append((column, desc))
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def _matches(self, row):
        return all(row.get(col) == val for col, val in self.filters)

    def execute(self):
        if (self.table_name, self.op) in self.db.failures:
            raise PlatformError(f"{self.op} on {self.table_name} failed")

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "select":
            found = [copy.deepcopy(r) for r in rows if self._matches(r)]
            for column, desc in reversed(self.order_by):
                found.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
            total = len(found)
            if self.row_limit is not None:
                found = found[: self.row_limit]
            return FakeResponse(found, total if self.count else None)

        if self.op == "insert":
            values = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = UNIQUE_KEYS.get(self.table_name)
            for v in values:
                if keys and any(all(r.get(k) == v.get(k) for k in keys) for r in rows):
                    raise PlatformError(f"duplicate key value violates unique constraint on {self.table_name}")
            inserted = [self.db.add_row(self.table_name, v) for v in values]
            return FakeResponse(copy.deepcopy(inserted))

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self.op == "upsert":
            existing = next(
                (r for r in rows if all(r.get(k) == self.payload.get(k) for k in self.on_conflict)),
                None,
            )
            if existing is not None:
                existing.update(copy.deepcopy(self.payload))
                return FakeResponse([copy.deepcopy(existing)])
            return FakeResponse([copy.deepcopy(self.db.add_row(self.table_name, self.payload))])

        if self.op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return FakeResponse(copy.deepcopy(removed))

        raise AssertionError(f"Unsupported op {self.op}")


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.fail_extension and path.endswith(f".{self.storage.fail_extension}"):
            raise PlatformError(f"upload of {path} failed")
        self.storage.objects[(self.name, path)] = file
        return SimpleNamespace(path=path)

    def remove(self, paths):
        if self.storage.fail_remove:
            raise PlatformError("remove failed")
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return []

    def get_public_url(self, path):
        return f"https://test.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.fail_extension: str | None = None
        self.fail_remove = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)

    def paths(self, bucket="creator-portfolio"):
        return sorted(path for (b, path) in self.objects if b == bucket)


class FakeAuth:
    def __init__(self):
        self.sessions: dict[str, SimpleNamespace] = {}

    def get_user(self, token):
        if token not in self.sessions:
            raise PlatformError("invalid JWT")
        return SimpleNamespace(user=self.sessions[token])


class FakeSupabase:
    """In-memory Supabase client."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failures: set[tuple[str, str]] = set()
        self.storage = FakeStorage()
        self.auth = FakeAuth()
        self._ids = itertools.count(1)

    def table(self, name):
        return FakeQuery(self, name)

    def add_row(self, table, values):
        n = next(self._ids)
        row = {"id": f"{table}-{n}", "created_at": f"2026-01-01T00:00:00.{n:06d}"}
        row.update(copy.deepcopy(values))
        self.tables.setdefault(table, []).append(row)
        return row

    def fail(self, table, op):
        """Make every `op` on `table` raise until cleared."""
        self.failures.add((table, op))

    def clear_failures(self):
        self.failures.clear()

    def rows(self, table):
        return self.tables.get(table, [])


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def creator_user():
    return AuthenticatedUser(id="creator-1", email="maya@example.com", access_token="tok-c", role=Role.CREATOR)


@pytest.fixture
def influencer_user():
    return AuthenticatedUser(id="influencer-1", email="ria@example.com", access_token="tok-i", role=Role.INFLUENCER)


@pytest.fixture
def admin_user():
    return AuthenticatedUser(id="admin-1", email="ops@example.com", access_token="tok-a", role=Role.ADMIN)


@pytest.fixture
def api_client(fake_db, monkeypatch):
    """
    Factory for a TestClient signed in as the given user (or anonymous).

    Every platform call, user-scoped or service-role, lands on fake_db.
    """
    from fastapi.testclient import TestClient

    from serviceflow.web import admin_routes
    from serviceflow.web.app import app
    from serviceflow.web.auth import get_optional_user, get_user_client

    monkeypatch.setattr(admin_routes, "get_service_client", lambda: fake_db)

    def _make(user: AuthenticatedUser | None):
        app.dependency_overrides[get_optional_user] = lambda: user
        app.dependency_overrides[get_user_client] = lambda: fake_db
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
