"""Shared test fixtures for the Threadline test suite."""

import pytest
from datetime import UTC, datetime, timedelta
from storage.page_cache import PageCache


# ── Database Pool Mock ──


class FakeRecord(dict):
    """Mimics asyncpg.Record: supports both dict-style and attribute access."""
    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key)


class FakeConnection:
    """Mock asyncpg connection with configurable return values.

    ``fetch_results``, ``fetchrow_results`` and ``fetchval_results`` are
    consumed in call order; once a queue is empty the single ``*_result``
    fallback is returned. ``raise_on`` maps a method name to an exception
    raised by that method.
    """

    def __init__(self):
        self.execute_results: list[str] = ["UPDATE 1"]
        self.fetch_results: list[list[dict]] = []
        self.fetchrow_results: list[dict | None] = []
        self.fetchrow_result: dict | None = None
        self.fetchval_results: list = []
        self.fetchval_result = 1
        self.raise_on: dict[str, Exception] = {}
        self.transactions: list["FakeTransaction"] = []
        self._execute_calls: list[tuple] = []
        self._fetch_calls: list[tuple] = []
        self._fetchrow_calls: list[tuple] = []
        self._fetchval_calls: list[tuple] = []

    def _maybe_raise(self, method: str) -> None:
        if method in self.raise_on:
            raise self.raise_on[method]

    async def execute(self, query, *args):
        self._execute_calls.append((query, args))
        self._maybe_raise("execute")
        if len(self.execute_results) > 1:
            return self.execute_results.pop(0)
        return self.execute_results[0] if self.execute_results else "UPDATE 0"

    async def fetch(self, query, *args):
        self._fetch_calls.append((query, args))
        self._maybe_raise("fetch")
        result = self.fetch_results.pop(0) if self.fetch_results else []
        return [FakeRecord(r) for r in result]

    async def fetchrow(self, query, *args):
        self._fetchrow_calls.append((query, args))
        self._maybe_raise("fetchrow")
        row = self.fetchrow_results.pop(0) if self.fetchrow_results else self.fetchrow_result
        return FakeRecord(row) if row else None

    async def fetchval(self, query, *args):
        self._fetchval_calls.append((query, args))
        self._maybe_raise("fetchval")
        if self.fetchval_results:
            return self.fetchval_results.pop(0)
        return self.fetchval_result

    def transaction(self):
        tx = FakeTransaction()
        self.transactions.append(tx)
        return tx


class FakeTransaction:
    def __init__(self):
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, *args):
        if exc_type is None:
            self.committed = True
        else:
            self.rolled_back = True
        return False


class FakePool:
    """Mock asyncpg.Pool that yields a FakeConnection."""

    def __init__(self):
        self.conn = FakeConnection()
        self.closed = False

    def acquire(self):
        return FakePoolContext(self.conn)

    async def close(self):
        self.closed = True


class FakePoolContext:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, *args):
        pass


@pytest.fixture
def fake_pool():
    """Provide a mock database pool."""
    return FakePool()


@pytest.fixture
def fake_conn(fake_pool):
    """Direct access to the underlying FakeConnection."""
    return fake_pool.conn


@pytest.fixture
def page_cache():
    return PageCache(ttl=60)


# ── Row builders ──

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def user_row(n: int = 1, **overrides) -> dict:
    row = {
        "id": f"user-{n}",
        "external_id": f"ext-{n}",
        "username": f"user{n}",
        "name": f"User {n}",
        "bio": "Hello there",
        "image": f"https://img.example.com/{n}.png",
        "onboarded": True,
        "threads": [],
        "created_at": BASE_TIME + timedelta(minutes=n),
    }
    row.update(overrides)
    return row


def author_row(n: int = 1, **overrides) -> dict:
    row = {
        "id": f"user-{n}",
        "external_id": f"ext-{n}",
        "name": f"User {n}",
        "image": f"https://img.example.com/{n}.png",
    }
    row.update(overrides)
    return row


def thread_row(n: int = 1, author: str = "user-1", **overrides) -> dict:
    row = {
        "id": f"thread-{n}",
        "text": f"Thread number {n}",
        "author": author,
        "community": None,
        "parent_id": None,
        "children": [],
        "created_at": BASE_TIME + timedelta(minutes=n),
    }
    row.update(overrides)
    return row
