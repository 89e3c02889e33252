"""Tests for storage/database.py — pool lifecycle and migrations."""

import pytest
from unittest.mock import AsyncMock, patch
import storage.database as database
from tests.conftest import FakePool


@pytest.fixture(autouse=True)
def reset_pool(monkeypatch):
    monkeypatch.setattr(database, "_pool", None)


class TestPoolLifecycle:
    async def test_pool_created_once(self):
        pool = FakePool()
        with patch("storage.database.asyncpg.create_pool", new=AsyncMock(return_value=pool)) as create:
            first = await database.get_pool()
            second = await database.get_pool()
        assert first is pool
        assert second is pool
        create.assert_awaited_once()

    async def test_connection_error_propagates(self):
        with patch(
            "storage.database.asyncpg.create_pool",
            new=AsyncMock(side_effect=ConnectionRefusedError("refused")),
        ):
            with pytest.raises(ConnectionRefusedError):
                await database.get_pool()
        assert database._pool is None

    async def test_close_pool(self):
        pool = FakePool()
        with patch("storage.database.asyncpg.create_pool", new=AsyncMock(return_value=pool)):
            await database.get_pool()
            await database.close_pool()
        assert pool.closed
        assert database._pool is None

    async def test_close_without_pool(self):
        await database.close_pool()
        assert database._pool is None


class TestPoolDsn:
    async def test_explicit_dsn(self):
        pool = FakePool()
        with patch("storage.database.asyncpg.create_pool", new=AsyncMock(return_value=pool)) as create:
            await database.get_pool("postgresql://other/db")
        assert create.await_args.args[0] == "postgresql://other/db"


class TestRunMigrations:
    async def test_applies_pending(self):
        pool = FakePool()
        pool.conn.fetch_results = [[]]
        applied = await database.run_migrations(pool)
        assert applied == ["001_users_and_threads.sql"]
        queries = [q for q, _ in pool.conn._execute_calls]
        assert "CREATE TABLE IF NOT EXISTS _migrations" in queries[0]
        assert any("CREATE TABLE IF NOT EXISTS users" in q for q in queries)
        _, args = pool.conn._execute_calls[-1]
        assert args == ("001_users_and_threads.sql",)
        assert pool.conn.transactions[0].committed

    async def test_skips_applied(self):
        pool = FakePool()
        pool.conn.fetch_results = [[{"filename": "001_users_and_threads.sql"}]]
        assert await database.run_migrations(pool) == []
        assert len(pool.conn._execute_calls) == 1
        assert pool.conn.transactions == []

    async def test_defaults_to_shared_pool(self):
        pool = FakePool()
        pool.conn.fetch_results = [[{"filename": "001_users_and_threads.sql"}]]
        with patch("storage.database.get_pool", new=AsyncMock(return_value=pool)) as get_pool:
            await database.run_migrations()
        get_pool.assert_awaited_once()

    def test_pending_migrations(self):
        assert [f.name for f in database.pending_migrations(set())] == ["001_users_and_threads.sql"]
        assert database.pending_migrations({"001_users_and_threads.sql"}) == []
