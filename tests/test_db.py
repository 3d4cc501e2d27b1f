"""
Database handle and unit of work, driven through a stand-in asyncpg pool.
"""
from __future__ import annotations

import asyncio

import pytest

from core import db as core_db


class FakeTransaction:
    def __init__(self, conn):
        self._conn = conn

    async def __aenter__(self):
        self._conn.events.append("begin")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self._conn.events.append("rollback" if exc_type else "commit")
        self._conn.exit_exc = exc
        return False


class FakeConnection:
    def __init__(self):
        self.events: list[str] = []
        self.statements: list[tuple] = []
        self.exit_exc = None

    def transaction(self):
        return FakeTransaction(self)

    async def fetchrow(self, sql, *args):
        self.statements.append((sql, args))
        return {"id": 1}

    async def fetch(self, sql, *args):
        self.statements.append((sql, args))
        return [{"id": 1}, {"id": 2}]

    async def execute(self, sql, *args):
        self.statements.append((sql, args))


class FakeAcquire:
    def __init__(self, pool):
        self._pool = pool

    async def __aenter__(self):
        self._pool.acquired += 1
        return self._pool.conn

    async def __aexit__(self, exc_type, exc, tb):
        self._pool.released += 1
        return False


class FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.acquired = 0
        self.released = 0

    def acquire(self):
        return FakeAcquire(self)


@pytest.fixture()
def database():
    database = core_db.Database("postgresql://unused")
    conn = FakeConnection()
    database._pool = FakePool(conn)  # type: ignore[assignment]
    return database, conn


def test_unit_of_work_commits_on_normal_exit(database):
    handle, conn = database

    async def run():
        async with handle.unit_of_work() as uow:
            row = await uow.fetch_one("SELECT 1", 5)
            rows = await uow.fetch_all("SELECT 2")
            await uow.execute("UPDATE x", 7)
        return row, rows

    row, rows = asyncio.run(run())

    assert row == {"id": 1}
    assert rows == [{"id": 1}, {"id": 2}]
    assert conn.events == ["begin", "commit"]
    assert [s[1] for s in conn.statements] == [(5,), (), (7,)]
    assert handle.pool().released == 1


def test_unit_of_work_rolls_back_and_reraises(database):
    handle, conn = database
    failure = RuntimeError("second write failed")

    async def run():
        async with handle.unit_of_work() as uow:
            await uow.execute("INSERT INTO places ...")
            raise failure

    with pytest.raises(RuntimeError):
        asyncio.run(run())

    assert conn.events == ["begin", "rollback"]
    assert conn.exit_exc is failure
    assert handle.pool().released == 1


def test_closed_database_refuses_queries():
    handle = core_db.Database("postgresql://unused")
    assert handle.is_open is False
    with pytest.raises(RuntimeError, match="not open"):
        handle.pool()


def test_sslmode_is_stripped_from_database_url(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@h/db?sslmode=require&application_name=places")
    assert core_db.database_url() == "postgresql://u:p@h/db?application_name=places"


def test_missing_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        core_db.database_url()
