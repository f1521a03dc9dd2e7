"""Tests for the asyncpg-backed task executor and its SQL compilation."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import pytest

from taskboard.core.errors import DatabaseError, UnsupportedQueryError
from taskboard.core.queries import DeleteTask, GetTask, InsertTask, ListTasks, UpdateTask
from taskboard.integrations import postgres_sql_executor
from taskboard.integrations.postgres_sql_executor import PostgresTaskExecutor, compile_query


class FakeConnection:
    def __init__(self, rows: list[dict[str, Any]], error: Exception | None = None) -> None:
        self.rows = rows
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def fetch(self, statement: str, *params: Any) -> list[dict[str, Any]]:
        self.calls.append((statement, params))
        if self.error is not None:
            raise self.error
        return self.rows


class FakePool:
    def __init__(self, connection: FakeConnection) -> None:
        self.connection = connection
        self.closed = False

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[FakeConnection]:
        yield self.connection

    async def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_pool(monkeypatch: pytest.MonkeyPatch) -> FakePool:
    pool = FakePool(FakeConnection(rows=[{"id": 1, "title": "Test"}]))
    created: list[dict[str, Any]] = []

    async def fake_create_pool(**kwargs: Any) -> FakePool:
        created.append(kwargs)
        return pool

    monkeypatch.setattr(postgres_sql_executor.asyncpg, "create_pool", fake_create_pool)
    pool.created = created  # type: ignore[attr-defined]
    return pool


def test_compile_simple_queries() -> None:
    assert compile_query(ListTasks()) == ("SELECT * FROM tasks ORDER BY created_at DESC", [])
    assert compile_query(GetTask(3)) == ("SELECT * FROM tasks WHERE id = $1", [3])
    assert compile_query(DeleteTask(3)) == ("DELETE FROM tasks WHERE id = $1 RETURNING *", [3])
    assert compile_query(InsertTask("Test", None, "high")) == (
        "INSERT INTO tasks (title, description, priority) VALUES ($1, $2, $3) RETURNING *",
        ["Test", None, "high"],
    )


def test_compile_update_numbers_placeholders_in_order() -> None:
    statement, params = compile_query(
        UpdateTask(7, {"priority": "low", "title": "Renamed", "description": None})
    )

    assert statement == (
        "UPDATE tasks SET title = $1, description = $2, priority = $3, "
        "updated_at = CURRENT_TIMESTAMP WHERE id = $4 RETURNING *"
    )
    assert params == ["Renamed", None, "low", 7]


def test_compile_update_without_fields_refreshes_timestamp_only() -> None:
    statement, params = compile_query(UpdateTask(2, {}))

    assert statement == (
        "UPDATE tasks SET updated_at = CURRENT_TIMESTAMP WHERE id = $1 RETURNING *"
    )
    assert params == [2]


def test_compile_rejects_unknown_query() -> None:
    with pytest.raises(UnsupportedQueryError):
        compile_query(object())  # type: ignore[arg-type]


def test_execute_runs_compiled_statement(fake_pool: FakePool) -> None:
    executor = PostgresTaskExecutor(dsn="postgresql://localhost/tasks")

    rows = asyncio.run(executor.execute(GetTask(1)))

    assert rows == [{"id": 1, "title": "Test"}]
    assert fake_pool.connection.calls == [("SELECT * FROM tasks WHERE id = $1", (1,))]
    assert fake_pool.created[0]["dsn"] == "postgresql://localhost/tasks"  # type: ignore[attr-defined]


def test_pool_is_created_once(fake_pool: FakePool) -> None:
    executor = PostgresTaskExecutor(dsn="postgresql://localhost/tasks")

    async def scenario() -> None:
        await executor.execute(ListTasks())
        await executor.execute(ListTasks())

    asyncio.run(scenario())

    assert len(fake_pool.created) == 1  # type: ignore[attr-defined]


def test_driver_errors_are_wrapped(fake_pool: FakePool) -> None:
    fake_pool.connection.error = RuntimeError('relation "tasks" does not exist')
    executor = PostgresTaskExecutor(dsn="postgresql://localhost/tasks")

    with pytest.raises(DatabaseError) as excinfo:
        asyncio.run(executor.execute(ListTasks()))

    assert str(excinfo.value) == 'Database error: relation "tasks" does not exist'
    assert excinfo.value.original_message == 'relation "tasks" does not exist'


def test_shutdown_closes_pool(fake_pool: FakePool) -> None:
    executor = PostgresTaskExecutor(dsn="postgresql://localhost/tasks")

    async def scenario() -> None:
        await executor.execute(ListTasks())
        await executor.shutdown()
        await executor.shutdown()

    asyncio.run(scenario())

    assert fake_pool.closed is True
