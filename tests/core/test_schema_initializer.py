"""Tests for the startup schema initializer."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from taskboard.core.errors import DatabaseError
from taskboard.core.schema import CREATE_INDEX_SQL, CREATE_TABLE_SQL, initialize_database
from taskboard.integrations.in_memory_sql_executor import InMemoryTaskExecutor
from taskboard.integrations.postgres_sql_executor import PostgresTaskExecutor


class RecordingPostgresExecutor(PostgresTaskExecutor):
    """Postgres executor whose `fetch` is served from canned rows."""

    __slots__ = ("statements", "exists", "fail")

    def __init__(self, *, exists: bool = False, fail: bool = False) -> None:
        super().__init__(dsn="postgresql://localhost/tasks")
        self.statements: list[tuple[str, tuple[Any, ...]]] = []
        self.exists = exists
        self.fail = fail

    async def fetch(self, statement: str, *params: Any) -> list[dict[str, Any]]:
        self.statements.append((statement, params))
        if self.fail:
            raise DatabaseError("connection refused")
        if "information_schema" in statement:
            return [{"table_name": "tasks"}] if self.exists else []
        return []


def test_creates_table_and_indexes_when_missing() -> None:
    executor = RecordingPostgresExecutor(exists=False)

    created = asyncio.run(initialize_database(executor))

    assert created is True
    issued = [statement for statement, _ in executor.statements]
    assert issued[1:] == [CREATE_TABLE_SQL, *CREATE_INDEX_SQL]
    assert executor.statements[0][1] == ("tasks",)


def test_skips_creation_when_table_exists() -> None:
    executor = RecordingPostgresExecutor(exists=True)

    assert asyncio.run(initialize_database(executor)) is False
    assert len(executor.statements) == 1


def test_errors_are_swallowed(caplog: pytest.LogCaptureFixture) -> None:
    executor = RecordingPostgresExecutor(fail=True)

    assert asyncio.run(initialize_database(executor)) is False
    assert "Error initializing database" in caplog.text


def test_in_memory_executor_is_skipped() -> None:
    assert asyncio.run(initialize_database(InMemoryTaskExecutor())) is False
