"""PostgreSQL-backed task executor built on an asyncpg connection pool.

Each query intent is compiled into a parameterized statement using
PostgreSQL's native `$1, $2, ...` placeholders:

    SELECT * FROM tasks ORDER BY created_at DESC
    SELECT * FROM tasks WHERE id = $1
    INSERT INTO tasks (title, description, priority) VALUES ($1, $2, $3) RETURNING *
    UPDATE tasks SET <column> = $k, ..., updated_at = CURRENT_TIMESTAMP WHERE id = $n RETURNING *
    DELETE FROM tasks WHERE id = $1 RETURNING *

Driver failures are re-raised as `DatabaseError` so callers see one error
type regardless of what went wrong on the wire.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import asyncpg

from taskboard.core.errors import DatabaseError, UnsupportedQueryError
from taskboard.core.queries import (
    TABLE_NAME,
    UPDATABLE_COLUMNS,
    DeleteTask,
    GetTask,
    InsertTask,
    ListTasks,
    TaskQuery,
    UpdateTask,
)

LOGGER = logging.getLogger(__name__)


def compile_query(query: TaskQuery) -> tuple[str, list[Any]]:
    """Return the SQL statement and positional parameters for *query*."""

    if isinstance(query, ListTasks):
        return f"SELECT * FROM {TABLE_NAME} ORDER BY created_at DESC", []
    if isinstance(query, GetTask):
        return f"SELECT * FROM {TABLE_NAME} WHERE id = $1", [query.task_id]
    if isinstance(query, InsertTask):
        statement = (
            f"INSERT INTO {TABLE_NAME} (title, description, priority) "
            "VALUES ($1, $2, $3) RETURNING *"
        )
        return statement, [query.title, query.description, query.priority]
    if isinstance(query, UpdateTask):
        return _compile_update(query)
    if isinstance(query, DeleteTask):
        return f"DELETE FROM {TABLE_NAME} WHERE id = $1 RETURNING *", [query.task_id]
    raise UnsupportedQueryError(query)


def _compile_update(query: UpdateTask) -> tuple[str, list[Any]]:
    assignments: list[str] = []
    params: list[Any] = []
    # column names are interpolated, so only ever emit whitelisted ones
    for column in UPDATABLE_COLUMNS:
        if column not in query.fields:
            continue
        params.append(query.fields[column])
        assignments.append(f"{column} = ${len(params)}")
    assignments.append("updated_at = CURRENT_TIMESTAMP")
    params.append(query.task_id)
    statement = (
        f"UPDATE {TABLE_NAME} SET {', '.join(assignments)} "
        f"WHERE id = ${len(params)} RETURNING *"
    )
    return statement, params


@dataclass(slots=True)
class PostgresTaskExecutor:
    """Execute task queries against PostgreSQL through a lazily created pool."""

    dsn: str
    min_size: int = 1
    max_size: int = 10
    _pool: Any = field(init=False, default=None)
    _pool_lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    async def execute(self, query: TaskQuery) -> list[dict[str, Any]]:
        statement, params = compile_query(query)
        return await self.fetch(statement, *params)

    async def fetch(self, statement: str, *params: Any) -> list[dict[str, Any]]:
        """Run a raw parameterized statement and return rows as dictionaries."""

        try:
            pool = await self._ensure_pool()
            async with pool.acquire() as conn:
                records = await conn.fetch(statement, *params)
        except Exception as exc:
            LOGGER.error("Database query error: %s", exc)
            raise DatabaseError(str(exc)) from exc
        return [dict(record) for record in records]

    async def shutdown(self) -> None:
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()
        LOGGER.info("PostgreSQL connection pool closed")

    async def _ensure_pool(self) -> Any:
        if self._pool is not None:
            return self._pool
        async with self._pool_lock:
            if self._pool is None:
                self._pool = await asyncpg.create_pool(
                    dsn=self.dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                )
                LOGGER.info("PostgreSQL connection pool created")
        return self._pool
