"""In-memory task store used when no database URL is configured.

The store keeps task rows in a newest-first list and hands out copies, so
callers can never mutate stored state by accident. Every operation runs to
completion without awaiting anything, which keeps each mutation atomic
under the single event loop that serves requests. Contents live only as
long as the process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable

from taskboard.core.errors import UnsupportedQueryError
from taskboard.core.queries import (
    DeleteTask,
    GetTask,
    InsertTask,
    ListTasks,
    TaskQuery,
    UpdateTask,
)
from taskboard.core.timestamps import utc_now

DEFAULT_STATUS = "pending"
DEFAULT_PRIORITY = "medium"
_TICK = timedelta(microseconds=1)


@dataclass(slots=True)
class InMemoryTaskExecutor:
    """List-backed executor that satisfies the `TaskExecutor` protocol."""

    clock: Callable[[], datetime] = utc_now
    _tasks: list[dict[str, Any]] = field(init=False, default_factory=list)
    _next_id: int = field(init=False, default=1)

    async def execute(self, query: TaskQuery) -> list[dict[str, Any]]:
        if isinstance(query, ListTasks):
            return self._list()
        if isinstance(query, GetTask):
            return self._get(query.task_id)
        if isinstance(query, InsertTask):
            return self._insert(query)
        if isinstance(query, UpdateTask):
            return self._update(query)
        if isinstance(query, DeleteTask):
            return self._delete(query.task_id)
        raise UnsupportedQueryError(query)

    async def shutdown(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    def _list(self) -> list[dict[str, Any]]:
        # sorted() is stable, so equal timestamps keep newest-first order
        rows = [dict(task) for task in self._tasks]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)

    def _get(self, task_id: int) -> list[dict[str, Any]]:
        return [dict(task) for task in self._tasks if task["id"] == task_id]

    def _insert(self, query: InsertTask) -> list[dict[str, Any]]:
        now = self.clock()
        task = {
            "id": self._next_id,
            "title": query.title,
            "description": query.description,
            "status": DEFAULT_STATUS,
            "priority": query.priority or DEFAULT_PRIORITY,
            "created_at": now,
            "updated_at": now,
        }
        self._next_id += 1
        self._tasks.insert(0, task)
        return [dict(task)]

    def _update(self, query: UpdateTask) -> list[dict[str, Any]]:
        task = self._find(query.task_id)
        if task is None:
            return []

        for column, value in query.fields.items():
            task[column.lower()] = value
        task["updated_at"] = max(self.clock(), task["updated_at"] + _TICK)
        return [dict(task)]

    def _delete(self, task_id: int) -> list[dict[str, Any]]:
        for index, task in enumerate(self._tasks):
            if task["id"] == task_id:
                del self._tasks[index]
                return [dict(task)]
        return []

    def _find(self, task_id: int) -> dict[str, Any] | None:
        for task in self._tasks:
            if task["id"] == task_id:
                return task
        return None
