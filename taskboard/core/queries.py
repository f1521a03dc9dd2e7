"""Structured query intents understood by every task executor.

Routes never build SQL text. They describe what they want with one of the
intents below and hand it to a `TaskExecutor`; each backend decides how to
carry it out (the Postgres executor compiles it to parameterized SQL, the
in-memory executor applies it to a list).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Union

TABLE_NAME = "tasks"
UPDATABLE_COLUMNS: tuple[str, ...] = ("title", "description", "status", "priority")


@dataclass(frozen=True, slots=True)
class ListTasks:
    """All tasks, newest first."""


@dataclass(frozen=True, slots=True)
class GetTask:
    task_id: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "task_id", int(self.task_id))


@dataclass(frozen=True, slots=True)
class InsertTask:
    title: str
    description: str | None = None
    priority: str = "medium"


@dataclass(frozen=True, slots=True)
class UpdateTask:
    """Partial update; `fields` holds only the columns actually supplied."""

    task_id: int
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "task_id", int(self.task_id))
        unknown = [name for name in self.fields if name not in UPDATABLE_COLUMNS]
        if unknown:
            raise ValueError(f"Columns not updatable: {', '.join(sorted(unknown))}")
        object.__setattr__(self, "fields", dict(self.fields))


@dataclass(frozen=True, slots=True)
class DeleteTask:
    task_id: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "task_id", int(self.task_id))


TaskQuery = Union[ListTasks, GetTask, InsertTask, UpdateTask, DeleteTask]


class TaskExecutor(Protocol):
    """Runs task queries against a backing store."""

    async def execute(self, query: TaskQuery) -> list[dict[str, Any]]:  # pragma: no cover - interface
        """Execute *query* and return the affected or selected rows."""

    async def shutdown(self) -> None:  # pragma: no cover - interface
        """Release any resources held by the executor."""
