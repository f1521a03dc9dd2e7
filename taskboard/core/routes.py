"""HTTP handlers for the task collection."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from taskboard.core.models import (
    CreateTaskRequest,
    DeleteTaskResponse,
    Task,
    UpdateTaskRequest,
)
from taskboard.core.queries import (
    DeleteTask,
    GetTask,
    InsertTask,
    ListTasks,
    TaskExecutor,
    UpdateTask,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_PRIORITY = "medium"
_MISSING_TABLE_HINTS = ("does not exist", "relation", "table")


def build_task_router(executor: TaskExecutor) -> APIRouter:
    """Return the task routes bound to *executor*."""

    router = APIRouter()

    @router.get("", response_model=list[Task])
    async def list_tasks() -> list[dict[str, Any]]:
        try:
            return await executor.execute(ListTasks())
        except Exception as exc:
            LOGGER.exception("Error fetching tasks")
            message = str(exc)
            if any(hint in message.lower() for hint in _MISSING_TABLE_HINTS):
                error = (
                    "Database table not found. "
                    "Please run the migration script to create the tasks table."
                )
            else:
                error = "Failed to fetch tasks"
            raise HTTPException(
                status_code=500,
                detail={"error": error, "details": message},
            ) from exc

    @router.get("/{task_id}", response_model=Task)
    async def get_task(task_id: str) -> dict[str, Any]:
        parsed = _parse_task_id(task_id)
        try:
            rows = [] if parsed is None else await executor.execute(GetTask(parsed))
        except Exception as exc:
            LOGGER.exception("Error fetching task id=%s", task_id)
            raise HTTPException(status_code=500, detail="Failed to fetch task") from exc
        return _first_or_404(rows)

    @router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
    async def create_task(payload: CreateTaskRequest | None = None) -> dict[str, Any]:
        if payload is None:
            payload = CreateTaskRequest()
        if not payload.title or not payload.title.strip():
            LOGGER.warning("Task creation rejected: title missing")
            raise HTTPException(status_code=400, detail="Title is required")

        query = InsertTask(
            title=payload.title,
            description=payload.description or None,
            priority=payload.priority or DEFAULT_PRIORITY,
        )
        try:
            rows = await executor.execute(query)
        except Exception as exc:
            LOGGER.exception("Error creating task")
            raise HTTPException(status_code=500, detail="Failed to create task") from exc
        if not rows:
            LOGGER.error("Task creation returned no row")
            raise HTTPException(status_code=500, detail="Failed to create task")
        LOGGER.info("Task created id=%s", rows[0].get("id"))
        return rows[0]

    @router.put("/{task_id}", response_model=Task)
    async def update_task(
        task_id: str, payload: UpdateTaskRequest | None = None
    ) -> dict[str, Any]:
        parsed = _parse_task_id(task_id)
        # an absent body is an update with no fields
        fields = payload.supplied_fields() if payload is not None else {}
        try:
            rows = [] if parsed is None else await executor.execute(UpdateTask(parsed, fields))
        except Exception as exc:
            LOGGER.exception("Error updating task id=%s", task_id)
            raise HTTPException(status_code=500, detail="Failed to update task") from exc
        task = _first_or_404(rows)
        LOGGER.info("Task updated id=%s fields=%s", parsed, sorted(fields))
        return task

    @router.delete("/{task_id}", response_model=DeleteTaskResponse)
    async def delete_task(task_id: str) -> dict[str, Any]:
        parsed = _parse_task_id(task_id)
        try:
            rows = [] if parsed is None else await executor.execute(DeleteTask(parsed))
        except Exception as exc:
            LOGGER.exception("Error deleting task id=%s", task_id)
            raise HTTPException(status_code=500, detail="Failed to delete task") from exc
        task = _first_or_404(rows)
        LOGGER.info("Task deleted id=%s", parsed)
        return {"message": "Task deleted successfully", "task": task}

    return router


def _parse_task_id(raw: str) -> int | None:
    value = raw.strip()
    if not (value.isascii() and value.lstrip("-").isdigit()):
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _first_or_404(rows: list[dict[str, Any]]) -> dict[str, Any]:
    if not rows:
        raise HTTPException(status_code=404, detail="Task not found")
    return rows[0]
