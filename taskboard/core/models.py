"""Pydantic schemas for task requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

TaskStatus = Literal["pending", "in-progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]


class Task(BaseModel):
    id: int
    title: str
    description: str | None = None
    # Plain strings on the way out so rows written before enumeration
    # checks existed can still be served.
    status: str = Field(..., description="One of pending, in-progress, completed")
    priority: str = Field(..., description="One of low, medium, high")
    created_at: datetime
    updated_at: datetime


class CreateTaskRequest(BaseModel):
    title: str | None = Field(None, description="Required; must not be blank")
    description: str | None = None
    priority: TaskPriority | None = Field(None, description="Defaults to medium")


class UpdateTaskRequest(BaseModel):
    """Any subset of task fields; unset fields are left untouched."""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None

    # Validators only run for values present in the body, so `None` here
    # means the client sent an explicit null.
    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValueError("Title cannot be empty")
        return value

    @field_validator("status", "priority")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def supplied_fields(self) -> dict[str, Any]:
        """Return only the fields the client actually sent."""

        return self.model_dump(exclude_unset=True)


class DeleteTaskResponse(BaseModel):
    message: str
    task: Task


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
