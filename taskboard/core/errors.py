"""Error types shared by the task executors and the HTTP layer."""

from __future__ import annotations


class TaskboardError(Exception):
    """Base exception for the task service."""


class DatabaseError(TaskboardError):
    """A real-backend query failed; wraps the driver message."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Database error: {message}")
        self.original_message = message


class UnsupportedQueryError(TaskboardError):
    """An executor was handed something that is not a known task query."""

    def __init__(self, query: object) -> None:
        super().__init__(f"Unsupported query: {query!r}")
        self.query = query
