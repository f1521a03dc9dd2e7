"""Factory helpers for constructing the task executor from settings."""

from __future__ import annotations

import logging

from taskboard.core.config import Settings
from taskboard.core.queries import TaskExecutor
from taskboard.integrations.in_memory_sql_executor import InMemoryTaskExecutor
from taskboard.integrations.postgres_sql_executor import PostgresTaskExecutor

LOGGER = logging.getLogger(__name__)


def build_executor(settings: Settings) -> TaskExecutor:
    """Create the executor selected by *settings*; called once per process."""

    url = settings.database.resolve_url()
    if url:
        LOGGER.info("Using PostgreSQL database connection")
        return PostgresTaskExecutor(dsn=url)

    LOGGER.warning(
        "%s is not set. Using in-memory data store for development.",
        settings.database.url_env,
    )
    return InMemoryTaskExecutor()
