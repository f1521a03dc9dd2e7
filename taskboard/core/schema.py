"""Creates the tasks table and its indexes on first start."""

from __future__ import annotations

import logging

from taskboard.core.queries import TABLE_NAME, TaskExecutor
from taskboard.integrations.postgres_sql_executor import PostgresTaskExecutor

LOGGER = logging.getLogger(__name__)

TABLE_EXISTS_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = 'public'
    AND table_name = $1
"""

CREATE_TABLE_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id SERIAL PRIMARY KEY,
        title VARCHAR(255) NOT NULL,
        description TEXT,
        status VARCHAR(50) DEFAULT 'pending',
        priority VARCHAR(50) DEFAULT 'medium',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

CREATE_INDEX_SQL: tuple[str, ...] = (
    f"CREATE INDEX IF NOT EXISTS idx_tasks_status ON {TABLE_NAME}(status)",
    f"CREATE INDEX IF NOT EXISTS idx_tasks_priority ON {TABLE_NAME}(priority)",
)


async def initialize_database(executor: TaskExecutor) -> bool:
    """Ensure the tasks table exists; return True when it had to be created.

    Only the PostgreSQL executor has a schema to manage. Failures are logged
    and swallowed so the server still starts; requests against a missing
    table report their own errors later.
    """

    if not isinstance(executor, PostgresTaskExecutor):
        LOGGER.info("No database configured, skipping database initialization")
        return False

    try:
        rows = await executor.fetch(TABLE_EXISTS_SQL, TABLE_NAME)
        if rows:
            LOGGER.info("Tasks table already exists")
            return False

        LOGGER.info("Initializing database: creating %s table", TABLE_NAME)
        await executor.fetch(CREATE_TABLE_SQL)
        for statement in CREATE_INDEX_SQL:
            await executor.fetch(statement)
    except Exception:
        LOGGER.exception("Error initializing database")
        return False

    LOGGER.info("Database initialized successfully")
    return True
