"""Utilities for loading service settings from YAML and the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_PORT = 3001


@dataclass(slots=True)
class DatabaseSettings:
    url_env: str = "DATABASE_URL"

    def resolve_url(self) -> str | None:
        """Return the configured connection string, or None for in-memory mode."""

        value = (os.getenv(self.url_env) or "").strip()
        return value or None


@dataclass(slots=True)
class ServerSettings:
    host: str = "0.0.0.0"
    port_env: str = "PORT"
    default_port: int = DEFAULT_PORT
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    def resolve_port(self) -> int:
        """Parse the port variable, falling back to the default when unusable."""

        raw = (os.getenv(self.port_env) or "").strip()
        if not raw:
            return self.default_port
        try:
            port = int(raw)
        except ValueError:
            LOGGER.warning("Ignoring non-numeric %s=%r; using %s", self.port_env, raw, self.default_port)
            return self.default_port
        if port <= 0:
            LOGGER.warning("Ignoring invalid %s=%r; using %s", self.port_env, raw, self.default_port)
            return self.default_port
        return port


@dataclass(slots=True)
class Settings:
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    log_level: str = "INFO"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_settings(path: str | Path | None = None) -> Settings:
    """Read configuration from *path* (optional) and return structured settings."""

    raw: dict[str, Any] = _load_yaml(Path(path)) if path is not None else {}

    database_raw = raw.get("database") or {}
    database = DatabaseSettings(url_env=str(database_raw.get("url_env", "DATABASE_URL")))

    server_raw = raw.get("server") or {}
    origins = server_raw.get("cors_origins")
    server = ServerSettings(
        host=str(server_raw.get("host", "0.0.0.0")),
        port_env=str(server_raw.get("port_env", "PORT")),
        default_port=int(server_raw.get("default_port", DEFAULT_PORT)),
        cors_origins=[str(origin) for origin in origins] if origins else ["*"],
    )

    logging_raw = raw.get("logging") or {}
    return Settings(
        database=database,
        server=server,
        log_level=str(logging_raw.get("level", "INFO")).upper(),
    )
