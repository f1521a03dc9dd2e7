"""FastAPI application exposing the task REST API."""

from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.core.config import Settings, load_settings
from taskboard.core.dependencies import build_executor
from taskboard.core.models import HealthResponse
from taskboard.core.queries import TaskExecutor
from taskboard.core.routes import build_task_router
from taskboard.core.schema import initialize_database


LOGGER = logging.getLogger(__name__)


def create_app(
    config_path: str | None = None,
    *,
    settings: Settings | None = None,
    executor: TaskExecutor | None = None,
) -> FastAPI:
    LOGGER.info("Initialising task API with config '%s'", config_path)
    if settings is None:
        settings = load_settings(config_path)
    if executor is None:
        executor = build_executor(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await initialize_database(executor)
        try:
            yield
        finally:
            await executor.shutdown()

    app = FastAPI(title="Task API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.executor = executor

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    @app.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse()

    app.include_router(build_task_router(executor), prefix="/api/tasks", tags=["tasks"])
    return app


async def _http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(body, status_code=exc.status_code, headers=exc.headers)


async def _validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    LOGGER.warning("Rejected request body: %s", exc.errors())
    return JSONResponse(
        {"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


def _configure_logging(level: str) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def main() -> None:
    load_dotenv(override=False)

    parser = argparse.ArgumentParser(description="Launch the task API server")
    parser.add_argument("--config", default=None, help="Path to an optional YAML configuration file")
    parser.add_argument("--host", default=None, help="Interface to bind the server")
    parser.add_argument("--port", type=int, default=None, help="Port to bind the server")
    parser.add_argument("--log-level", default=None, help="Logging level, e.g. DEBUG or INFO")
    args = parser.parse_args()

    settings = load_settings(args.config)
    _configure_logging((args.log_level or settings.log_level).upper())
    app = create_app(config_path=args.config, settings=settings)

    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise SystemExit("uvicorn must be installed to run the task API") from exc

    host = args.host or settings.server.host
    port = args.port or settings.server.resolve_port()
    LOGGER.info("Server running on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
