"""FastAPI application bootstrap."""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.tasks import TaskError, TaskService
from src.task_manager import Config, setup_logger

from .dependencies import build_task_service
from .routes import register_task_routes
from .schemas import HealthResponse

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Render every handled failure as ``{"error": message}``."""

    @app.exception_handler(TaskError)
    async def handle_task_error(request: Request, exc: TaskError) -> JSONResponse:
        message = exc.message if exc.status_code < 500 else "Internal server error"
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected malformed request %s %s", request.method, request.url.path)
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    config: Optional[Config] = None, service: Optional[TaskService] = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings; loaded from ``config/app_config.yaml`` when omitted.
        service: Pre-built task service (tests pass one backed by ``:memory:``).
    """
    config = config or Config.from_yaml()
    app = FastAPI(title="Task List API", version="1.0.0")
    app.state.config = config
    app.state.task_service = service or build_task_service(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    register_error_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Simple health check endpoint."""
        return HealthResponse(status="ok")

    register_task_routes(app, prefix=config.server.api_prefix)
    if config.server.api_prefix.strip("/"):
        register_task_routes(app, prefix="", include_in_schema=False)

    return app


def build_default_app() -> FastAPI:
    """Entry point for ``uvicorn --factory``: configures logging, then builds the app."""
    config = Config.from_yaml()
    setup_logger(log_level=config.log.level, log_file=config.log.file)
    return create_app(config)
