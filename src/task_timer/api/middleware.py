"""Middleware for the FastAPI application."""

import logging
import time

from fastapi import FastAPI, Request  # type: ignore[import-untyped]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-untyped]

from task_timer.core.config import ConfigManager

logger = logging.getLogger(__name__)


def setup_cors(app: FastAPI, config: ConfigManager) -> None:
    """Configure CORS middleware from the api.cors config section."""
    if not config.get("api.cors.enabled", True):
        return

    origins = config.get("api.cors.origins", ["http://localhost:3000"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_request_logging(app: FastAPI) -> None:
    """Log method, path, status and latency of every request at debug level."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):  # type: ignore[no-untyped-def]
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
        )
        return response


def setup_middleware(app: FastAPI, config: ConfigManager) -> None:
    """Set up all middleware for the application."""
    setup_cors(app, config)
    setup_request_logging(app)
