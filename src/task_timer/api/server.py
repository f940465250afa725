"""FastAPI application server."""

from typing import Optional

from fastapi import FastAPI  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from task_timer import __version__
from task_timer.api.middleware import setup_middleware
from task_timer.core.config import ConfigManager
from task_timer.core.storage import IntervalStorage
from task_timer.core.timelog import LocalTimeLog


def create_app(config: Optional[ConfigManager] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Optional configuration manager (creates default if None)

    Returns:
        Configured FastAPI application instance
    """
    if config is None:
        config = ConfigManager()

    app = FastAPI(
        title="Task Timer API",
        description="REST API for the Task Timer time log",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Read back by the dependency functions
    app.state.config = config
    app.state.time_log = LocalTimeLog(
        IntervalStorage(config.data_dir),
        max_task_id_length=config.tracker_options()["max_task_id_length"],
    )

    setup_middleware(app, config)

    from task_timer.api.endpoints import intervals, reports, system, tasks

    app.include_router(system.router, prefix="/api/v1", tags=["system"])
    app.include_router(intervals.router, prefix="/api/v1/intervals", tags=["intervals"])
    app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["tasks"])
    app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse(
            {
                "message": "Task Timer API",
                "version": __version__,
                "docs": "/docs",
                "health": "/api/v1/health",
            }
        )

    return app


def run_server(
    host: str = "localhost",
    port: int = 8000,
    reload: bool = False,
    config: Optional[ConfigManager] = None,
) -> None:
    """Run the API server using Uvicorn.

    Note:
        This function blocks until the server is stopped.
    """
    import uvicorn  # type: ignore[import-untyped]

    if config is None:
        config = ConfigManager()

    if reload:
        # Reload needs an import string; the factory reads the default config
        uvicorn.run(
            "task_timer.api.server:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level=config.get("api.advanced.log_level", "info"),
        )
        return

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_level=config.get("api.advanced.log_level", "info"),
        access_log=config.get("api.advanced.access_log", True),
    )
