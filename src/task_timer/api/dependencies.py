"""Dependency injection for FastAPI endpoints.

The application owns a single ``LocalTimeLog`` created in ``create_app``;
every request shares it so interval boundaries are serialized.
"""

from fastapi import Request  # type: ignore[import-untyped]

from task_timer.core.config import ConfigManager
from task_timer.core.storage import IntervalStorage
from task_timer.core.timelog import LocalTimeLog


def get_config(request: Request) -> ConfigManager:
    """Configuration the application was created with."""
    config: ConfigManager = request.app.state.config
    return config


def get_time_log(request: Request) -> LocalTimeLog:
    """The application's shared time log."""
    time_log: LocalTimeLog = request.app.state.time_log
    return time_log


def get_storage(request: Request) -> IntervalStorage:
    """Interval storage behind the shared time log."""
    return get_time_log(request).storage
