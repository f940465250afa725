"""REST API for Task Timer.

Serves the local time log over HTTP so other clients can open and close
intervals, list them, and read per-task totals.

Usage:
    # Start server
    task-timer serve

    # Access API docs
    http://localhost:8000/docs
"""

__all__ = ["create_app", "run_server"]

from task_timer.api.server import create_app, run_server  # noqa: F401
