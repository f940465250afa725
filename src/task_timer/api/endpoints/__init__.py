"""API endpoints.

Available routers:
- system: Health checks
- intervals: Interval listing and start/stop
- tasks: Per-task totals
- reports: Aggregate summaries
"""

__all__ = ["system", "intervals", "tasks", "reports"]

from task_timer.api.endpoints import intervals, reports, system, tasks  # noqa: F401
