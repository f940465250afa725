"""Per-task endpoints."""

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from task_timer.api.dependencies import get_storage
from task_timer.api.models import TaskTotalResponse
from task_timer.core.storage import IntervalStorage

router = APIRouter()


@router.get("/{task_id}/total", response_model=TaskTotalResponse)
async def get_task_total(
    task_id: str,
    storage: IntervalStorage = Depends(get_storage),
) -> TaskTotalResponse:
    """Total closed time tracked for a task.

    Example:
        >>> GET /api/v1/tasks/42/total
        {"task_id": "42", "total_seconds": 5400, "running": false}
    """
    return TaskTotalResponse(
        task_id=task_id,
        total_seconds=storage.task_total_seconds(task_id),
        running=storage.get_running_interval(task_id) is not None,
    )
