"""Interval endpoints: listing plus opening and closing sessions."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status  # type: ignore[import-untyped]

from task_timer.api.dependencies import get_storage, get_time_log
from task_timer.api.models import BeginIntervalRequest, ErrorResponse, IntervalResponse
from task_timer.core.errors import TransportError
from task_timer.core.outcome import Failure
from task_timer.core.storage import IntervalStorage
from task_timer.core.timelog import LocalTimeLog

router = APIRouter()


def raise_for_failure(failure: Failure) -> None:
    """Translate a failed time log call into an HTTP error."""
    if isinstance(failure.error, TransportError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=failure.message)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=failure.message)


@router.get("/", response_model=list[IntervalResponse])
async def list_intervals(
    skip: int = Query(0, ge=0, description="Number of intervals to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of intervals to return"),
    task_id: Optional[str] = Query(None, description="Filter by task"),
    running: Optional[bool] = Query(None, description="Filter by running state"),
    storage: IntervalStorage = Depends(get_storage),
) -> list[IntervalResponse]:
    """List intervals, most recent first.

    Example:
        >>> GET /api/v1/intervals?task_id=42&running=false
    """
    intervals = storage.load_intervals(task_id=task_id, running=running)
    return [IntervalResponse.from_interval(i) for i in intervals[skip : skip + limit]]


@router.post(
    "/",
    response_model=IntervalResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def begin_interval(
    request: BeginIntervalRequest,
    time_log: LocalTimeLog = Depends(get_time_log),
) -> IntervalResponse:
    """Open a running interval for a task.

    Raises:
        HTTPException: 400 if the task id is invalid or already running

    Example:
        >>> POST /api/v1/intervals
        {"task_id": "42", "task_label": "Write report"}
    """
    outcome = await time_log.begin_interval(request.task_id, request.task_label)
    if isinstance(outcome, Failure):
        raise_for_failure(outcome)
    return IntervalResponse.from_interval(outcome.value)


@router.get(
    "/{interval_id}", response_model=IntervalResponse, responses={404: {"model": ErrorResponse}}
)
async def get_interval(
    interval_id: str,
    storage: IntervalStorage = Depends(get_storage),
) -> IntervalResponse:
    """Get a specific interval by ID."""
    interval = storage.get_interval(interval_id)
    if not interval:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Interval {interval_id} not found",
        )
    return IntervalResponse.from_interval(interval)


@router.post(
    "/{interval_id}/end",
    response_model=IntervalResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def end_interval(
    interval_id: str,
    time_log: LocalTimeLog = Depends(get_time_log),
) -> IntervalResponse:
    """Close an open interval and record its duration.

    Raises:
        HTTPException: 404 if the interval does not exist, 400 if already closed
    """
    if time_log.storage.get_interval(interval_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Interval {interval_id} not found",
        )
    outcome = await time_log.end_interval(interval_id)
    if isinstance(outcome, Failure):
        raise_for_failure(outcome)
    return IntervalResponse.from_interval(outcome.value)


@router.delete(
    "/{interval_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_interval(
    interval_id: str,
    storage: IntervalStorage = Depends(get_storage),
) -> None:
    """Delete an interval."""
    if not storage.delete_interval(interval_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Interval {interval_id} not found",
        )
