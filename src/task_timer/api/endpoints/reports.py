"""Report endpoints."""

from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status  # type: ignore[import-untyped]

from task_timer.analysis.reports import summarize
from task_timer.api.dependencies import get_storage
from task_timer.api.models import SummaryResponse
from task_timer.core.storage import IntervalStorage

router = APIRouter()


def _parse_date(value: Optional[str], name: str) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name} date: {value}. Use YYYY-MM-DD",
        )


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    task_id: Optional[str] = Query(None, description="Only this task"),
    from_date: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    to_date: Optional[str] = Query(None, description="To date inclusive (YYYY-MM-DD)"),
    storage: IntervalStorage = Depends(get_storage),
) -> SummaryResponse:
    """Totals by task and by day.

    Example:
        >>> GET /api/v1/reports/summary?from_date=2026-01-01&to_date=2026-01-31
    """
    start = _parse_date(from_date, "from")
    end = _parse_date(to_date, "to")
    if end is not None:
        end += timedelta(days=1)

    summary = summarize(storage.load_intervals(task_id=task_id), start, end)
    return SummaryResponse(**summary.to_dict())
