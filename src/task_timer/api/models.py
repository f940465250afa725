"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field  # type: ignore[import-untyped]

from task_timer.core.models import TimeInterval

# ============================================================================
# Response Models
# ============================================================================


class IntervalResponse(BaseModel):
    """Response model for a time interval."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    name: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_seconds: int = 0
    running: bool = True

    @classmethod
    def from_interval(cls, interval: TimeInterval) -> "IntervalResponse":
        """Create response from a TimeInterval."""
        return cls(
            id=interval.id,
            task_id=interval.task_id,
            name=interval.name,
            started_at=interval.started_at,
            ended_at=interval.ended_at,
            duration_seconds=interval.duration_seconds,
            running=interval.running,
        )


class TaskTotalResponse(BaseModel):
    """Total tracked time for one task."""

    task_id: str
    total_seconds: int = Field(..., ge=0)
    running: bool = Field(..., description="Whether the task has an open interval")


class SummaryResponse(BaseModel):
    """Aggregate totals over a set of intervals."""

    total_seconds: int
    sessions: int
    running: int
    by_task: dict[str, int] = Field(default_factory=dict)
    by_day: dict[str, int] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    timestamp: datetime = Field(..., description="Current server time")
    version: str = Field(..., description="API version")


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(..., description="Error message")


# ============================================================================
# Request Models
# ============================================================================


class BeginIntervalRequest(BaseModel):
    """Request model for opening an interval."""

    task_id: str = Field(..., min_length=1, description="Task identifier")
    task_label: Optional[str] = Field(None, max_length=500, description="Display label")
