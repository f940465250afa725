"""System endpoints for health checks."""

from datetime import datetime, timezone

from fastapi import APIRouter  # type: ignore[import-untyped]

from task_timer import __version__
from task_timer.api.models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Example:
        >>> GET /api/v1/health
        {
            "status": "healthy",
            "timestamp": "2026-01-16T10:30:00Z",
            "version": "0.1.0"
        }
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )
