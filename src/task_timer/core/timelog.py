"""Time log collaborator: the store that records interval boundaries.

The tracker only depends on the ``TimeLog`` protocol. ``LocalTimeLog`` is the
implementation backed by ``IntervalStorage``; tests substitute fakes.
"""

import asyncio
import logging
from typing import Any, Optional, Protocol

from task_timer.core.errors import TransportError, ValidationError
from task_timer.core.models import TimeInterval
from task_timer.core.outcome import Failure, Outcome, Success
from task_timer.core.storage import IntervalStorage

logger = logging.getLogger(__name__)

DEFAULT_MAX_TASK_ID_LENGTH = 64


class TimeLog(Protocol):
    """Store that opens and closes intervals for tasks."""

    async def begin_interval(
        self, task_id: str, task_label: Optional[str] = None
    ) -> Outcome[TimeInterval]:
        ...

    async def end_interval(self, interval_id: str) -> Outcome[TimeInterval]:
        ...


def validate_task_id(task_id: Any, max_length: int = DEFAULT_MAX_TASK_ID_LENGTH) -> str:
    """Check that a task identifier is usable as a foreign key.

    Integers are accepted and converted to their string form.

    Raises:
        ValidationError: If the identifier is empty, padded, or too long
    """
    if isinstance(task_id, bool) or not isinstance(task_id, (str, int)):
        raise ValidationError(f"Invalid task id: {task_id!r}")
    text = str(task_id)
    if not text or text != text.strip():
        raise ValidationError(f"Invalid task id: {task_id!r}")
    if len(text) > max_length:
        raise ValidationError(f"Task id longer than {max_length} characters")
    return text


class LocalTimeLog:
    """Time log backed by local CSV interval storage."""

    def __init__(
        self,
        storage: Optional[IntervalStorage] = None,
        max_task_id_length: int = DEFAULT_MAX_TASK_ID_LENGTH,
    ):
        """Initialize local time log.

        Args:
            storage: Interval storage. Creates default if None.
            max_task_id_length: Longest accepted task identifier
        """
        self.storage = storage or IntervalStorage()
        self.max_task_id_length = max_task_id_length
        self._lock = asyncio.Lock()

    async def begin_interval(
        self, task_id: str, task_label: Optional[str] = None
    ) -> Outcome[TimeInterval]:
        """Create a running interval for a task."""
        try:
            task_id = validate_task_id(task_id, self.max_task_id_length)
        except ValidationError as e:
            return Failure(e)

        interval = TimeInterval.begin(task_id, task_label)
        async with self._lock:
            try:
                await asyncio.to_thread(self.storage.open_interval, interval)
            except ValidationError as e:
                return Failure(e)
            except OSError as e:
                logger.error(f"Error starting time tracking for task {task_id}: {e}")
                return Failure(TransportError(f"Time log unavailable: {e}"))

        logger.debug(f"Interval {interval.id} started for task {task_id}")
        return Success(interval)

    async def end_interval(self, interval_id: str) -> Outcome[TimeInterval]:
        """Close an open interval, computing its duration from wall-clock time."""
        async with self._lock:
            try:
                interval = await asyncio.to_thread(self.storage.close_interval, interval_id)
            except ValidationError as e:
                return Failure(e)
            except OSError as e:
                logger.error(f"Error stopping time tracking with ID {interval_id}: {e}")
                return Failure(TransportError(f"Time log unavailable: {e}"))

        logger.debug(f"Interval {interval_id} closed after {interval.duration_seconds}s")
        return Success(interval)

    async def list_intervals(
        self,
        task_id: Optional[str] = None,
        running: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> list[TimeInterval]:
        """List intervals, most recent first."""
        return await asyncio.to_thread(self.storage.load_intervals, task_id, running, limit)

    async def task_total_seconds(self, task_id: str) -> int:
        """Total closed duration tracked for a task."""
        return await asyncio.to_thread(self.storage.task_total_seconds, task_id)
