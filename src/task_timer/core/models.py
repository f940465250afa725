"""Core data models for time tracking."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


@dataclass
class TimeInterval:
    """Persisted record of one tracking session for a task.

    Attributes:
        task_id: Identifier of the tracked task
        started_at: When tracking began
        id: Unique identifier (UUID string)
        name: Display label for the session
        ended_at: When tracking ended (None while running)
        duration_seconds: Closed duration, 0 while running
        running: True until the stop is acknowledged
        created_at: When this record was created
        updated_at: Last update time
    """

    task_id: str
    started_at: datetime
    id: str = field(default_factory=lambda: str(uuid4()))
    name: str = "Time tracking: Task"
    ended_at: Optional[datetime] = None
    duration_seconds: int = 0
    running: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def begin(cls, task_id: str, task_label: Optional[str] = None) -> "TimeInterval":
        """Create a running interval starting now."""
        return cls(
            task_id=task_id,
            started_at=datetime.now(),
            name=f"Time tracking: {task_label or 'Task'}",
        )

    def close(self, ended_at: Optional[datetime] = None) -> None:
        """Mark the interval as ended and compute its duration.

        Clock skew that would make the duration negative is clamped to 0.
        """
        self.ended_at = ended_at or datetime.now()
        delta = self.ended_at - self.started_at
        self.duration_seconds = max(0, int(delta.total_seconds()))
        self.running = False
        self.updated_at = datetime.now()

    def elapsed_seconds(self, now: Optional[datetime] = None) -> int:
        """Seconds elapsed so far (the closed duration once stopped)."""
        if not self.running:
            return self.duration_seconds
        delta = (now or datetime.now()) - self.started_at
        return max(0, int(delta.total_seconds()))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV/JSON serialization."""
        return {
            "id": self.id,
            "task_id": self.task_id,
            "name": self.name,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else "",
            "duration_seconds": self.duration_seconds,
            "running": self.running,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeInterval":
        """Create TimeInterval from dictionary (CSV/JSON deserialization)."""
        running = data.get("running", True)
        if isinstance(running, str):
            running = running.strip().lower() == "true"
        return cls(
            id=data["id"],
            task_id=data["task_id"],
            name=data.get("name") or "Time tracking: Task",
            started_at=datetime.fromisoformat(data["started_at"]),
            ended_at=datetime.fromisoformat(data["ended_at"]) if data["ended_at"] else None,
            duration_seconds=int(data["duration_seconds"]) if data["duration_seconds"] else 0,
            running=bool(running),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


INTERVAL_FIELDS = [
    "id",
    "task_id",
    "name",
    "started_at",
    "ended_at",
    "duration_seconds",
    "running",
    "created_at",
    "updated_at",
]


class TrackerPhase(Enum):
    """Stopwatch states."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass
class TrackerViewState:
    """In-memory state owned by one tracker instance (never persisted).

    Attributes:
        elapsed_ms: Displayed elapsed time in milliseconds
        phase: Current stopwatch state
        interval_id: Identifier of the open interval, if any
    """

    elapsed_ms: int = 0
    phase: TrackerPhase = TrackerPhase.IDLE
    interval_id: Optional[str] = None

    @property
    def running(self) -> bool:
        return self.phase is TrackerPhase.RUNNING

    @property
    def pending_operation(self) -> bool:
        return self.phase in (TrackerPhase.STARTING, TrackerPhase.STOPPING)

    def to_dict(self) -> dict[str, Any]:
        return {
            "elapsed_ms": self.elapsed_ms,
            "phase": self.phase.value,
            "running": self.running,
            "pending_operation": self.pending_operation,
            "interval_id": self.interval_id,
        }
