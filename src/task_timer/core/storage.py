"""CSV storage for time intervals with atomic writes and file locking."""

import csv
import os
import sys
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

from task_timer.core.errors import ValidationError
from task_timer.core.models import INTERVAL_FIELDS, TimeInterval


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Block until a lock on the file is held.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        # msvcrt has no shared locks
        file_obj.seek(0)
        msvcrt.locking(file_obj.fileno(), msvcrt.LK_LOCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way."""
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        file_obj.seek(0)
        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class IntervalStorage:
    """Intervals kept in one CSV file.

    Every read-modify-write runs under an exclusive lock on ``intervals.lock``,
    so several storages, threads or processes sharing a data directory never
    lose each other's writes. Readers take the same lock shared.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize interval storage.

        Args:
            data_dir: Custom data directory. Defaults to ~/.task-timer/data
        """
        if data_dir is None:
            data_dir = Path.home() / ".task-timer" / "data"

        self.data_dir = data_dir
        self.intervals_file = self.data_dir / "intervals.csv"
        self.lock_file = self.data_dir / "intervals.lock"

        self.data_dir.mkdir(parents=True, exist_ok=True)
        with self._locked():
            if not self.intervals_file.exists():
                self._write_rows([])

    @contextmanager
    def _locked(self, exclusive: bool = True) -> Iterator[None]:
        with open(self.lock_file, "a+", encoding="utf-8") as f:
            _lock_file(f, exclusive=exclusive)
            try:
                yield
            finally:
                _unlock_file(f)

    def _write_rows(self, rows: list[dict[str, Any]]) -> None:
        """Replace the CSV file through a uniquely named temporary file.

        Callers must hold the exclusive lock.
        """
        with tempfile.NamedTemporaryFile(
            "w",
            dir=self.data_dir,
            prefix=".intervals-",
            suffix=".tmp",
            newline="",
            encoding="utf-8",
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            try:
                writer = csv.DictWriter(f, fieldnames=INTERVAL_FIELDS)
                writer.writeheader()
                writer.writerows(rows)
                f.flush()
                os.fsync(f.fileno())
            except BaseException:
                f.close()
                temp_path.unlink(missing_ok=True)
                raise

        try:
            os.replace(temp_path, self.intervals_file)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def _read_rows(self) -> list[dict[str, Any]]:
        """Read all rows. Callers must hold the lock."""
        if not self.intervals_file.exists():
            return []
        with open(self.intervals_file, newline="", encoding="utf-8") as f:
            return list(csv.DictReader(f))

    def save_interval(self, interval: TimeInterval) -> None:
        """Save or update an interval."""
        with self._locked():
            rows = [r for r in self._read_rows() if r["id"] != interval.id]
            rows.append(interval.to_dict())
            self._write_rows(rows)

    def open_interval(self, interval: TimeInterval) -> TimeInterval:
        """Store a new running interval unless its task already has one.

        Raises:
            ValidationError: If the task already has a running interval
        """
        with self._locked():
            rows = self._read_rows()
            for row in rows:
                if row["task_id"] == interval.task_id and _is_running(row):
                    raise ValidationError(
                        f"Task {interval.task_id} already has a running interval"
                    )
            rows.append(interval.to_dict())
            self._write_rows(rows)
        return interval

    def close_interval(
        self, interval_id: str, ended_at: Optional[datetime] = None
    ) -> TimeInterval:
        """Close a running interval and store its duration.

        Raises:
            ValidationError: If the interval is missing or already closed
        """
        with self._locked():
            rows = self._read_rows()
            for i, row in enumerate(rows):
                if row["id"] != interval_id:
                    continue
                interval = TimeInterval.from_dict(row)
                if not interval.running:
                    raise ValidationError(f"Interval already closed: {interval_id}")
                interval.close(ended_at)
                rows[i] = interval.to_dict()
                self._write_rows(rows)
                return interval
        raise ValidationError(f"Interval not found: {interval_id}")

    def load_intervals(
        self,
        task_id: Optional[str] = None,
        running: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> list[TimeInterval]:
        """Load intervals, most recent first.

        Args:
            task_id: Only intervals for this task
            running: Only running (True) or closed (False) intervals
            limit: Maximum number of intervals to return
        """
        with self._locked(exclusive=False):
            rows = self._read_rows()

        intervals = [TimeInterval.from_dict(row) for row in rows]
        if task_id is not None:
            intervals = [i for i in intervals if i.task_id == task_id]
        if running is not None:
            intervals = [i for i in intervals if i.running == running]
        intervals.sort(key=lambda i: i.started_at, reverse=True)

        return intervals[:limit] if limit else intervals

    def get_interval(self, interval_id: str) -> Optional[TimeInterval]:
        """Get interval by ID, or None if not found."""
        return next((i for i in self.load_intervals() if i.id == interval_id), None)

    def get_running_interval(self, task_id: str) -> Optional[TimeInterval]:
        """Get the running interval for a task, if any."""
        running = self.load_intervals(task_id=task_id, running=True)
        return running[0] if running else None

    def delete_interval(self, interval_id: str) -> bool:
        """Delete an interval by ID.

        Returns:
            True if interval was deleted, False if not found
        """
        with self._locked():
            rows = self._read_rows()
            kept = [r for r in rows if r["id"] != interval_id]
            if len(kept) == len(rows):
                return False
            self._write_rows(kept)
        return True

    def task_total_seconds(self, task_id: str) -> int:
        """Total closed duration tracked for a task, in seconds."""
        return sum(
            i.duration_seconds for i in self.load_intervals(task_id=task_id, running=False)
        )


def _is_running(row: dict[str, Any]) -> bool:
    return str(row.get("running", "")).strip().lower() == "true"
