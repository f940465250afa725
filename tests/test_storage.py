"""Tests for interval storage."""

import tempfile
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from task_timer.core.errors import ValidationError
from task_timer.core.models import TimeInterval
from task_timer.core.storage import IntervalStorage


@pytest.fixture  # type: ignore[misc]
def temp_storage() -> IntervalStorage:
    """Create an interval storage with temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = IntervalStorage(Path(tmpdir))
        yield storage


def closed_interval(task_id: str, start_hour: int, minutes: int) -> TimeInterval:
    interval = TimeInterval(task_id=task_id, started_at=datetime(2025, 11, 16, start_hour, 0, 0))
    interval.close(datetime(2025, 11, 16, start_hour, minutes, 0))
    return interval


class TestIntervalStorage:
    """Test IntervalStorage."""

    def test_initialization_creates_csv_file(self, temp_storage: IntervalStorage) -> None:
        """Test that initialization creates the CSV file with a header."""
        assert temp_storage.intervals_file.exists()

        with open(temp_storage.intervals_file) as f:
            header = f.readline().strip()
            assert "task_id" in header
            assert "duration_seconds" in header

    def test_save_and_load_interval(self, temp_storage: IntervalStorage) -> None:
        """Test saving and loading an interval."""
        interval = closed_interval("42", 10, 30)

        temp_storage.save_interval(interval)
        intervals = temp_storage.load_intervals()

        assert len(intervals) == 1
        loaded = intervals[0]
        assert loaded.id == interval.id
        assert loaded.task_id == "42"
        assert loaded.duration_seconds == 1800
        assert loaded.running is False

    def test_update_existing_interval(self, temp_storage: IntervalStorage) -> None:
        """Test that saving again replaces the stored row."""
        interval = TimeInterval.begin("42", "Write report")
        temp_storage.save_interval(interval)

        interval.close()
        temp_storage.save_interval(interval)

        intervals = temp_storage.load_intervals()
        assert len(intervals) == 1
        assert intervals[0].running is False
        assert intervals[0].ended_at is not None

    def test_load_intervals_sorted_and_filtered(self, temp_storage: IntervalStorage) -> None:
        """Test ordering, filters and limit."""
        temp_storage.save_interval(closed_interval("a", 9, 10))
        temp_storage.save_interval(closed_interval("b", 11, 20))
        temp_storage.save_interval(TimeInterval.begin("a"))

        intervals = temp_storage.load_intervals()
        assert [i.started_at for i in intervals] == sorted(
            (i.started_at for i in intervals), reverse=True
        )
        assert len(temp_storage.load_intervals(task_id="a")) == 2
        assert len(temp_storage.load_intervals(running=True)) == 1
        assert len(temp_storage.load_intervals(task_id="a", running=False)) == 1
        assert len(temp_storage.load_intervals(limit=2)) == 2

    def test_get_interval(self, temp_storage: IntervalStorage) -> None:
        """Test lookup by id."""
        interval = closed_interval("42", 10, 5)
        temp_storage.save_interval(interval)

        assert temp_storage.get_interval(interval.id) is not None
        assert temp_storage.get_interval("missing") is None

    def test_get_running_interval(self, temp_storage: IntervalStorage) -> None:
        """Test the open interval of a task is found."""
        temp_storage.save_interval(closed_interval("42", 10, 5))
        assert temp_storage.get_running_interval("42") is None

        running = TimeInterval.begin("42")
        temp_storage.save_interval(running)

        found = temp_storage.get_running_interval("42")
        assert found is not None
        assert found.id == running.id
        assert temp_storage.get_running_interval("43") is None

    def test_delete_interval(self, temp_storage: IntervalStorage) -> None:
        """Test deleting an interval."""
        interval = closed_interval("42", 10, 5)
        temp_storage.save_interval(interval)

        assert temp_storage.delete_interval(interval.id) is True
        assert temp_storage.load_intervals() == []
        assert temp_storage.delete_interval(interval.id) is False

    def test_task_total_ignores_running(self, temp_storage: IntervalStorage) -> None:
        """Test totals only include closed intervals."""
        temp_storage.save_interval(closed_interval("42", 9, 30))
        temp_storage.save_interval(closed_interval("42", 11, 15))
        temp_storage.save_interval(closed_interval("7", 12, 50))
        temp_storage.save_interval(TimeInterval.begin("42"))

        assert temp_storage.task_total_seconds("42") == 45 * 60
        assert temp_storage.task_total_seconds("unknown") == 0

    def test_no_temp_file_left_behind(self, temp_storage: IntervalStorage) -> None:
        """Test atomic writes clean up their temporary file."""
        temp_storage.save_interval(closed_interval("42", 10, 5))

        assert list(temp_storage.data_dir.glob("*.tmp")) == []

    def test_open_interval_refuses_second_running(self, temp_storage: IntervalStorage) -> None:
        """Test a task can only have one running interval."""
        temp_storage.open_interval(TimeInterval.begin("42"))

        with pytest.raises(ValidationError, match="already has a running interval"):
            temp_storage.open_interval(TimeInterval.begin("42"))

        temp_storage.open_interval(TimeInterval.begin("7"))
        assert len(temp_storage.load_intervals(running=True)) == 2

    def test_close_interval(self, temp_storage: IntervalStorage) -> None:
        """Test closing stores the duration and refuses a second close."""
        interval = TimeInterval(task_id="42", started_at=datetime(2025, 11, 16, 10, 0, 0))
        temp_storage.open_interval(interval)

        closed = temp_storage.close_interval(interval.id, datetime(2025, 11, 16, 10, 20, 0))

        assert closed.duration_seconds == 1200
        assert temp_storage.get_interval(interval.id).running is False
        with pytest.raises(ValidationError, match="already closed"):
            temp_storage.close_interval(interval.id)
        with pytest.raises(ValidationError, match="not found"):
            temp_storage.close_interval("missing")


class TestConcurrentAccess:
    """Test several storages sharing one data directory."""

    def test_concurrent_open_keeps_one_running_interval(self) -> None:
        """Test racing writers never store two running intervals for a task."""
        with tempfile.TemporaryDirectory() as tmpdir:
            data_dir = Path(tmpdir)

            def attempt(_: int) -> bool:
                try:
                    IntervalStorage(data_dir).open_interval(TimeInterval.begin("42"))
                except ValidationError:
                    return False
                return True

            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(attempt, range(8)))

            assert results.count(True) == 1
            assert len(IntervalStorage(data_dir).load_intervals(task_id="42")) == 1

    def test_concurrent_saves_are_not_lost(self) -> None:
        """Test parallel writers each keep their row."""
        with tempfile.TemporaryDirectory() as tmpdir:
            data_dir = Path(tmpdir)

            def save(n: int) -> None:
                IntervalStorage(data_dir).save_interval(closed_interval(str(n), 9, 5))

            with ThreadPoolExecutor(max_workers=8) as pool:
                list(pool.map(save, range(16)))

            assert len(IntervalStorage(data_dir).load_intervals()) == 16
            assert list(data_dir.glob("*.tmp")) == []
