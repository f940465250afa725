"""Tests for interval reports."""

from datetime import date, datetime
from io import StringIO

from rich.console import Console  # type: ignore[import-not-found]

from task_timer.analysis.reports import ReportGenerator, summarize
from task_timer.core.models import TimeInterval


def closed(task_id: str, day: int, hour: int, minutes: int) -> TimeInterval:
    interval = TimeInterval(task_id=task_id, started_at=datetime(2025, 11, day, hour, 0, 0))
    interval.close(datetime(2025, 11, day, hour, minutes, 0))
    return interval


def sample_intervals() -> list[TimeInterval]:
    running = TimeInterval(task_id="a", started_at=datetime(2025, 11, 17, 15, 0, 0))
    return [
        closed("a", 16, 9, 30),
        closed("b", 16, 11, 45),
        closed("a", 17, 10, 20),
        running,
    ]


class TestSummarize:
    """Test summarize."""

    def test_totals(self) -> None:
        summary = summarize(sample_intervals())

        assert summary.sessions == 4
        assert summary.running == 1
        assert summary.total_seconds == (30 + 45 + 20) * 60
        assert summary.by_task == {"a": 50 * 60, "b": 45 * 60}
        assert list(summary.by_task) == ["a", "b"]
        assert summary.by_day == {date(2025, 11, 16): 75 * 60, date(2025, 11, 17): 20 * 60}

    def test_date_range(self) -> None:
        summary = summarize(
            sample_intervals(),
            start_date=datetime(2025, 11, 17),
            end_date=datetime(2025, 11, 18),
        )

        assert summary.sessions == 2
        assert summary.total_seconds == 20 * 60
        assert summary.by_task == {"a": 20 * 60}

    def test_empty(self) -> None:
        summary = summarize([])

        assert summary.sessions == 0
        assert summary.to_dict()["by_day"] == {}

    def test_to_dict_uses_iso_days(self) -> None:
        data = summarize(sample_intervals()).to_dict()

        assert data["by_day"]["2025-11-16"] == 75 * 60
        assert data["total_seconds"] == 95 * 60


class TestReportGenerator:
    """Test ReportGenerator rendering."""

    def test_summary_report_output(self) -> None:
        output = StringIO()
        generator = ReportGenerator(console=Console(file=output, width=120))

        summary = generator.summary_report(sample_intervals(), period_label="This Week")

        text = output.getvalue()
        assert "Task Timer - This Week" in text
        assert "Time by Task" in text
        assert "Time by Day" in text
        assert "1h 35m" in text
        assert summary.sessions == 4

    def test_empty_report(self) -> None:
        output = StringIO()
        generator = ReportGenerator(console=Console(file=output, width=120))

        generator.summary_report([])

        assert "No intervals found" in output.getvalue()
