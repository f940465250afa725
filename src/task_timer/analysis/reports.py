"""Aggregate reports over tracked intervals."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from task_timer.core.formatting import format_duration
from task_timer.core.models import TimeInterval


@dataclass
class IntervalSummary:
    """Totals computed from a set of intervals.

    Only closed intervals contribute to durations; running ones are counted
    separately.
    """

    total_seconds: int = 0
    sessions: int = 0
    running: int = 0
    by_task: dict[str, int] = field(default_factory=dict)
    by_day: dict[date, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_seconds": self.total_seconds,
            "sessions": self.sessions,
            "running": self.running,
            "by_task": dict(self.by_task),
            "by_day": {day.isoformat(): seconds for day, seconds in self.by_day.items()},
        }


def summarize(
    intervals: list[TimeInterval],
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> IntervalSummary:
    """Compute per-task and per-day totals.

    Args:
        intervals: Intervals to aggregate
        start_date: Ignore intervals that started before this time
        end_date: Ignore intervals that started at or after this time

    Returns:
        Aggregated totals, tasks sorted by descending time
    """
    by_task: dict[str, int] = defaultdict(int)
    by_day: dict[date, int] = defaultdict(int)
    summary = IntervalSummary()

    for interval in intervals:
        if start_date and interval.started_at < start_date:
            continue
        if end_date and interval.started_at >= end_date:
            continue

        summary.sessions += 1
        if interval.running:
            summary.running += 1
            continue

        summary.total_seconds += interval.duration_seconds
        by_task[interval.task_id] += interval.duration_seconds
        by_day[interval.started_at.date()] += interval.duration_seconds

    summary.by_task = dict(sorted(by_task.items(), key=lambda x: x[1], reverse=True))
    summary.by_day = dict(sorted(by_day.items()))
    return summary


class ReportGenerator:
    """Render interval summaries to the terminal."""

    def __init__(self, console: Optional[Console] = None, show_seconds: bool = True):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
            show_seconds: Include seconds in short durations
        """
        self.console = console or Console()
        self.show_seconds = show_seconds

    def summary_report(
        self,
        intervals: list[TimeInterval],
        period_label: str = "Summary",
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> IntervalSummary:
        """Display totals by task and by day.

        Returns:
            The summary that was displayed
        """
        summary = summarize(intervals, start_date, end_date)

        if summary.sessions == 0:
            self.console.print("[yellow]No intervals found for this period[/yellow]")
            return summary

        self.console.print(f"\n[bold cyan]Task Timer - {period_label}[/bold cyan]\n")

        overview_table = Table(show_header=False, box=None, padding=(0, 2))
        overview_table.add_column(style="dim")
        overview_table.add_column(style="bold")
        overview_table.add_row("Total Time:", self._format(summary.total_seconds))
        overview_table.add_row("Sessions:", str(summary.sessions))
        overview_table.add_row("Running:", str(summary.running))
        overview_table.add_row("Tasks:", str(len(summary.by_task)))
        self.console.print(overview_table)
        self.console.print()

        if summary.by_task:
            task_table = Table(title="Time by Task")
            task_table.add_column("Task", style="cyan")
            task_table.add_column("Duration", style="magenta", justify="right")
            task_table.add_column("Minutes", justify="right")
            task_table.add_column("% Total", style="green", justify="right")
            task_table.add_column("Bar", style="blue")

            for task_id, seconds in list(summary.by_task.items())[:10]:
                pct = (seconds / summary.total_seconds) * 100 if summary.total_seconds > 0 else 0
                task_table.add_row(
                    task_id[:50] + "..." if len(task_id) > 50 else task_id,
                    self._format(seconds),
                    str(round(seconds / 60)),
                    f"{pct:.1f}%",
                    self._create_bar(pct),
                )

            self.console.print(task_table)
            self.console.print()

        if len(summary.by_day) > 1:
            day_table = Table(title="Time by Day")
            day_table.add_column("Date", style="cyan")
            day_table.add_column("Duration", style="magenta", justify="right")
            for day, seconds in summary.by_day.items():
                day_table.add_row(day.isoformat(), self._format(seconds))
            self.console.print(day_table)

        return summary

    def _format(self, seconds: Optional[int]) -> str:
        return format_duration(seconds, show_seconds=self.show_seconds)

    def _create_bar(self, percentage: float, width: int = 25) -> Text:
        """Create a visual bar for percentage display.

        Args:
            percentage: Percentage value (0-100)
            width: Width of the bar in characters

        Returns:
            Rich Text object with colored bar
        """
        filled = int((percentage / 100) * width)
        empty = width - filled

        bar = Text()
        bar.append("█" * filled, style="blue")
        bar.append("░" * empty, style="dim")

        return bar
