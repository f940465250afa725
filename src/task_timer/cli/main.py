"""Main CLI application."""

import asyncio
import contextlib
import json
import signal
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from task_timer import __version__
from task_timer.analysis.reports import ReportGenerator
from task_timer.cli.config_commands import config
from task_timer.core.config import ConfigManager
from task_timer.core.formatting import format_datetime, format_duration, format_elapsed
from task_timer.core.notifier import Notifier
from task_timer.core.outcome import Failure
from task_timer.core.storage import IntervalStorage
from task_timer.core.timelog import LocalTimeLog
from task_timer.core.tracker import TimeTracker
from task_timer.logging_setup import setup_logging

console = Console()
error_console = Console(stderr=True)


def get_config(ctx: click.Context) -> ConfigManager:
    """Get the ConfigManager selected by the global options."""
    if "config" not in ctx.obj:
        config_path = ctx.obj.get("config_path")
        ctx.obj["config"] = ConfigManager(Path(config_path) if config_path else None)
    config_mgr: ConfigManager = ctx.obj["config"]
    return config_mgr


def get_time_log(ctx: click.Context) -> LocalTimeLog:
    """Get the local time log, honoring --data-dir over the configured directory."""
    config_mgr = get_config(ctx)
    data_dir = ctx.obj.get("data_dir")
    storage = IntervalStorage(Path(data_dir) if data_dir else config_mgr.data_dir)
    max_length = config_mgr.tracker_options()["max_task_id_length"]
    return LocalTimeLog(storage, max_task_id_length=max_length)


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option("--config", "config_path", help="Custom config file", type=click.Path())
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Optional[str],
    config_path: Optional[str],
    no_color: bool,
    verbose: bool,
) -> None:
    """Task Timer - track time spent on tasks.

    Start and stop sessions, watch a live stopwatch, and summarize where
    the time went.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["config_path"] = config_path

    if no_color:
        console.no_color = True

    try:
        setup_logging(get_config(ctx), level="DEBUG" if verbose else None)
    except ValueError as e:
        fail(str(e))


cli.add_command(config)


@cli.command()
@click.argument("task_id")
@click.option("-l", "--label", help="Display label for the task")
@click.pass_context
def start(ctx: click.Context, task_id: str, label: Optional[str]) -> None:
    """Open a tracking interval for a task.

    Example:
        task-timer start 42 -l "Write report"
    """
    time_log = get_time_log(ctx)
    outcome = asyncio.run(time_log.begin_interval(task_id, label))

    if isinstance(outcome, Failure):
        fail(outcome.message)

    interval = outcome.value
    console.print(f"[green]✓[/green] Started tracking: {label or task_id}")
    console.print(f"  Interval: {interval.id}")
    console.print(f"  Started: {format_datetime(interval.started_at)}")


@cli.command()
@click.argument("task_id")
@click.pass_context
def stop(ctx: click.Context, task_id: str) -> None:
    """Close the running interval of a task.

    Also closes intervals left open when a live tracker failed to stop.

    Example:
        task-timer stop 42
    """
    time_log = get_time_log(ctx)
    current = time_log.storage.get_running_interval(task_id)
    if current is None:
        fail(f"No running interval for task {task_id}")

    outcome = asyncio.run(time_log.end_interval(current.id))
    if isinstance(outcome, Failure):
        fail(outcome.message)

    interval = outcome.value
    console.print(f"[green]✓[/green] Stopped tracking: {task_id}")
    console.print(f"  Duration: {format_duration(interval.duration_seconds)}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show intervals that are currently running.

    Example:
        task-timer status
    """
    time_log = get_time_log(ctx)
    running = time_log.storage.load_intervals(running=True)

    if not running:
        console.print("[yellow]No task currently being tracked[/yellow]")
        console.print("\nStart tracking with: [cyan]task-timer start TASK_ID[/cyan]")
        return

    for interval in running:
        content = f"""[bold]{interval.name}[/bold]

[dim]Task:[/dim] {interval.task_id}
[dim]Started:[/dim] {format_datetime(interval.started_at)}
[dim]Duration:[/dim] {format_duration(interval.elapsed_seconds())}
[dim]Interval ID:[/dim] {interval.id}"""
        console.print(Panel(content, title="Currently Tracking", border_style="green"))


@cli.command()
@click.option("-n", "--count", default=10, help="Number of intervals to show")
@click.option("-t", "--task", "task_id", help="Filter by task")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def log(ctx: click.Context, count: int, task_id: Optional[str], as_json: bool) -> None:
    """List recent intervals.

    Example:
        task-timer log
        task-timer log -n 20 -t 42
    """
    time_log = get_time_log(ctx)
    intervals = time_log.storage.load_intervals(task_id=task_id, limit=count)

    if not intervals:
        console.print("[yellow]No intervals found[/yellow]")
        return

    if as_json:
        print(json.dumps([i.to_dict() for i in intervals], indent=2))
        return

    table = Table(title=f"Intervals (showing {len(intervals)})")
    table.add_column("Start", style="cyan")
    table.add_column("Duration", style="magenta")
    table.add_column("Task", style="bold")
    table.add_column("Name", style="blue")

    for interval in intervals:
        status_icon = "▶" if interval.running else "■"
        table.add_row(
            format_datetime(interval.started_at),
            "ongoing" if interval.running else format_duration(interval.duration_seconds),
            f"{status_icon} {interval.task_id}",
            interval.name,
        )

    console.print(table)


@cli.command()
@click.argument("task_id")
@click.pass_context
def total(ctx: click.Context, task_id: str) -> None:
    """Show the total time tracked for a task.

    Example:
        task-timer total 42
    """
    time_log = get_time_log(ctx)
    seconds = asyncio.run(time_log.task_total_seconds(task_id))
    console.print(f"Total for {task_id}: [bold]{format_duration(seconds)}[/bold] ({seconds}s)")


async def _track_until_interrupted(tracker: TimeTracker, duration: Optional[float]) -> bool:
    """Run a tracker until SIGINT or the duration elapses, then stop it.

    Returns:
        True if the session was started and stopped cleanly
    """
    loop = asyncio.get_running_loop()
    interrupted = asyncio.Event()
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, interrupted.set)

    try:
        async with tracker:
            started = await tracker.start()
            if started is None or isinstance(started, Failure):
                return False

            try:
                await asyncio.wait_for(interrupted.wait(), timeout=duration)
            except asyncio.TimeoutError:
                pass

            stopped = await tracker.stop()
            return stopped is not None and not isinstance(stopped, Failure)
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
            loop.remove_signal_handler(signal.SIGINT)


@cli.command()
@click.argument("task_id")
@click.option("-l", "--label", help="Display label for the task")
@click.option("-d", "--duration", type=float, help="Stop automatically after this many seconds")
@click.option("--resume", is_flag=True, help="Continue from the task's total tracked time")
@click.pass_context
def track(
    ctx: click.Context,
    task_id: str,
    label: Optional[str],
    duration: Optional[float],
    resume: bool,
) -> None:
    """Run a live stopwatch for a task until Ctrl-C.

    The session is recorded when tracking starts and when it stops.

    Example:
        task-timer track 42 -l "Write report"
        task-timer track 42 --duration 1500
    """
    config_mgr = get_config(ctx)
    time_log = get_time_log(ctx)
    initial_ms = time_log.storage.task_total_seconds(task_id) * 1000 if resume else 0
    task_label = label or task_id

    def render(elapsed_ms: int) -> Text:
        return Text.assemble(("⏱ ", "cyan"), (format_elapsed(elapsed_ms), "bold"), f"  {task_label}")

    with Live(render(initial_ms), console=console, transient=True) as live:
        tracker = TimeTracker(
            time_log=time_log,
            task_id=task_id,
            task_label=task_label,
            initial_elapsed_ms=initial_ms,
            on_elapsed_change=lambda ms: live.update(render(ms)),
            notifier=Notifier(
                enabled=config_mgr.get("notifications.enabled", False),
                backend=config_mgr.get("notifications.backend", "auto"),
            ),
            **config_mgr.tracker_options(),
        )
        ok = asyncio.run(_track_until_interrupted(tracker, duration))

    if not ok:
        fail(f"Tracking for {task_label} did not complete; see the log for details")

    console.print(f"[green]✓[/green] Tracked {task_label}: {format_elapsed(tracker.elapsed_ms)}")


@cli.command()
@click.option(
    "--period",
    type=click.Choice(["today", "yesterday", "week", "month", "all"]),
    default="week",
    help="Time period",
)
@click.option("--from", "from_date", help="Start date (YYYY-MM-DD)")
@click.option("--to", "to_date", help="End date (YYYY-MM-DD)")
@click.option("-t", "--task", "task_id", help="Filter by task")
@click.pass_context
def report(
    ctx: click.Context,
    period: str,
    from_date: Optional[str],
    to_date: Optional[str],
    task_id: Optional[str],
) -> None:
    """Summarize tracked time by task and by day.

    Examples:
        task-timer report --period week
        task-timer report --from 2026-01-01 --to 2026-01-31
    """
    time_log = get_time_log(ctx)

    start_date = None
    end_date = None
    period_label = "All Time"

    if from_date or to_date:
        period_label = ""
        if from_date:
            try:
                start_date = datetime.strptime(from_date, "%Y-%m-%d")
                period_label = f"From {from_date}"
            except ValueError:
                fail("Invalid date format for --from. Use YYYY-MM-DD")

        if to_date:
            try:
                end_date = datetime.strptime(to_date, "%Y-%m-%d") + timedelta(days=1)
                period_label = f"{period_label} to {to_date}" if period_label else f"Up to {to_date}"
            except ValueError:
                fail("Invalid date format for --to. Use YYYY-MM-DD")
    else:
        now = datetime.now()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if period == "today":
            start_date, end_date, period_label = midnight, midnight + timedelta(days=1), "Today"
        elif period == "yesterday":
            start_date, end_date, period_label = midnight - timedelta(days=1), midnight, "Yesterday"
        elif period == "week":
            start_date = midnight - timedelta(days=now.weekday())
            period_label = "This Week"
        elif period == "month":
            start_date = midnight.replace(day=1)
            period_label = "This Month"

    intervals = time_log.storage.load_intervals(task_id=task_id)
    report_gen = ReportGenerator(console, show_seconds=get_config(ctx).get("display.show_seconds", True))
    report_gen.summary_report(intervals, period_label, start_date, end_date)


@cli.command()
@click.option("--host", help="Host to bind (defaults to api.host)")
@click.option("--port", type=int, help="Port to bind (defaults to api.port)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Serve the time log over HTTP.

    Intervals are read from general.data_dir in the configuration.

    Example:
        task-timer serve --port 8080
    """
    from task_timer.api.server import run_server

    config_mgr = get_config(ctx)
    host = host or config_mgr.get("api.host", "localhost")
    port = port or config_mgr.get("api.port", 8000)
    console.print(f"Serving Task Timer API on http://{host}:{port} (docs at /docs)")
    run_server(host=host, port=port, reload=reload, config=config_mgr)


if __name__ == "__main__":
    cli(obj={})
