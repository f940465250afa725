"""Per-task stopwatch that records session boundaries in a time log."""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any, Awaitable, Callable, Optional

from task_timer.core.errors import (
    InvariantViolation,
    TimeTrackerError,
    TransportError,
    ValidationError,
)
from task_timer.core.models import TrackerPhase, TrackerViewState
from task_timer.core.notifier import Notifier
from task_timer.core.outcome import Failure, Outcome, Success
from task_timer.core.timelog import DEFAULT_MAX_TASK_ID_LENGTH, TimeLog, validate_task_id

logger = logging.getLogger(__name__)

ElapsedCallback = Callable[[int], None]


class TimeTracker:
    """Stopwatch state machine for a single task.

    The tracker moves through ``IDLE -> STARTING -> RUNNING -> STOPPING -> IDLE``.
    While a start or stop request is in flight every further start/stop/toggle
    call is ignored. Only the start and stop boundaries reach the time log;
    ticks only update the displayed elapsed time.

    Without a ``time_log`` or ``task_id`` the tracker runs in local-only mode
    and never contacts a store.

    Use it as an async context manager, or call ``mount()`` and ``close()``
    yourself, so the tick task is always cleaned up.
    """

    def __init__(
        self,
        time_log: Optional[TimeLog] = None,
        task_id: Optional[str] = None,
        task_label: Optional[str] = None,
        initial_elapsed_ms: int = 0,
        initial_running: bool = False,
        initial_interval_id: Optional[str] = None,
        on_elapsed_change: Optional[ElapsedCallback] = None,
        notifier: Optional[Notifier] = None,
        tick_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        max_task_id_length: int = DEFAULT_MAX_TASK_ID_LENGTH,
    ):
        """Initialize time tracker.

        Args:
            time_log: Store that opens and closes intervals
            task_id: Task being tracked; None means local-only mode
            task_label: Display label for the task
            initial_elapsed_ms: Previously tracked time to resume from
            initial_running: Whether the task was already running when mounted
            initial_interval_id: Open interval recorded for a running task
            on_elapsed_change: Called with the elapsed ms on every tick and reset
            notifier: Receives start/stop success and failure notifications
            tick_interval: Seconds between ticks
            clock: Monotonic clock returning seconds
            sleep: Coroutine function used to wait between ticks
            max_task_id_length: Longest accepted task identifier
        """
        if tick_interval <= 0:
            raise ValueError("tick_interval must be positive")

        self.time_log = time_log
        self.task_id = task_id
        self.task_label = task_label or (str(task_id) if task_id is not None else "Task")
        self.on_elapsed_change = on_elapsed_change
        self.notifier = notifier or Notifier(enabled=False)
        self.tick_interval = tick_interval
        self.max_task_id_length = max_task_id_length
        self._clock = clock
        self._sleep = sleep

        self.state = TrackerViewState(
            elapsed_ms=max(0, int(initial_elapsed_ms)),
            interval_id=initial_interval_id,
        )
        self._resume_running = initial_running
        self._tick_task: Optional["asyncio.Task[None]"] = None
        self._base_elapsed_ms = 0
        self._started_at = 0.0
        self._closed = False

    async def __aenter__(self) -> "TimeTracker":
        self.mount()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def persistent(self) -> bool:
        """Whether start/stop are recorded in the time log."""
        return self.time_log is not None and self.task_id is not None

    @property
    def elapsed_ms(self) -> int:
        return self.state.elapsed_ms

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def pending_operation(self) -> bool:
        return self.state.pending_operation

    @property
    def phase(self) -> TrackerPhase:
        return self.state.phase

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> TrackerViewState:
        """Copy of the current view state."""
        return replace(self.state)

    def mount(self) -> None:
        """Resume ticking if the tracker was created in the running state.

        Must be called from inside a running event loop.
        """
        if self._closed or not self._resume_running:
            return
        self._resume_running = False
        if self.state.phase is TrackerPhase.IDLE:
            self.state.phase = TrackerPhase.RUNNING
            self._start_clock()

    def close(self) -> None:
        """Tear down: stop ticking and discard results of in-flight requests."""
        if self._closed:
            return
        self._closed = True
        self._stop_clock()
        logger.debug(f"Tracker for {self.task_label} closed in phase {self.state.phase.value}")

    async def toggle(self) -> Optional[Outcome[Any]]:
        """Start when idle, stop when running. Ignored while a request is pending."""
        if self.pending_operation:
            return None
        if self.state.phase is TrackerPhase.RUNNING or self._has_unclosed_interval():
            return await self.stop()
        return await self.start()

    async def start(self) -> Optional[Outcome[Any]]:
        """Start tracking.

        Returns:
            The outcome of the request, or None if the call was ignored
        """
        if self._closed or self.state.phase is not TrackerPhase.IDLE:
            logger.debug(f"Ignoring start in phase {self.state.phase.value}")
            return None

        time_log = self.time_log
        if time_log is None or self.task_id is None:
            self.state.phase = TrackerPhase.RUNNING
            self._start_clock()
            self.notifier.notify_started(self.task_label)
            return Success(None)

        if self._has_unclosed_interval():
            error = ValidationError(
                f"Interval {self.state.interval_id} is still open; stop it before starting again"
            )
            self.notifier.notify_failure("start", str(error))
            return Failure(error)

        try:
            task_id = validate_task_id(self.task_id, self.max_task_id_length)
        except ValidationError as e:
            self.notifier.notify_failure("start", str(e))
            return Failure(e)

        previous_elapsed = self.state.elapsed_ms
        self.state.phase = TrackerPhase.STARTING
        self._start_clock()

        outcome = await self._call(time_log.begin_interval, task_id, self.task_label)

        if self._closed:
            logger.debug(f"Discarding start result for {self.task_label} after teardown")
            return outcome

        if isinstance(outcome, Success):
            self.state.interval_id = outcome.value.id
            self.state.phase = TrackerPhase.RUNNING
            self.notifier.notify_started(self.task_label)
        else:
            self._stop_clock()
            self.state.phase = TrackerPhase.IDLE
            if self.state.elapsed_ms != previous_elapsed:
                self.state.elapsed_ms = previous_elapsed
                self._emit(previous_elapsed)
            self.notifier.notify_failure("start", outcome.message)
        return outcome

    async def stop(self) -> Optional[Outcome[Any]]:
        """Stop tracking and close the open interval.

        The tick task is cancelled before the time log is contacted, so no
        tick is delivered after this call begins.

        Returns:
            The outcome of the request, or None if the call was ignored
        """
        if self._closed or self.pending_operation:
            logger.debug(f"Ignoring stop in phase {self.state.phase.value}")
            return None
        if self.state.phase is not TrackerPhase.RUNNING and not self._has_unclosed_interval():
            return None

        self._stop_clock()

        time_log = self.time_log
        if time_log is None or self.task_id is None:
            self.state.phase = TrackerPhase.IDLE
            self.notifier.notify_stopped(self.task_label)
            return Success(None)

        interval_id = self.state.interval_id
        if interval_id is None:
            violation = InvariantViolation(
                f"Stop requested for {self.task_label} with no recorded interval"
            )
            logger.warning(f"{violation}; stopping locally")
            self.state.phase = TrackerPhase.IDLE
            self.notifier.notify_stopped(self.task_label)
            return Success(None)

        self.state.phase = TrackerPhase.STOPPING

        outcome = await self._call(time_log.end_interval, interval_id)

        if self._closed:
            logger.debug(f"Discarding stop result for {self.task_label} after teardown")
            return outcome

        self.state.phase = TrackerPhase.IDLE
        if isinstance(outcome, Success):
            self.state.interval_id = None
            self.notifier.notify_stopped(self.task_label, outcome.value.duration_seconds)
        elif isinstance(outcome.error, ValidationError):
            # Missing or already closed in the store: nothing left to retry
            logger.warning(
                f"Dropping interval {interval_id} for {self.task_label}: {outcome.message}"
            )
            self.state.interval_id = None
            self.notifier.notify_failure("stop", outcome.message)
        else:
            # Interval stays open remotely; a later stop() retries closing it
            self.notifier.notify_failure("stop", outcome.message)
        return outcome

    def reset(self) -> bool:
        """Clear the displayed elapsed time. Never contacts the time log.

        Returns:
            True if reset, False if the tracker is running or busy
        """
        if self._closed or self.state.phase is not TrackerPhase.IDLE:
            return False
        self.state.elapsed_ms = 0
        self._emit(0)
        return True

    def _has_unclosed_interval(self) -> bool:
        return (
            self.persistent
            and self.state.phase is TrackerPhase.IDLE
            and self.state.interval_id is not None
        )

    async def _call(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> Outcome[Any]:
        """Await a time log call, turning raised errors into failures."""
        try:
            return await fn(*args)
        except TimeTrackerError as e:
            return Failure(e)
        except Exception as e:
            logger.error(f"Time log call {getattr(fn, '__name__', fn)} raised: {e}")
            return Failure(TransportError(str(e) or type(e).__name__))

    def _start_clock(self) -> None:
        self._stop_clock()
        self._base_elapsed_ms = self.state.elapsed_ms
        self._started_at = self._clock()
        self._tick_task = asyncio.get_running_loop().create_task(self._run_clock())

    def _stop_clock(self) -> None:
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

    async def _run_clock(self) -> None:
        while True:
            await self._sleep(self.tick_interval)
            self._tick()

    def _tick(self) -> None:
        if self._closed or self.state.phase not in (TrackerPhase.STARTING, TrackerPhase.RUNNING):
            return
        # Derived from the clock, not accumulated, so late ticks stay accurate
        delta_ms = int((self._clock() - self._started_at) * 1000)
        elapsed = max(self.state.elapsed_ms, self._base_elapsed_ms + max(0, delta_ms))
        self.state.elapsed_ms = elapsed
        self._emit(elapsed)

    def _emit(self, elapsed_ms: int) -> None:
        if self.on_elapsed_change is None:
            return
        try:
            self.on_elapsed_change(elapsed_ms)
        except Exception:
            logger.exception("Elapsed-time callback failed")
