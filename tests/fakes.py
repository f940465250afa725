"""Test doubles for the tracker: a controllable clock and a scripted time log."""

import asyncio
from datetime import datetime
from typing import Optional

from task_timer.core.errors import TimeTrackerError
from task_timer.core.models import TimeInterval
from task_timer.core.outcome import Failure, Outcome, Success


async def settle(rounds: int = 10) -> None:
    """Let every ready task run until it blocks again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """Monotonic clock plus sleep function under test control.

    ``sleep`` only returns when ``advance`` moves time past its deadline.
    ``jump`` moves time without waking sleepers, which simulates a tick that
    gets scheduled late.
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._sleepers: list[tuple[float, "asyncio.Future[None]"]] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        future: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()
        entry = (self.now + delay, future)
        self._sleepers.append(entry)
        try:
            await future
        finally:
            if entry in self._sleepers:
                self._sleepers.remove(entry)

    def jump(self, seconds: float) -> None:
        self.now += seconds

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            await settle()
            due = [s for s in self._sleepers if s[0] <= target and not s[1].done()]
            if not due:
                break
            deadline, future = min(due, key=lambda s: s[0])
            self.now = max(self.now, deadline)
            future.set_result(None)
        await settle()
        self.now = max(self.now, target)


class FakeTimeLog:
    """Time log that records calls and fails or blocks on request."""

    def __init__(self, hold: bool = False):
        self.hold = hold
        self.begin_calls: list[tuple[str, Optional[str]]] = []
        self.end_calls: list[str] = []
        self.intervals: dict[str, TimeInterval] = {}
        self.begin_raises: Optional[Exception] = None
        self.begin_failure: Optional[TimeTrackerError] = None
        self.end_raises: Optional[Exception] = None
        self.end_failure: Optional[TimeTrackerError] = None
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def _wait(self) -> None:
        if self.hold:
            await self._gate.wait()

    async def begin_interval(
        self, task_id: str, task_label: Optional[str] = None
    ) -> Outcome[TimeInterval]:
        self.begin_calls.append((task_id, task_label))
        await self._wait()
        if self.begin_raises is not None:
            raise self.begin_raises
        if self.begin_failure is not None:
            return Failure(self.begin_failure)
        interval = TimeInterval.begin(task_id, task_label)
        self.intervals[interval.id] = interval
        return Success(interval)

    async def end_interval(self, interval_id: str) -> Outcome[TimeInterval]:
        self.end_calls.append(interval_id)
        await self._wait()
        if self.end_raises is not None:
            raise self.end_raises
        if self.end_failure is not None:
            return Failure(self.end_failure)
        interval = self.intervals.get(interval_id) or TimeInterval(
            task_id="unknown", started_at=datetime.now(), id=interval_id
        )
        interval.close()
        return Success(interval)
