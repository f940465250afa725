"""Tagged results for asynchronous time log calls."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from task_timer.core.errors import TimeTrackerError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful completion carrying the call's value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Failed completion carrying the error that caused it."""

    error: TimeTrackerError

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.error)


Outcome = Union[Success[T], Failure]
