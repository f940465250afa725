"""Error types raised by the time log and reported by the tracker."""


class TimeTrackerError(Exception):
    """Base class for time tracking errors."""


class ValidationError(TimeTrackerError):
    """Malformed task identifier or an interval that is not open."""


class TransportError(TimeTrackerError):
    """Time log store unreachable or returned a failure."""


class InvariantViolation(TimeTrackerError):
    """Tracker state contradicts the persistence mode it runs in."""
