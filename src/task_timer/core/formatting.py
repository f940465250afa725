"""Display formatting for elapsed times and durations."""

from datetime import datetime
from typing import Optional


def format_elapsed(milliseconds: int) -> str:
    """Format elapsed milliseconds as HH:MM:SS."""
    total_seconds = max(0, int(milliseconds)) // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration(seconds: Optional[int], show_seconds: bool = True) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds is None:
        return "ongoing"

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m {secs}s" if show_seconds else f"{minutes}m"
    else:
        return f"{secs}s" if show_seconds else "0m"


def format_datetime(dt: datetime) -> str:
    """Format datetime for display."""
    return dt.strftime("%Y-%m-%d %H:%M:%S")
