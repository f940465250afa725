"""Task Timer - per-task time tracking with a persisted time log."""

__version__ = "0.1.0"
