"""Core time tracking functionality."""

__all__ = ["models", "storage", "timelog", "tracker"]
