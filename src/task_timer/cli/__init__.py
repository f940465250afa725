"""Command-line interface for Task Timer."""
