"""Aggregation and reporting over tracked intervals."""
