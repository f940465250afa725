"""Pytest configuration and shared fixtures."""

import logging

import pytest  # type: ignore[import-not-found]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")


@pytest.fixture(autouse=True)  # type: ignore[misc]
def reset_logging():
    """Drop handlers the CLI installs so later tests never log to a closed stream."""
    yield
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_task_timer", False):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(logging.WARNING)
