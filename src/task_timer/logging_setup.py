"""Logging configuration for Task Timer."""

import logging
from pathlib import Path
from typing import Optional

from task_timer.core.config import ConfigManager

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: Optional[ConfigManager] = None, level: Optional[str] = None) -> None:
    """Configure the root logger from configuration.

    Args:
        config: Configuration manager supplying advanced.log_level and
            advanced.log_file
        level: Explicit level name overriding the configured one
    """
    level_name = level or (config.get("advanced.log_level", "WARNING") if config else "WARNING")
    log_level = getattr(logging, level_name.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Calling twice must not duplicate output
    for handler in list(root_logger.handlers):
        if getattr(handler, "_task_timer", False):
            root_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler._task_timer = True  # type: ignore[attr-defined]
    root_logger.addHandler(console_handler)

    log_file = config.get("advanced.log_file") if config else None
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler._task_timer = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)
