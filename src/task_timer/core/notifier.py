"""Start/stop notifications for the tracker's owner."""

import logging
from enum import Enum
from typing import Any, Optional

from task_timer.core.formatting import format_duration

logger = logging.getLogger(__name__)


class NotificationType(Enum):
    """Types of notifications."""

    STATUS = "status"
    FAILURE = "failure"


class Notifier:
    """Log tracking events and mirror them as desktop notifications."""

    def __init__(self, enabled: bool = True, backend: str = "auto"):
        """Initialize notifier.

        Args:
            enabled: Whether desktop notifications are enabled
            backend: Notification backend ('auto', 'plyer')
        """
        self.enabled = enabled
        self.backend = backend
        self._notifier = self._init_notifier()

    def _init_notifier(self) -> Any:
        """Initialize platform-specific notifier.

        Returns:
            Notification handler or None if not available
        """
        if not self.enabled:
            return None

        try:
            from plyer import notification  # type: ignore[import-not-found]

            return notification  # type: ignore[no-any-return]
        except ImportError:
            logger.debug("plyer not installed, desktop notifications disabled")
            return None

    def notify(
        self,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.STATUS,
        timeout: int = 5,
    ) -> None:
        """Log a notification and send it to the desktop when possible.

        Args:
            title: Notification title
            message: Notification message
            notification_type: Type of notification
            timeout: Display duration in seconds
        """
        if notification_type is NotificationType.FAILURE:
            logger.warning("%s: %s", title, message)
        else:
            logger.info("%s: %s", title, message)

        if not self.enabled or not self._notifier:
            return

        try:
            self._notifier.notify(  # type: ignore[attr-defined]
                title=title,
                message=message,
                app_name="Task Timer",
                timeout=timeout,
            )
        except Exception as e:
            # Desktop delivery is best effort; the event is already logged
            logger.debug(f"Desktop notification failed: {e}")

    def notify_started(self, task_label: str) -> None:
        """Notify that tracking started for a task."""
        self.notify(title="Task Timer", message=f"Started tracking: {task_label}")

    def notify_stopped(self, task_label: str, duration_seconds: Optional[int] = None) -> None:
        """Notify that tracking stopped, with the recorded duration when known."""
        message = f"Stopped tracking: {task_label}"
        if duration_seconds is not None:
            message += f" ({format_duration(duration_seconds)})"
        self.notify(title="Task Timer", message=message)

    def notify_failure(self, action: str, reason: str) -> None:
        """Notify that a start or stop request failed.

        Args:
            action: What was attempted ("start", "stop")
            reason: Error message
        """
        self.notify(
            title="Time Tracking Error",
            message=f"Could not {action} tracking: {reason}",
            notification_type=NotificationType.FAILURE,
            timeout=10,
        )
