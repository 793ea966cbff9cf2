# healthtrack/notifications.py
"""
Client-side notification sinks used by the medicine reminder watcher.

Alerting logic only ever branches on `NotificationPermission`; how a desktop
notification is actually shown is left to the concrete notifier.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

# Label -> callback for the buttons shown with an in-app message
MessageActions = Dict[str, Optional[Callable[[], None]]]


class NotificationPermission(str, Enum):
    """Tri-state permission for system-level notifications."""
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"  # never asked


class DesktopNotifier:
    """Interface for system-level (desktop) notifications."""

    def permission(self) -> NotificationPermission:
        raise NotImplementedError

    def request_permission(self) -> NotificationPermission:
        """Asks the user for permission. Only call in response to a user action."""
        raise NotImplementedError

    def show(self, title: str, body: str, **options) -> None:
        raise NotImplementedError


class InAppMessenger:
    """Interface for dismissible in-app messages (toasts). Always available."""

    def show(self, content: str, actions: Optional[MessageActions] = None) -> None:
        raise NotImplementedError


class LoggingDesktopNotifier(DesktopNotifier):
    """
    A desktop notifier for headless sessions that writes notifications to
    the log. Permission starts out as never-asked.
    """

    def __init__(self, permission: NotificationPermission = NotificationPermission.DEFAULT):
        self._permission = permission

    def permission(self) -> NotificationPermission:
        return self._permission

    def request_permission(self) -> NotificationPermission:
        self._permission = NotificationPermission.GRANTED
        return self._permission

    def show(self, title: str, body: str, **options) -> None:
        logger.info(f"[notification] {title} | {body}")


class LoggingInAppMessenger(InAppMessenger):
    def show(self, content: str, actions: Optional[MessageActions] = None) -> None:
        labels = f" [{' / '.join(actions)}]" if actions else ""
        logger.info(f"[message] {content}{labels}")
