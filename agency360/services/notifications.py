"""
Notification queue: the single current list of status messages.
post() replaces the list wholesale; dismiss() removes one message or all.
"""

import logging

from agency360.schemas.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationQueue:
    def __init__(self) -> None:
        self._items: list[Notification] = []

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    def post(self, kind: NotificationType | str, content: str) -> Notification:
        """Replace the current messages with a single new one."""
        notification = Notification(type=NotificationType(kind), content=content)
        self._items = [notification]
        logger.debug("Notification [%s]: %s", notification.type.value, content)
        return notification

    def success(self, content: str) -> Notification:
        return self.post(NotificationType.SUCCESS, content)

    def error(self, content: str) -> Notification:
        return self.post(NotificationType.ERROR, content)

    def info(self, content: str) -> Notification:
        return self.post(NotificationType.INFO, content)

    def warning(self, content: str) -> Notification:
        return self.post(NotificationType.WARNING, content)

    def dismiss(self, notification_id: str | None = None) -> bool:
        """Remove one message by id, or every message when no id is given."""
        if notification_id is None:
            had_items = bool(self._items)
            self._items = []
            return had_items
        remaining = [n for n in self._items if n.id != notification_id]
        removed = len(remaining) != len(self._items)
        self._items = remaining
        return removed

    def clear(self) -> None:
        self._items = []

    def __len__(self) -> int:
        return len(self._items)
