"""Notification Manager - The in-app notification feed.

Stores notifications newest-first, prunes the feed to the configured size,
and handles read/clear operations. Risk de-duplication is decided by the
RiskEngine against this feed before anything is added.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const, data_builders as db
from ..utils.dt_utils import date_key
from .base_manager import BaseManager
from .habit_manager import EntityNotFoundError

if TYPE_CHECKING:
    from ..coordinator import HabitTrackerCoordinator
    from ..type_defs import NotificationData


class NotificationManager(BaseManager):
    """Manager for the notification feed."""

    def __init__(
        self,
        coordinator: HabitTrackerCoordinator,
        max_notifications: int = const.DEFAULT_MAX_NOTIFICATIONS,
    ) -> None:
        """Initialize the NotificationManager.

        Args:
            coordinator: The owning coordinator
            max_notifications: Feed size; older entries are pruned
        """
        super().__init__(coordinator)
        self.max_notifications = max_notifications

    @property
    def notifications(self) -> list[NotificationData]:
        """Return the live feed, newest first."""
        return self.coordinator.data_buckets[const.DATA_NOTIFICATIONS]

    def notify(
        self,
        notification_type: str,
        title: str,
        message: str,
        habit_id: str | None = None,
    ) -> NotificationData:
        """Add an unread notification dated today."""
        notification = db.build_notification(
            notification_type,
            title,
            message,
            date_key(self.today()),
            habit_id=habit_id,
        )
        self.notifications.insert(0, notification)
        self.prune_notifications(self.notifications, self.max_notifications)
        const.LOGGER.info("Notification [%s] %s: %s", notification_type, title, message)
        return notification

    def mark_read(self, notification_id: str) -> NotificationData:
        """Mark one notification as read.

        Raises:
            EntityNotFoundError: If no notification has this id
        """
        for notification in self.notifications:
            if notification.get(const.DATA_NOTIFICATION_ID) == notification_id:
                notification[const.DATA_NOTIFICATION_READ] = True
                return notification
        raise EntityNotFoundError("notification", notification_id)

    def mark_all_read(self) -> int:
        """Mark every notification as read; return how many changed."""
        changed = 0
        for notification in self.notifications:
            if not notification.get(const.DATA_NOTIFICATION_READ):
                notification[const.DATA_NOTIFICATION_READ] = True
                changed += 1
        return changed

    def clear(self) -> int:
        """Remove every notification; return how many were removed."""
        removed = len(self.notifications)
        self.notifications.clear()
        const.LOGGER.debug("Cleared %s notifications", removed)
        return removed

    def unread_count(self) -> int:
        """Return the number of unread notifications."""
        return sum(
            1 for n in self.notifications if not n.get(const.DATA_NOTIFICATION_READ)
        )

    @staticmethod
    def prune_notifications(
        notifications: list[NotificationData],
        max_entries: int = const.DEFAULT_MAX_NOTIFICATIONS,
    ) -> list[NotificationData]:
        """Trim the feed to ``max_entries``, keeping the newest.

        Modifies the list in place and returns it for convenience.
        Newest entries are at the START of the list.
        """
        if len(notifications) > max_entries:
            del notifications[max_entries:]
        return notifications
