"""In-app notifications: new reports, status changes and replies."""

from typing import List, Optional, Tuple

from eventdesk.errors import ApiError
from eventdesk.models import Notification
from eventdesk.stores.base import BaseStore

NOTIFICATIONS_PATH = "/api/notifications"


class NotificationStore(BaseStore):
    """The signed-in user's notifications and unread count.

    Read flags and deletions are applied locally only after the backend confirms them.
    """

    def __init__(self, client):
        super().__init__(client)
        self.notifications: List[Notification] = []
        self.unread_count = 0

    def _recount(self) -> None:
        self.unread_count = sum(1 for n in self.notifications if not n.read)

    def fetch_notifications(self, unread_only: bool = False) -> Tuple[Optional[List[Notification]], str]:
        path = f"{NOTIFICATIONS_PATH}/unread" if unread_only else NOTIFICATIONS_PATH
        with self._request():
            try:
                data = self.client.get(path)
            except ApiError as e:
                self.notifications = []
                self.unread_count = 0
                return None, self._fail("Fetching notifications", e)
        self.notifications = (
            [Notification.from_dict(n) for n in data] if isinstance(data, list) else []
        )
        self._recount()
        return self.notifications, f"Found {len(self.notifications)} notifications"

    def fetch_unread_count(self) -> Tuple[Optional[int], str]:
        with self._request():
            try:
                data = self.client.get(f"{NOTIFICATIONS_PATH}/count")
            except ApiError as e:
                return None, self._fail("Fetching unread count", e)
        count = data.get("unreadCount") if isinstance(data, dict) else None
        self.unread_count = count if isinstance(count, int) else 0
        return self.unread_count, f"{self.unread_count} unread"

    def mark_as_read(self, notification_id: str) -> Tuple[bool, str]:
        with self._request():
            try:
                self.client.patch(f"{NOTIFICATIONS_PATH}/{notification_id}/read")
            except ApiError as e:
                return False, self._fail(f"Marking notification {notification_id} as read", e)
        for notification in self.notifications:
            if notification.id == str(notification_id):
                notification.read = True
        self._recount()
        return True, "Notification marked as read"

    def mark_all_as_read(self) -> Tuple[bool, str]:
        with self._request():
            try:
                self.client.patch(f"{NOTIFICATIONS_PATH}/read-all")
            except ApiError as e:
                return False, self._fail("Marking all notifications as read", e)
        for notification in self.notifications:
            notification.read = True
        self.unread_count = 0
        return True, "All notifications marked as read"

    def delete_notification(self, notification_id: str) -> Tuple[bool, str]:
        with self._request():
            try:
                self.client.delete(f"{NOTIFICATIONS_PATH}/{notification_id}")
            except ApiError as e:
                return False, self._fail(f"Deleting notification {notification_id}", e)
        self.notifications = [n for n in self.notifications if n.id != str(notification_id)]
        self._recount()
        return True, "Notification deleted"
