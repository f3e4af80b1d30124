"""Notification store: listing, unread counts and confirmed read/delete updates."""

import pytest

from eventdesk.stores.notification_store import NotificationStore


def notification_json(notification_id, read=False, **extra):
    data = {
        "id": notification_id,
        "title": "New response",
        "message": "An admin replied to your report",
        "type": "NEW_RESPONSE",
        "read": read,
        "relatedEntityId": "1",
        "createdAt": "2026-10-01T09:00:00Z",
    }
    data.update(extra)
    return data


@pytest.fixture
def store(api_client):
    return NotificationStore(api_client)


@pytest.fixture
def loaded(backend, store):
    backend.add(
        "GET",
        "/api/notifications",
        body=[notification_json("1"), notification_json("2"), notification_json("3", read=True)],
    )
    store.fetch_notifications()
    return store


class TestFetch:
    def test_fetch_counts_unread(self, loaded):
        assert [n.id for n in loaded.notifications] == ["1", "2", "3"]
        assert loaded.unread_count == 2
        assert loaded.notifications[0].related_entity_id == "1"

    def test_unread_only_uses_unread_route(self, backend, store):
        backend.add("GET", "/api/notifications/unread", body=[notification_json("4")])

        notifications, message = store.fetch_notifications(unread_only=True)

        assert [n.id for n in notifications] == ["4"]
        assert message == "Found 1 notifications"

    def test_is_read_alias(self, backend, store):
        backend.add("GET", "/api/notifications", body=[{"id": "1", "title": "t", "isRead": True}])
        notifications, _ = store.fetch_notifications()
        assert notifications[0].read

    def test_failure_clears_list(self, backend, loaded):
        backend.add("GET", "/api/notifications", status=500, body={"message": "Boom"})

        notifications, message = loaded.fetch_notifications()

        assert notifications is None
        assert message == "Boom"
        assert loaded.notifications == []
        assert loaded.unread_count == 0

    def test_unread_count(self, backend, store):
        backend.add("GET", "/api/notifications/count", body={"unreadCount": 7})

        count, message = store.fetch_unread_count()

        assert count == 7
        assert store.unread_count == 7
        assert message == "7 unread"


class TestUpdates:
    def test_mark_as_read_after_confirmation(self, backend, loaded):
        backend.add("PATCH", "/api/notifications/1/read", status=200)

        success, _ = loaded.mark_as_read("1")

        assert success
        assert loaded.notifications[0].read
        assert loaded.unread_count == 1

    def test_failed_mark_as_read_leaves_flag(self, backend, loaded):
        backend.add("PATCH", "/api/notifications/1/read", status=404, body={"message": "Gone"})

        success, message = loaded.mark_as_read("1")

        assert not success
        assert message == "Gone"
        assert not loaded.notifications[0].read
        assert loaded.unread_count == 2

    def test_mark_all_as_read(self, backend, loaded):
        backend.add("PATCH", "/api/notifications/read-all", status=200)

        success, message = loaded.mark_all_as_read()

        assert success
        assert message == "All notifications marked as read"
        assert all(n.read for n in loaded.notifications)
        assert loaded.unread_count == 0

    def test_delete_recounts(self, backend, loaded):
        backend.add("DELETE", "/api/notifications/2", status=204)

        success, _ = loaded.delete_notification("2")

        assert success
        assert [n.id for n in loaded.notifications] == ["1", "3"]
        assert loaded.unread_count == 1
