"""Event store: local list patching, hard delete and soft cancel."""

from datetime import datetime

import pytest

from conftest import event_json
from eventdesk.stores.event_store import EventStore, build_event_payload

NOW = datetime(2026, 10, 19, 12, 0)

FORM = {
    "title": " Jazz Night ",
    "description": "Live jazz",
    "eventDate": "2027-01-15T19:00:00",
    "location": "Jakarta",
    "price": "150000",
}


@pytest.fixture
def store(api_client):
    return EventStore(api_client)


class TestFetch:
    def test_fetch_events(self, backend, store):
        backend.add("GET", "/api/events", body=[event_json("1"), event_json("2", isCancelled=True)])

        events, message = store.fetch_events()

        assert [e.id for e in events] == ["1", "2"]
        assert events[1].cancelled
        assert message == "Found 2 events"

    def test_fetch_organizer_events(self, backend, store):
        backend.add("GET", "/api/events/my-events", body=[event_json("5")])
        events, _ = store.fetch_organizer_events()
        assert [e.id for e in events] == ["5"]

    def test_fetch_event_not_found(self, backend, store):
        backend.add("GET", "/api/events/77", status=404, body={"message": "Event not found"})

        event, message = store.fetch_event("77")

        assert event is None
        assert message == "Event not found"
        assert store.error_status == 404

    def test_active_events_excludes_cancelled_and_past(self, backend, store):
        backend.add(
            "GET",
            "/api/events",
            body=[
                event_json("future"),
                event_json("past", eventDate="2025-01-01T10:00:00"),
                event_json("cancelled", isCancelled=True),
                event_json("inactive", isActive=False),
            ],
        )
        store.fetch_events()
        assert [e.id for e in store.active_events(NOW)] == ["future"]


class TestWrites:
    def test_payload_is_normalised(self):
        payload = build_event_payload(FORM)
        assert payload["title"] == "Jazz Night"
        assert payload["price"] == 150000.0

    def test_create_appends_locally(self, backend, store):
        backend.add("POST", "/api/events", status=201, body=event_json("9"))

        event, _ = store.create_event(FORM, NOW)

        assert event.id == "9"
        assert [e.id for e in store.events] == ["9"]
        assert backend.calls[0].json["eventDate"] == "2027-01-15T19:00:00"

    def test_invalid_form_makes_no_request(self, backend, store):
        event, message = store.create_event(dict(FORM, price=0), NOW)
        assert event is None
        assert message == "Price must be greater than zero"
        assert backend.calls == []

    def test_update_replaces_list_entry_and_selection(self, backend, store):
        backend.add("GET", "/api/events", body=[event_json("1"), event_json("2")])
        backend.add("GET", "/api/events/2", body=event_json("2"))
        backend.add("PUT", "/api/events/2", body=event_json("2", title="Jazz Night II"))

        store.fetch_events()
        store.fetch_event("2")
        event, _ = store.update_event("2", FORM, NOW)

        assert event.title == "Jazz Night II"
        assert [e.title for e in store.events] == ["Jazz Night", "Jazz Night II"]
        assert store.selected_event.title == "Jazz Night II"

    def test_delete_requires_confirmation(self, backend, store):
        success, _ = store.delete_event("1")
        assert not success
        assert backend.calls == []

    def test_delete_removes_locally(self, backend, store):
        backend.add("GET", "/api/events", body=[event_json("1"), event_json("2")])
        backend.add("DELETE", "/api/events/1", status=204)

        store.fetch_events()
        success, _ = store.delete_event("1", confirmed=True)

        assert success
        assert [e.id for e in store.events] == ["2"]

    def test_cancel_keeps_event_and_refetches(self, backend, store):
        backend.add("GET", "/api/events", body=[event_json("1")])
        backend.add(
            "GET",
            "/api/events",
            body=[event_json("1", isCancelled=True, cancellationTime="2026-10-19T12:30:00Z")],
        )
        backend.add("DELETE", "/api/events/cancel/1", body="Event cancelled", content_type="text/plain")

        store.fetch_events()
        success, message = store.cancel_event("1")

        assert success
        assert message == "Event cancelled"
        assert [c.path for c in backend.calls] == ["/api/events", "/api/events/cancel/1", "/api/events"]
        assert store.events[0].is_soft_cancelled()

    def test_failed_cancel_does_not_refetch(self, backend, store):
        backend.add("DELETE", "/api/events/cancel/1", status=403, body={"message": "Not your event"})

        success, message = store.cancel_event("1")

        assert not success
        assert message == "Not your event"
        assert len(backend.calls) == 1
