"""Event CRUD plus the organizer's soft-cancel."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from eventdesk.errors import ApiError
from eventdesk.models import Event
from eventdesk.stores.base import BaseStore
from eventdesk.validators import validate_event_form

EVENTS_PATH = "/api/events"


def build_event_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise form input into the backend's event body."""
    event_date = data.get("eventDate")
    if isinstance(event_date, datetime):
        event_date = event_date.isoformat()
    return {
        "title": str(data.get("title", "")).strip(),
        "description": str(data.get("description", "")).strip(),
        "eventDate": event_date,
        "location": str(data.get("location", "")).strip(),
        "price": float(Decimal(str(data.get("price")))),
    }


class EventStore(BaseStore):
    """Caches events and the selected event; create/update/delete patch the list locally."""

    def __init__(self, client):
        super().__init__(client)
        self.events: List[Event] = []
        self.selected_event: Optional[Event] = None

    def _load_list(self, path: str, action: str) -> Tuple[Optional[List[Event]], str]:
        with self._request():
            try:
                data = self.client.get(path)
            except ApiError as e:
                return None, self._fail(action, e)
        self.events = [Event.from_dict(e) for e in data] if isinstance(data, list) else []
        self.logger.info(f"{action}: {len(self.events)} events")
        return self.events, f"Found {len(self.events)} events"

    def fetch_events(self) -> Tuple[Optional[List[Event]], str]:
        return self._load_list(EVENTS_PATH, "Fetching events")

    def fetch_organizer_events(self) -> Tuple[Optional[List[Event]], str]:
        return self._load_list(f"{EVENTS_PATH}/my-events", "Fetching organizer events")

    def fetch_event(self, event_id: str) -> Tuple[Optional[Event], str]:
        with self._request():
            try:
                data = self.client.get(f"{EVENTS_PATH}/{event_id}")
            except ApiError as e:
                return None, self._fail(f"Fetching event {event_id}", e)
        self.selected_event = Event.from_dict(data or {})
        return self.selected_event, "Event loaded"

    def create_event(
        self, data: Dict[str, Any], now: Optional[datetime] = None
    ) -> Tuple[Optional[Event], str]:
        is_valid, message = validate_event_form(data, now)
        if not is_valid:
            return None, self._reject("event", message)

        with self._request():
            try:
                created = self.client.post(EVENTS_PATH, payload=build_event_payload(data))
            except ApiError as e:
                return None, self._fail("Creating event", e)

        event = Event.from_dict(created or {})
        self.events = self.events + [event]
        self.logger.info(f"Created event '{event.title}' (id: {event.id})")
        return event, "Event created"

    def update_event(
        self, event_id: str, data: Dict[str, Any], now: Optional[datetime] = None
    ) -> Tuple[Optional[Event], str]:
        is_valid, message = validate_event_form(data, now)
        if not is_valid:
            return None, self._reject("event", message)

        with self._request():
            try:
                updated = self.client.put(
                    f"{EVENTS_PATH}/{event_id}", payload=build_event_payload(data)
                )
            except ApiError as e:
                return None, self._fail(f"Updating event {event_id}", e)

        event = Event.from_dict(updated or {})
        self.events = [event if e.id == str(event_id) else e for e in self.events]
        if self.selected_event is not None and self.selected_event.id == str(event_id):
            self.selected_event = event
        self.logger.info(f"Updated event {event_id}")
        return event, "Event updated"

    def delete_event(self, event_id: str, confirmed: bool = False) -> Tuple[bool, str]:
        """Hard delete. Distinct from cancel_event, which keeps the event."""
        if not confirmed:
            return False, self._reject(
                "confirmation", "Deleting an event must be confirmed first"
            )

        with self._request():
            try:
                self.client.delete(f"{EVENTS_PATH}/{event_id}")
            except ApiError as e:
                return False, self._fail(f"Deleting event {event_id}", e)

        self.events = [e for e in self.events if e.id != str(event_id)]
        if self.selected_event is not None and self.selected_event.id == str(event_id):
            self.selected_event = None
        self.logger.info(f"Deleted event {event_id}")
        return True, "Event deleted"

    def cancel_event(self, event_id: str) -> Tuple[bool, str]:
        """Soft-cancel, then reload the list so the cancelled flag and time come from the backend."""
        with self._request():
            try:
                self.client.delete(f"{EVENTS_PATH}/cancel/{event_id}")
            except ApiError as e:
                return False, self._fail(f"Cancelling event {event_id}", e)

        self.logger.info(f"Cancelled event {event_id}")
        events, message = self.fetch_events()
        if events is None:
            return True, f"Event cancelled, but reloading events failed: {message}"
        return True, "Event cancelled"

    def active_events(self, now: Optional[datetime] = None) -> List[Event]:
        return [e for e in self.events if e.is_upcoming_and_active(now)]
