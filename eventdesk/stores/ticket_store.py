"""Ticket catalogue: the ticket types organizers put on sale for their events."""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from eventdesk.errors import ApiError
from eventdesk.models import Ticket
from eventdesk.stores.base import BaseStore
from eventdesk.validators import validate_ticket_form

TICKETS_PATH = "/api/tickets"


def build_ticket_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": str(data.get("name", "")).strip(),
        "eventId": str(data.get("eventId", "")).strip(),
        "category": data.get("category"),
        "price": float(Decimal(str(data.get("price")))),
        "quota": int(Decimal(str(data.get("quota")))),
    }


class TicketStore(BaseStore):
    """Caches the ticket list and the selected ticket; writes patch the list locally."""

    def __init__(self, client):
        super().__init__(client)
        self.tickets: List[Ticket] = []
        self.selected_ticket: Optional[Ticket] = None

    def fetch_tickets(self, event_id: Optional[str] = None) -> Tuple[Optional[List[Ticket]], str]:
        """Load every ticket. With event_id, return only that event's tickets.

        The backend has no per-event listing; the whole catalogue is cached and
        filtered here.
        """
        with self._request():
            try:
                data = self.client.get(TICKETS_PATH)
            except ApiError as e:
                return None, self._fail("Fetching tickets", e)
        self.tickets = [Ticket.from_dict(t) for t in data] if isinstance(data, list) else []
        tickets = self.tickets
        if event_id is not None:
            tickets = [t for t in tickets if t.event_id == str(event_id)]
        self.logger.info(f"Fetched {len(self.tickets)} tickets")
        return tickets, f"Found {len(tickets)} tickets"

    def fetch_ticket(self, ticket_id: str) -> Tuple[Optional[Ticket], str]:
        with self._request():
            try:
                data = self.client.get(f"{TICKETS_PATH}/{ticket_id}")
            except ApiError as e:
                return None, self._fail(f"Fetching ticket {ticket_id}", e)
        self.selected_ticket = Ticket.from_dict(data or {})
        return self.selected_ticket, "Ticket loaded"

    def create_ticket(self, data: Dict[str, Any]) -> Tuple[Optional[Ticket], str]:
        is_valid, message = validate_ticket_form(data)
        if not is_valid:
            return None, self._reject("ticket", message)

        with self._request():
            try:
                created = self.client.post(TICKETS_PATH, payload=build_ticket_payload(data))
            except ApiError as e:
                return None, self._fail("Creating ticket", e)

        ticket = Ticket.from_dict(created or {})
        self.tickets = self.tickets + [ticket]
        self.logger.info(f"Created ticket '{ticket.name}' (id: {ticket.id}) for event {ticket.event_id}")
        return ticket, "Ticket created"

    def update_ticket(self, ticket_id: str, data: Dict[str, Any]) -> Tuple[Optional[Ticket], str]:
        is_valid, message = validate_ticket_form(data)
        if not is_valid:
            return None, self._reject("ticket", message)

        with self._request():
            try:
                updated = self.client.put(
                    f"{TICKETS_PATH}/{ticket_id}", payload=build_ticket_payload(data)
                )
            except ApiError as e:
                return None, self._fail(f"Updating ticket {ticket_id}", e)

        ticket = Ticket.from_dict(updated or {})
        self.tickets = [ticket if t.id == str(ticket_id) else t for t in self.tickets]
        if self.selected_ticket is not None and self.selected_ticket.id == str(ticket_id):
            self.selected_ticket = ticket
        self.logger.info(f"Updated ticket {ticket_id}")
        return ticket, "Ticket updated"

    def delete_ticket(self, ticket_id: str, confirmed: bool = False) -> Tuple[bool, str]:
        if not confirmed:
            return False, self._reject(
                "confirmation", "Deleting a ticket must be confirmed first"
            )

        with self._request():
            try:
                self.client.delete(f"{TICKETS_PATH}/{ticket_id}")
            except ApiError as e:
                return False, self._fail(f"Deleting ticket {ticket_id}", e)

        self.tickets = [t for t in self.tickets if t.id != str(ticket_id)]
        if self.selected_ticket is not None and self.selected_ticket.id == str(ticket_id):
            self.selected_ticket = None
        self.logger.info(f"Deleted ticket {ticket_id}")
        return True, "Ticket deleted"
