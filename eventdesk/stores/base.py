"""Shared state handling for the backend-backed stores."""

import logging
from contextlib import contextmanager
from typing import Dict, Generator, Optional

from eventdesk.api_client import TicketingApiClient
from eventdesk.errors import ApiError, EventDeskError, ValidationError


class BaseStore:
    """In-memory, re-fetchable cache over one slice of the backend.

    Each store owns its own error state; a failure in one never touches another.
    """

    def __init__(self, client: TicketingApiClient):
        self.client = client
        self.logger = logging.getLogger(self.__class__.__name__)
        self.error: Optional[str] = None
        self.error_status: Optional[int] = None
        self.field_errors: Dict[str, str] = {}
        self.last_error: Optional[EventDeskError] = None
        self._pending = 0

    @property
    def loading(self) -> bool:
        return self._pending > 0

    def clear_error(self) -> None:
        self.error = None
        self.error_status = None
        self.field_errors.clear()
        self.last_error = None

    @contextmanager
    def _request(self) -> Generator[None, None, None]:
        """Marks the store busy and resets the previous error for the duration of a call."""
        self._pending += 1
        self.clear_error()
        try:
            yield
        finally:
            self._pending -= 1

    def _fail(self, action: str, error: ApiError) -> str:
        self.error = error.message
        self.error_status = error.status_code
        self.last_error = error
        self.logger.error(
            f"{action} failed (status: {error.status_code}): {error.message}"
        )
        return error.message

    def _reject(self, field: str, message: str) -> str:
        """Record a local validation failure; no request is made."""
        self.clear_error()
        self.field_errors[field] = message
        self.last_error = ValidationError(field, message)
        self.error = message
        self.logger.debug(f"Rejected '{field}' locally: {message}")
        return message
