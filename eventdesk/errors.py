"""Exception types shared by the API client, stores and commands."""

import json
from typing import Optional

import requests


class EventDeskError(Exception):
    """Base class for all EventDesk errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EventDeskError):
    """Input rejected locally, before any network call."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class ApiError(EventDeskError):
    """Non-2xx response or transport failure from the ticketing backend."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthorizationError(ApiError):
    """HTTP 401 or 403."""

    @property
    def is_unauthenticated(self) -> bool:
        return self.status_code == 401


class NotFoundError(ApiError):
    """HTTP 404."""


class ServerError(ApiError):
    """Any other non-2xx status."""


class NetworkError(ApiError):
    """The request never produced a response (timeout, refused connection, ...)."""


def extract_error_message(response: requests.Response) -> str:
    """
    Pick a human-readable message out of a failed response.

    Order: the JSON body's "message" field, then the raw text of a
    non-JSON body, then a generic message naming the HTTP status.
    """
    fallback = f"HTTP error! status: {response.status_code}"
    text = response.text or ""
    if not text.strip():
        return fallback
    try:
        data = json.loads(text)
    except ValueError:
        return text

    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return fallback


def error_for_response(response: requests.Response) -> ApiError:
    """Build the ApiError subclass matching the response status."""
    message = extract_error_message(response)
    status = response.status_code
    if status in (401, 403):
        return AuthorizationError(message, status)
    if status == 404:
        return NotFoundError(message, status)
    return ServerError(message, status)
