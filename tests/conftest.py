"""
Shared fixtures: a scripted stand-in for the ticketing backend.

The API client gets a mocked requests.Session whose request() is answered
from canned responses registered per (method, path). Every call is recorded
so tests can assert exactly which requests went out.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest
import requests

from eventdesk.api_client import TicketingApiClient

BASE_URL = "http://backend.test"


def make_response(
    status_code: int = 200,
    body: Any = None,
    content_type: Optional[str] = "application/json",
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if body is None:
        response._content = b""
    elif isinstance(body, (dict, list)):
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = str(body).encode("utf-8")
    if content_type and body is not None:
        response.headers["Content-Type"] = content_type
    response.encoding = "utf-8"
    return response


@dataclass
class Call:
    method: str
    path: str
    params: Optional[Dict[str, Any]]
    json: Optional[Dict[str, Any]]
    headers: Dict[str, str]


class FakeBackend:
    """Replays registered responses; the last response for a route repeats."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.calls: List[Call] = []

    def add(self, method: str, path: str, status: int = 200, body: Any = None, **kwargs) -> None:
        self.routes.setdefault((method, path), []).append(
            make_response(status, body, **kwargs)
        )

    def fail(self, method: str, path: str, exception: Exception) -> None:
        self.routes.setdefault((method, path), []).append(exception)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        assert url.startswith(BASE_URL), url
        path = url[len(BASE_URL):]
        self.calls.append(Call(method, path, params, json, dict(headers or {})))
        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {path}")
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def calls_to(self, method: str, path: str) -> List[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http_session(backend):
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = backend.request
    return session


@pytest.fixture
def api_client(http_session):
    return TicketingApiClient(BASE_URL, token="test-token", timeout=5, session=http_session)


@pytest.fixture
def anonymous_client(http_session):
    return TicketingApiClient(BASE_URL, timeout=5, session=http_session)


def report_json(report_id="1", status="PENDING", comments=None, **extra) -> Dict[str, Any]:
    data = {
        "id": report_id,
        "category": "PAYMENT",
        "status": status,
        "description": "Charged twice for one ticket",
        "userEmail": "attendee@example.com",
        "comments": comments or [],
        "createdAt": "2026-10-01T09:00:00Z",
    }
    data.update(extra)
    return data


def transaction_json(transaction_id, type="TOP_UP", amount=100000, status="SUCCESS", **extra):
    data = {
        "id": transaction_id,
        "type": type,
        "amount": amount,
        "status": status,
        "timestamp": "2026-10-01T09:00:00Z",
    }
    data.update(extra)
    return data


def event_json(event_id="10", **extra) -> Dict[str, Any]:
    data = {
        "id": event_id,
        "title": "Jazz Night",
        "description": "Live jazz",
        "eventDate": "2027-01-15T19:00:00",
        "location": "Jakarta",
        "price": 150000,
        "isActive": True,
        "isCancelled": False,
    }
    data.update(extra)
    return data
