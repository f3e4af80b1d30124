"""Client for interacting with the ticketing platform's REST API."""

import json
import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from eventdesk.config import get_config_value
from eventdesk.errors import NetworkError, ServerError, error_for_response

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = {"password", "token"}


class TicketingApiClient:
    """Bearer-token client for the ticketing backend.

    Every non-2xx response is raised as an ApiError subclass; nothing is
    retried. Clients produced by for_token() share one pooled session.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        if not base_url:
            self.logger.critical("Missing API base URL at client initialization.")
            raise ValueError("Missing API base URL")

        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout or get_config_value("api.timeout_seconds", 15)
        if session is None:
            session = requests.Session()
            self._setup_session(session)
        self.session = session

    def _setup_session(self, session: requests.Session) -> None:
        """Setup the session with default headers and no automatic retries"""
        self.logger.debug("Setting up requests session with headers.")
        session.headers.update(
            {
                "User-Agent": get_config_value("api.user_agent", "EventDesk/1.0"),
                "Accept": "application/json",
            }
        )
        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

    def for_token(self, token: Optional[str]) -> "TicketingApiClient":
        """Return a client bound to another bearer token, sharing this session."""
        return TicketingApiClient(
            self.base_url, token=token, timeout=self.timeout, session=self.session
        )

    def _headers(self, has_body: bool) -> Dict[str, str]:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    @staticmethod
    def _redact(payload: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if not isinstance(payload, dict):
            return payload
        return {k: (REDACTED if k in SENSITIVE_KEYS else v) for k, v in payload.items()}

    def _log_api_call(
        self,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None,
        response: Optional[requests.Response] = None,
    ) -> None:
        """Log API calls in debug mode"""
        if not get_config_value("bot_settings.debug_mode", False):
            return

        log_data: Dict[str, Any] = {
            "method": method,
            "url": url,
            "payload": self._redact(payload),
            "status_code": response.status_code if response is not None else None,
            "response_body": None,
        }

        if response is not None:
            try:
                body = response.json() if response.text else None
                if isinstance(body, dict):
                    body = self._redact(body)
                log_data["response_body"] = body
            except ValueError:
                log_data["response_body"] = response.text[:1000]

        self.logger.debug(f"API Call: {json.dumps(log_data, indent=2, default=str)}")

    @staticmethod
    def _parse_body(response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            return response.json()
        return response.text

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform one request and return the decoded body.

        Returns None for 204/empty bodies, parsed JSON for JSON responses and
        text otherwise. Raises ApiError (or a subclass) on failure.
        """
        url = f"{self.base_url}{path}"
        self.logger.debug(f"{method} {url} params={params}")
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=self._headers(payload is not None),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            self.logger.error(f"Timeout calling {method} {url}: {str(e)}")
            raise NetworkError("Request timed out.") from e
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Network error calling {method} {url}: {str(e)}")
            raise NetworkError(f"Network error: {str(e)}") from e

        self._log_api_call(method, url, payload, response)

        if not 200 <= response.status_code < 300:
            error = error_for_response(response)
            self.logger.warning(
                f"{method} {url} failed with status {response.status_code}: {error.message[:200]}"
            )
            raise error

        try:
            return self._parse_body(response)
        except ValueError as e:
            self.logger.error(f"Failed to parse JSON from {method} {url}: {str(e)}")
            raise ServerError(
                f"Malformed response from server: {str(e)}", response.status_code
            ) from e

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, payload=payload)

    def put(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PUT", path, payload=payload)

    def patch(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return self.request("PATCH", path, params=params, payload=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
