"""Transport behavior: headers, body decoding and error mapping."""

import pytest
import requests

from conftest import make_response
from eventdesk.errors import (
    AuthorizationError,
    NetworkError,
    NotFoundError,
    ServerError,
    extract_error_message,
)


class TestRequests:
    def test_bearer_token_and_json_headers(self, backend, api_client):
        backend.add("POST", "/api/topup", body={"newBalance": 1})

        api_client.post("/api/topup", payload={"amount": 1})

        call = backend.calls[0]
        assert call.headers["Authorization"] == "Bearer test-token"
        assert call.headers["Content-Type"] == "application/json"
        assert call.json == {"amount": 1}

    def test_no_authorization_header_without_token(self, backend, anonymous_client):
        backend.add("GET", "/api/events", body=[])

        anonymous_client.get("/api/events")

        assert "Authorization" not in backend.calls[0].headers
        assert "Content-Type" not in backend.calls[0].headers

    def test_for_token_shares_session(self, backend, anonymous_client):
        backend.add("GET", "/api/auth/me", body={})

        authed = anonymous_client.for_token("other")
        authed.get("/api/auth/me")

        assert authed.session is anonymous_client.session
        assert backend.calls[0].headers["Authorization"] == "Bearer other"

    def test_patch_sends_query_params(self, backend, api_client):
        backend.add("PATCH", "/api/admin/reports/4/status", status=204)

        assert api_client.patch("/api/admin/reports/4/status", params={"status": "RESOLVED"}) is None
        assert backend.calls[0].params == {"status": "RESOLVED"}


class TestBodyDecoding:
    def test_json_body(self, backend, api_client):
        backend.add("GET", "/api/events", body=[{"id": 1}])
        assert api_client.get("/api/events") == [{"id": 1}]

    def test_empty_body_is_none(self, backend, api_client):
        backend.add("DELETE", "/api/events/1", status=200)
        assert api_client.delete("/api/events/1") is None

    def test_text_body(self, backend, api_client):
        backend.add("DELETE", "/api/events/cancel/1", body="Event cancelled", content_type="text/plain")
        assert api_client.delete("/api/events/cancel/1") == "Event cancelled"

    def test_malformed_json_is_server_error(self, backend, api_client):
        backend.add("GET", "/api/events", body="{not json", content_type="application/json")
        with pytest.raises(ServerError):
            api_client.get("/api/events")


class TestErrors:
    @pytest.mark.parametrize(
        "status, error_type",
        [(401, AuthorizationError), (403, AuthorizationError), (404, NotFoundError), (500, ServerError), (409, ServerError)],
    )
    def test_status_maps_to_error_type(self, backend, api_client, status, error_type):
        backend.add("GET", "/api/transactions", status=status, body={"message": "nope"})

        with pytest.raises(error_type) as excinfo:
            api_client.get("/api/transactions")

        assert excinfo.value.status_code == status
        assert excinfo.value.message == "nope"

    def test_unauthenticated_flag(self, backend, api_client):
        backend.add("GET", "/api/auth/me", status=401, body={"message": "expired"})
        with pytest.raises(AuthorizationError) as excinfo:
            api_client.get("/api/auth/me")
        assert excinfo.value.is_unauthenticated

    def test_timeout_becomes_network_error(self, backend, api_client):
        backend.fail("GET", "/api/events", requests.exceptions.Timeout("slow"))
        with pytest.raises(NetworkError) as excinfo:
            api_client.get("/api/events")
        assert excinfo.value.status_code is None
        assert excinfo.value.message == "Request timed out."

    def test_connection_error_becomes_network_error(self, backend, api_client):
        backend.fail("GET", "/api/events", requests.exceptions.ConnectionError("refused"))
        with pytest.raises(NetworkError, match="Network error"):
            api_client.get("/api/events")

    def test_no_retry_on_server_error(self, backend, api_client):
        backend.add("GET", "/api/events", status=503, body="down", content_type="text/plain")
        with pytest.raises(ServerError):
            api_client.get("/api/events")
        assert len(backend.calls) == 1


class TestExtractErrorMessage:
    def test_json_message_first(self):
        response = make_response(400, {"message": "Insufficient balance", "error": "Bad Request"})
        assert extract_error_message(response) == "Insufficient balance"

    def test_json_without_message_uses_generic(self):
        response = make_response(400, {"error": "Bad Request"})
        assert extract_error_message(response) == "HTTP error! status: 400"

    def test_json_with_empty_message_uses_generic(self):
        response = make_response(409, {"message": ""})
        assert extract_error_message(response) == "HTTP error! status: 409"

    def test_plain_text_body(self):
        response = make_response(500, "Internal failure", content_type="text/plain")
        assert extract_error_message(response) == "Internal failure"

    def test_generic_message_for_empty_body(self):
        assert extract_error_message(make_response(502)) == "HTTP error! status: 502"
