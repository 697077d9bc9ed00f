"""Tests for transport normalization in ApiClient."""

import asyncio

import httpx
import pytest

from rsvp_gateway.entities import TransportResponse
from rsvp_gateway.errors import ErrorCategory, TypedError
from rsvp_gateway.services import ApiClient, parse_response


class SlowTransport:
    async def issue(self, method, path, body=None, headers=None, params=None):
        await asyncio.sleep(1)
        return TransportResponse(status=200)

    async def close(self):
        pass


class RefusingTransport:
    async def issue(self, method, path, body=None, headers=None, params=None):
        raise ConnectionRefusedError("Connection refused")

    async def close(self):
        pass


class TestParseResponse:
    def test_unwraps_data_envelope(self):
        response = TransportResponse(
            status=201,
            content=b'{"data": {"id": "1"}, "message": "Created"}',
            content_type="application/json",
        )
        result = parse_response(response)
        assert result.value == {"id": "1"}
        assert result.status == 201
        assert result.message == "Created"

    def test_body_without_envelope_is_value(self):
        response = TransportResponse(status=200, content=b'[{"id": "1"}]', content_type="application/json")
        assert parse_response(response).value == [{"id": "1"}]

    def test_text_body(self):
        response = TransportResponse(status=200, content=b"id,name", content_type="text/csv")
        assert parse_response(response).value == "id,name"

    def test_malformed_json_is_parse_error(self):
        response = TransportResponse(status=200, content=b"{not json", content_type="application/json")
        with pytest.raises(TypedError) as exc_info:
            parse_response(response)
        assert exc_info.value.status_code == 200
        assert exc_info.value.message == "Failed to parse response"
        assert exc_info.value.category == ErrorCategory.PARSE_ERROR

    def test_failure_status_carries_server_fields(self):
        response = TransportResponse(
            status=422,
            content=b'{"message": "Invalid", "code": "VALIDATION", "errors": {"email": "is invalid"}}',
            content_type="application/json",
        )
        with pytest.raises(TypedError) as exc_info:
            parse_response(response)
        error = exc_info.value
        assert error.status_code == 422
        assert error.message == "Invalid"
        assert error.code == "VALIDATION"
        assert error.details == {"email": ["is invalid"]}

    def test_failure_without_message_uses_status_line(self):
        response = TransportResponse(status=503, content=b"", content_type="text/plain", reason="Service Unavailable")
        with pytest.raises(TypedError) as exc_info:
            parse_response(response)
        assert exc_info.value.message == "HTTP 503: Service Unavailable"

    def test_redirect_is_not_success(self):
        response = TransportResponse(status=302, content=b"", content_type="text/html", reason="Found")
        with pytest.raises(TypedError) as exc_info:
            parse_response(response)
        assert exc_info.value.status_code == 302
        assert exc_info.value.message == "HTTP 302: Found"

    def test_no_content_is_success(self):
        assert parse_response(TransportResponse(status=204)).value == ""

    def test_error_key_is_used_as_message(self):
        response = TransportResponse(
            status=409,
            content=b'{"error": "An RSVP already exists for this email address"}',
            content_type="application/json",
        )
        with pytest.raises(TypedError) as exc_info:
            parse_response(response)
        assert exc_info.value.message == "An RSVP already exists for this email address"


class TestApiClient:
    async def test_get_through_httpx(self, api_client, upstream):
        upstream.seed(name="Ada")
        response = await api_client.get("/rsvps")
        assert response.status == 200
        assert response.value[0]["name"] == "Ada"

    async def test_params_are_stringified(self, api_client, upstream):
        upstream.seed(attendance="yes")
        upstream.seed(attendance="no")
        response = await api_client.get("/rsvps", params={"attendance": "no", "skip": None})
        assert [i["attendance"] for i in response.value] == ["no"]

    async def test_connect_error_is_network_error(self, api_client, upstream):
        upstream.fail("GET", "/rsvps", httpx.ConnectError("connection refused"))
        with pytest.raises(TypedError) as exc_info:
            await api_client.get("/rsvps")
        assert exc_info.value.status_code == 0
        assert exc_info.value.code == "NETWORK_ERROR"
        assert "connection refused" in exc_info.value.message

    async def test_os_error_is_network_error(self):
        client = ApiClient(RefusingTransport())
        with pytest.raises(TypedError) as exc_info:
            await client.get("/rsvps")
        assert exc_info.value.status_code == 0

    async def test_timeout_is_network_error(self):
        client = ApiClient(SlowTransport(), timeout=0.01)
        with pytest.raises(TypedError) as exc_info:
            await client.get("/rsvps")
        assert exc_info.value.status_code == 0
        assert exc_info.value.category == ErrorCategory.NETWORK

    async def test_per_call_zero_timeout_is_not_replaced(self):
        client = ApiClient(SlowTransport(), timeout=30.0)
        with pytest.raises(TypedError) as exc_info:
            await asyncio.wait_for(client.get("/rsvps", timeout=0), timeout=0.5)
        assert exc_info.value.status_code == 0

    async def test_not_found(self, api_client):
        with pytest.raises(TypedError) as exc_info:
            await api_client.get("/rsvps/404")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "RSVP not found"
