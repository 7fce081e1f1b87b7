import asyncio
import json
import os
import sys

import httpx
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from agent_portal.clients.backend import BookingBackendClient
from agent_portal.services.exceptions import DownstreamServiceError


def _client(handler) -> BookingBackendClient:
    return BookingBackendClient(
        "https://backend.example.lk/api/",
        use_mock_data=False,
        transport=httpx.MockTransport(handler),
    )


def test_post_sends_bearer_token_and_json_body() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "data": {"created": [], "failed": []}})

    client = _client(handler)
    body = asyncio.run(client.post("/appointments/bulk", [{"patientName": "John"}], token="abc"))

    assert body["success"] is True
    assert seen["url"] == "https://backend.example.lk/api/appointments/bulk"
    assert seen["auth"] == "Bearer abc"
    assert seen["body"] == [{"patientName": "John"}]


def test_request_without_token_has_no_authorization_header() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[])

    client = _client(handler)
    asyncio.run(client.get("/payments", {"status": "paid"}))

    assert seen["auth"] is None
    assert seen["params"] == {"status": "paid"}


def test_error_status_carries_backend_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"success": False, "message": "Invalid doctor"})

    client = _client(handler)

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(client.post("/appointments/bulk", [], token="abc"))

    assert excinfo.value.status_code == 422
    assert excinfo.value.backend_message == "Invalid doctor"


def test_error_status_without_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Internal Server Error")

    client = _client(handler)

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(client.get("/doctors"))

    assert excinfo.value.status_code == 500
    assert excinfo.value.backend_message is None


def test_connection_failure_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(client.get("/doctors"))

    assert str(excinfo.value) == "Unable to reach booking backend"
    assert excinfo.value.status_code is None


def test_malformed_json_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    client = _client(handler)

    with pytest.raises(DownstreamServiceError):
        asyncio.run(client.get("/doctors"))


def test_mock_mode_refuses_http_calls() -> None:
    client = BookingBackendClient(None, use_mock_data=False)

    assert client.use_mock_data is True
    with pytest.raises(RuntimeError):
        asyncio.run(client.get("/doctors"))
