import asyncio
import os
import sys

import httpx
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from glass_pricing.clients.backend import BackendClient
from glass_pricing.services.exceptions import DownstreamServiceError


def _client_with(handler) -> BackendClient:
    client = BackendClient("https://catalog.example.com/api/", token="secret")
    client._client = httpx.AsyncClient(
        base_url="https://catalog.example.com/api",
        transport=httpx.MockTransport(handler),
        headers=client._headers,
    )
    return client


def test_missing_base_url_forces_mock_mode() -> None:
    assert BackendClient(None, use_mock_data=False).use_mock_data is True


def test_mock_mode_refuses_http_calls() -> None:
    client = BackendClient(None)
    with pytest.raises(RuntimeError):
        asyncio.run(client.get("/cutting-rates"))


def test_get_sends_bearer_token_and_params() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["tenant"] = request.url.params.get("tenantId")
        return httpx.Response(200, json=[{"subtype": "LOGO"}])

    client = _client_with(handler)
    client.use_mock_data = False

    data = asyncio.run(client.get("/operation-prices", {"tenantId": "glass-house"}))

    assert data == [{"subtype": "LOGO"}]
    assert seen == {"auth": "Bearer secret", "tenant": "glass-house"}


def test_error_status_becomes_downstream_error() -> None:
    client = _client_with(lambda request: httpx.Response(503, json={"error": "down"}))
    client.use_mock_data = False

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(client.post("/cutting-rates", {"tenantId": "glass-house"}))
    assert excinfo.value.status_code == 503


def test_connection_failure_becomes_downstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _client_with(handler)
    client.use_mock_data = False

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(client.get("/cutting-rates"))
    assert excinfo.value.status_code is None
