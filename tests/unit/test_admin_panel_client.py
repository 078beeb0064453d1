import asyncio
import json

import httpx
import pytest

from domain_request.clients.admin_panel import HttpxAdminPanelClient
from domain_request.domain.errors import (
    UpstreamConnectionError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

ADMIN_URL = "https://admin.example.test/api/applications"


def _submit(client: HttpxAdminPanelClient, timeout_seconds: float = 5.0):
    async def scenario():
        try:
            return await client.submit(
                url=ADMIN_URL,
                api_key="secret",
                payload={"name": "Ana", "email": "ana@x.com"},
                timeout_seconds=timeout_seconds,
            )
        finally:
            await client.shutdown()

    return asyncio.run(scenario())


@pytest.mark.unit
def test_submit_posts_json_with_api_key_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, text='{"id": 1}')

    response = _submit(HttpxAdminPanelClient(transport=httpx.MockTransport(handler)))

    assert response.status_code == 201
    assert response.ok is True
    assert response.text == '{"id": 1}'

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == ADMIN_URL
    assert request.headers["x-api-key"] == "secret"
    assert request.headers["user-agent"] == "VinNesia-DomainForm/1.0"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"name": "Ana", "email": "ana@x.com"}


@pytest.mark.unit
def test_error_statuses_are_returned_not_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="slow down")

    response = _submit(HttpxAdminPanelClient(transport=httpx.MockTransport(handler)))

    assert response.status_code == 429
    assert response.ok is False
    assert response.reason_phrase == "Too Many Requests"


@pytest.mark.unit
def test_refused_connection_maps_to_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

    with pytest.raises(UpstreamUnavailableError):
        _submit(HttpxAdminPanelClient(transport=httpx.MockTransport(handler)))


@pytest.mark.unit
def test_other_network_failures_map_to_connection_error() -> None:
    def dns_failure(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Name or service not known", request=request)

    def reset(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadError("connection reset by peer", request=request)

    with pytest.raises(UpstreamConnectionError):
        _submit(HttpxAdminPanelClient(transport=httpx.MockTransport(dns_failure)))
    with pytest.raises(UpstreamConnectionError):
        _submit(HttpxAdminPanelClient(transport=httpx.MockTransport(reset)))


@pytest.mark.unit
def test_httpx_timeout_maps_to_timeout_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamTimeoutError):
        _submit(HttpxAdminPanelClient(transport=httpx.MockTransport(handler)))


@pytest.mark.unit
def test_whole_exchange_is_bounded_by_timeout() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200)

    with pytest.raises(UpstreamTimeoutError):
        _submit(HttpxAdminPanelClient(transport=httpx.MockTransport(handler)), timeout_seconds=0.05)
