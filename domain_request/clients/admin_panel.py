from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
import errno

import httpx

from domain_request.domain.dto import AdminPanelResponse
from domain_request.domain.errors import (
    UpstreamConnectionError,
    UpstreamTimeoutError,
    UpstreamTransportError,
    UpstreamUnavailableError,
)

USER_AGENT = "VinNesia-DomainForm/1.0"
API_KEY_HEADER = "x-api-key"


@dataclass
class HttpxAdminPanelClient:
    """Admin panel forwarder over a long-lived httpx.AsyncClient.

    The httpx client is created on startup (or lazily on first use) and closed
    on shutdown. `transport` lets tests plug in httpx.MockTransport.
    """

    transport: httpx.AsyncBaseTransport | None = None
    client: httpx.AsyncClient | None = None

    def _http(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(transport=self.transport)
        return self.client

    async def startup(self) -> None:
        self._http()

    async def shutdown(self) -> None:
        if self.client is None:
            return
        await self.client.aclose()
        self.client = None

    async def submit(
        self,
        *,
        url: str,
        api_key: str,
        payload: Mapping[str, object],
        timeout_seconds: float,
    ) -> AdminPanelResponse:
        client = self._http()
        headers = {
            "Content-Type": "application/json",
            API_KEY_HEADER: api_key,
            "User-Agent": USER_AGENT,
        }
        try:
            # httpx timeouts are per phase; wait_for bounds the whole exchange.
            response = await asyncio.wait_for(
                client.post(
                    url,
                    json=dict(payload),
                    headers=headers,
                    timeout=httpx.Timeout(timeout_seconds),
                ),
                timeout=timeout_seconds,
            )
        except (httpx.TimeoutException, TimeoutError) as exc:
            raise UpstreamTimeoutError(f"admin panel did not answer within {timeout_seconds:g}s") from exc
        except httpx.InvalidURL as exc:
            raise UpstreamConnectionError(f"invalid admin panel url: {exc}") from exc
        except httpx.TransportError as exc:
            raise translate_transport_error(exc) from exc

        return AdminPanelResponse(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            text=response.text,
        )


def translate_transport_error(exc: httpx.TransportError) -> UpstreamTransportError:
    if isinstance(exc, httpx.ConnectError) and _is_connection_refused(exc):
        return UpstreamUnavailableError(f"admin panel refused the connection: {exc}")
    return UpstreamConnectionError(f"admin panel request failed: {type(exc).__name__}: {exc}")


def _is_connection_refused(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        if "connection refused" in str(current).lower():
            return True
        current = current.__cause__ or current.__context__
    return False
