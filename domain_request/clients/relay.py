from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging

import httpx

from domain_request.domain.contracts import AdminPanelClient
from domain_request.domain.dto import RelayNotifyResult
from domain_request.domain.use_cases.relay import relay_submission
from domain_request.settings import RelaySettings

logger = logging.getLogger("client")


@dataclass
class HttpRelayNotifier:
    """Calls a deployed relay endpoint the way the browser form does."""

    endpoint_url: str
    timeout_seconds: float = 15.0
    transport: httpx.AsyncBaseTransport | None = None

    async def notify(self, *, payload: Mapping[str, object]) -> RelayNotifyResult:
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout_seconds) as client:
                response = await client.post(
                    self.endpoint_url,
                    json=dict(payload),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.warning("relay request failed", extra={"error_type": type(exc).__name__})
            return RelayNotifyResult(success=False, error=str(exc) or type(exc).__name__)

        if response.is_error:
            return RelayNotifyResult(success=False, error=f"HTTP {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as exc:
            return RelayNotifyResult(success=False, error=f"relay response is not JSON: {exc}")
        return RelayNotifyResult(success=True, data=data if isinstance(data, dict) else {"data": data})


@dataclass
class LocalRelayNotifier:
    """Runs the relay use case in process when no relay endpoint is deployed separately."""

    settings: RelaySettings
    admin_client: AdminPanelClient

    async def notify(self, *, payload: Mapping[str, object]) -> RelayNotifyResult:
        result = await relay_submission(
            dict(payload),
            settings=self.settings,
            admin_client=self.admin_client,
        )
        if result.success:
            return RelayNotifyResult(success=True, data=result.body)
        error = result.body.get("error") if result.body else None
        return RelayNotifyResult(success=False, error=f"HTTP {result.status_code}: {error}")
