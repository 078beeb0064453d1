from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlencode

from domain_request.domain.dto import AdminPanelResponse, RelayNotifyResult
from domain_request.domain.errors import UpstreamTransportError
from domain_request.domain.models import IdentityUser


@dataclass
class StubAdminPanelClient:
    """Records forwarded payloads and answers with a fixed response or error."""

    status_code: int = 200
    text: str = '{"received": true}'
    reason_phrase: str = "OK"
    error: UpstreamTransportError | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def submit(
        self,
        *,
        url: str,
        api_key: str,
        payload: Mapping[str, object],
        timeout_seconds: float,
    ) -> AdminPanelResponse:
        self.calls.append(
            {
                "url": url,
                "api_key": api_key,
                "payload": dict(payload),
                "timeout_seconds": timeout_seconds,
            }
        )
        if self.error is not None:
            raise self.error
        return AdminPanelResponse(
            status_code=self.status_code,
            reason_phrase=self.reason_phrase,
            text=self.text,
        )


@dataclass
class StubIdentityProvider:
    users: dict[str, IdentityUser] = field(default_factory=dict)
    signed_out: list[str] = field(default_factory=list)

    async def get_user(self, *, access_token: str) -> IdentityUser | None:
        return self.users.get(access_token)

    def authorize_url(self, *, provider: str, redirect_to: str) -> str:
        return f"stub://auth/authorize?{urlencode({'provider': provider, 'redirect_to': redirect_to})}"

    async def sign_out(self, *, access_token: str) -> None:
        self.users.pop(access_token, None)
        self.signed_out.append(access_token)


@dataclass
class StubRelayNotifier:
    success: bool = True
    error: str | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def notify(self, *, payload: Mapping[str, object]) -> RelayNotifyResult:
        self.calls.append(dict(payload))
        if not self.success:
            return RelayNotifyResult(success=False, error=self.error or "relay unavailable")
        return RelayNotifyResult(success=True, data={"success": True})
