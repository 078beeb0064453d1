from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from domain_request.domain.errors import DomainDependencyError
from domain_request.domain.models import IdentityUser


@dataclass
class SupabaseIdentityProvider:
    """Identity lookups against a hosted GoTrue (Supabase auth) endpoint."""

    base_url: str
    anon_key: str
    timeout_seconds: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def _auth_url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/auth/v1/{path}"

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self.anon_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def get_user(self, *, access_token: str) -> IdentityUser | None:
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout_seconds) as client:
                response = await client.get(self._auth_url("user"), headers=self._headers(access_token))
        except httpx.HTTPError as exc:
            raise DomainDependencyError(f"identity provider is unreachable: {exc}") from exc

        if response.status_code in (401, 403):
            return None
        if response.is_error:
            raise DomainDependencyError(f"identity provider returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise DomainDependencyError("identity provider returned a non-JSON body") from exc
        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            return None
        email = data.get("email")
        return IdentityUser(user_id=str(user_id), email=str(email) if email else None)

    def authorize_url(self, *, provider: str, redirect_to: str) -> str:
        query = urlencode({"provider": provider, "redirect_to": redirect_to})
        return f"{self._auth_url('authorize')}?{query}"

    async def sign_out(self, *, access_token: str) -> None:
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout_seconds) as client:
                response = await client.post(self._auth_url("logout"), headers=self._headers(access_token))
        except httpx.HTTPError as exc:
            raise DomainDependencyError(f"identity provider is unreachable: {exc}") from exc
        # An already expired token counts as signed out.
        if response.is_error and response.status_code not in (401, 403):
            raise DomainDependencyError(f"sign-out failed with HTTP {response.status_code}")
