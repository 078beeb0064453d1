from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from domain_request.domain.dto import AdminPanelResponse, RelayNotifyResult
from domain_request.domain.models import IdentityUser, Submission, SubmissionListQuery


@runtime_checkable
class SubmissionRepository(Protocol):
    """Hosted database contract: one submissions table, insert and owner-scoped reads."""

    async def insert_submission(
        self,
        *,
        name: str,
        email: str,
        purpose: str,
        platform_link: str,
        user_id: str | None,
        status: str,
    ) -> Submission: ...

    async def list_submissions(self, *, query: SubmissionListQuery) -> list[Submission]: ...


@runtime_checkable
class AdminPanelClient(Protocol):
    """Forwarding contract for the external admin panel.

    Any HTTP status is returned as a response; only transport-level failures
    raise, as subclasses of UpstreamTransportError.
    """

    async def submit(
        self,
        *,
        url: str,
        api_key: str,
        payload: Mapping[str, object],
        timeout_seconds: float,
    ) -> AdminPanelResponse: ...


@runtime_checkable
class IdentityProvider(Protocol):
    async def get_user(self, *, access_token: str) -> IdentityUser | None: ...

    def authorize_url(self, *, provider: str, redirect_to: str) -> str: ...

    async def sign_out(self, *, access_token: str) -> None: ...


@runtime_checkable
class RelayNotifier(Protocol):
    async def notify(self, *, payload: Mapping[str, object]) -> RelayNotifyResult: ...
