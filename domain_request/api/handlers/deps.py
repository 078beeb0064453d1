from __future__ import annotations

from dataclasses import dataclass

from domain_request.domain.contracts import AdminPanelClient, IdentityProvider
from domain_request.services.dashboard import DashboardService
from domain_request.services.submission_flow import SubmissionFlow
from domain_request.settings import RelaySettings


@dataclass(frozen=True)
class ApiDeps:
    relay_settings: RelaySettings
    admin_client: AdminPanelClient
    identity: IdentityProvider | None = None
    submission_flow: SubmissionFlow | None = None
    dashboard: DashboardService | None = None
