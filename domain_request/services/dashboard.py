from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging

from domain_request.domain.contracts import SubmissionRepository
from domain_request.domain.dto import DashboardView
from domain_request.domain.models import IdentityUser, OwnerMatch, SortOrder, SubmissionListQuery
from domain_request.domain.use_cases.dashboard import build_dashboard_view
from domain_request.services.auth import AuthSession

COMPONENT_ID = "client.dashboard.load"

logger = logging.getLogger("client")


@dataclass
class DashboardService:
    repository: SubmissionRepository

    async def load(self, user: IdentityUser, *, match_by: OwnerMatch = OwnerMatch.USER_ID) -> DashboardView:
        if match_by == OwnerMatch.EMAIL:
            if not user.email:
                return build_dashboard_view([])
            query = SubmissionListQuery(email=user.email, sort_order=SortOrder.DESC)
        else:
            query = SubmissionListQuery(user_id=user.user_id, sort_order=SortOrder.DESC)

        submissions = await self.repository.list_submissions(query=query)
        return build_dashboard_view(submissions)


@dataclass
class DashboardRefreshState:
    refreshes_total: int = 0
    skipped_total: int = 0
    errors_total: int = 0


@dataclass
class DashboardRefresher:
    """Keeps one dashboard view current, on demand and on a fixed interval.

    Every refresh replaces `view` wholesale, so repeated refreshes never
    duplicate rows. Refreshes are skipped while nobody is signed in.
    """

    service: DashboardService
    auth: AuthSession
    interval_ms: int = 30000
    match_by: OwnerMatch = OwnerMatch.USER_ID
    view: DashboardView = field(default_factory=lambda: DashboardView(loading=True))
    state: DashboardRefreshState = field(default_factory=DashboardRefreshState)

    async def refresh(self) -> DashboardView | None:
        user = self.auth.current_user()
        if user is None:
            # Drop whatever the previous user was looking at.
            self.view = DashboardView(loading=False)
            self.state.skipped_total += 1
            return None
        self.view = await self.service.load(user, match_by=self.match_by)
        self.state.refreshes_total += 1
        return self.view

    async def run_until_stopped(self, stop_event: asyncio.Event) -> None:
        logger.info("dashboard auto-refresh started")
        while not stop_event.is_set():
            try:
                await self.refresh()
            except Exception:
                self.state.errors_total += 1
                logger.exception("dashboard auto-refresh failed")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_ms / 1000)
            except TimeoutError:
                continue
        logger.info("dashboard auto-refresh stopped")
