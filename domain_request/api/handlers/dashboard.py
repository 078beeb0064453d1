from __future__ import annotations

from domain_request.api.schemas import DashboardResponse, DashboardRowResponse, StatusCountsResponse
from domain_request.domain.models import IdentityUser, OwnerMatch
from domain_request.services.dashboard import DashboardService

COMPONENT_ID = "api.dashboard"


async def dashboard_handler(
    *,
    user: IdentityUser,
    match_by: OwnerMatch,
    dashboard: DashboardService,
) -> DashboardResponse:
    view = await dashboard.load(user, match_by=match_by)
    return DashboardResponse(
        match_by=match_by,
        counts=StatusCountsResponse(
            total=view.counts.total,
            pending=view.counts.pending,
            approved=view.counts.approved,
            rejected=view.counts.rejected,
        ),
        rows=[
            DashboardRowResponse(
                submission_id=row.submission_id,
                name=row.name,
                email=row.email,
                purpose=row.purpose,
                link_href=row.link_href,
                link_text=row.link_text,
                status=row.status,
                status_label=row.status_label,
                status_class=row.status_class,
                status_icon=row.status_icon,
                created_at=row.created_at,
            )
            for row in view.rows
        ],
        loading=view.loading,
        empty=view.empty,
    )
