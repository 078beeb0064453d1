from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from domain_request.domain.ids import SUBMISSION_ID_PATTERN
from domain_request.domain.models import OwnerMatch


class ErrorResponse(BaseModel):
    detail: str


class HealthResponse(BaseModel):
    status: str
    role: str


class ReadyResponse(BaseModel):
    status: str
    role: str
    relay_configured: bool
    client_flow_enabled: bool


class RelaySubmissionRequest(BaseModel):
    """Documented shape of the relay body; the handler validates it itself."""

    name: str
    email: str
    purpose: str
    platform_link: str
    user_id: str | None = None


class RelaySuccessData(BaseModel):
    submitted_at: str
    admin_response: dict[str, object]


class RelaySuccessResponse(BaseModel):
    success: Literal[True]
    message: str
    data: RelaySuccessData


class RelayErrorResponse(BaseModel):
    success: Literal[False]
    error: str
    details: str | None = None


class SubmitFormRequest(BaseModel):
    """Raw form fields; length and shape rules live in the submission flow."""

    name: str | None = None
    email: str | None = None
    purpose: str | None = None
    platform_link: str | None = None


class SubmitFormResponse(BaseModel):
    success: bool
    kind: Literal["success", "login_required", "invalid", "error"]
    message: str
    submission_id: str | None = Field(default=None, pattern=SUBMISSION_ID_PATTERN)
    warning: str | None = None
    redirect_to: str | None = None


class StatusCountsResponse(BaseModel):
    total: int = Field(ge=0)
    pending: int = Field(ge=0)
    approved: int = Field(ge=0)
    rejected: int = Field(ge=0)


class DashboardRowResponse(BaseModel):
    submission_id: str
    name: str
    email: str
    purpose: str
    link_href: str
    link_text: str
    status: str
    status_label: str
    status_class: str
    status_icon: str
    created_at: str


class DashboardResponse(BaseModel):
    match_by: OwnerMatch
    counts: StatusCountsResponse
    rows: list[DashboardRowResponse]
    loading: bool
    empty: bool
