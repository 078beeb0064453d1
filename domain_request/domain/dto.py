from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

RELAY_SOURCE = "vinnesia_domain_form"


@dataclass(frozen=True)
class RelayRecord:
    name: str
    email: str
    purpose: str
    platform_link: str
    user_id: str | None
    submitted_at: str
    source: str = RELAY_SOURCE

    def as_payload(self) -> dict[str, object]:
        return {
            "name": self.name,
            "email": self.email,
            "purpose": self.purpose,
            "platform_link": self.platform_link,
            "user_id": self.user_id,
            "submitted_at": self.submitted_at,
            "source": self.source,
        }


@dataclass(frozen=True)
class AdminPanelResponse:
    status_code: int
    reason_phrase: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class RelayResult:
    """Normalized outcome of one relay request, ready to serialize."""

    status_code: int
    body: dict[str, object] | None

    @property
    def success(self) -> bool:
        return self.body is not None and self.body.get("success") is True


@dataclass(frozen=True)
class SubmissionForm:
    name: str | None
    email: str | None
    purpose: str | None
    platform_link: str | None


@dataclass(frozen=True)
class FormValidationResult:
    is_valid: bool
    message: str | None = None
    field: str | None = None


@dataclass(frozen=True)
class RelayNotifyResult:
    success: bool
    data: dict[str, object] | None = None
    error: str | None = None


OutcomeKind = Literal["success", "login_required", "invalid", "error"]


@dataclass(frozen=True)
class SubmissionOutcome:
    kind: OutcomeKind
    message: str
    submission_id: str | None = None
    warning: str | None = None
    redirect_to: str | None = None
    reset_form: bool = False

    @property
    def success(self) -> bool:
        return self.kind == "success"


@dataclass(frozen=True)
class StatusCounts:
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0


@dataclass(frozen=True)
class DashboardRow:
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


@dataclass(frozen=True)
class DashboardView:
    rows: list[DashboardRow] = field(default_factory=list)
    counts: StatusCounts = field(default_factory=StatusCounts)
    loading: bool = False
    empty: bool = True
