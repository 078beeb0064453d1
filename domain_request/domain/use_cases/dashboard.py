from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from domain_request.domain.dto import DashboardRow, DashboardView, StatusCounts
from domain_request.domain.models import Submission, SubmissionStatus

COMPONENT_ID_COUNTS = "domain.dashboard.count_statuses"
COMPONENT_ID_VIEW = "domain.dashboard.build_view"

LINK_DISPLAY_LIMIT = 30

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}

_STATUS_CLASSES = {
    SubmissionStatus.APPROVED: "status-approved",
    SubmissionStatus.REJECTED: "status-rejected",
    SubmissionStatus.PENDING: "status-pending",
}

_STATUS_ICONS = {
    SubmissionStatus.APPROVED: "fas fa-check-circle",
    SubmissionStatus.REJECTED: "fas fa-times-circle",
    SubmissionStatus.PENDING: "fas fa-clock",
}


def escape_html(text: str) -> str:
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def format_created_at(value: datetime) -> str:
    return value.strftime("%b %d, %Y, %I:%M %p")


def count_statuses(submissions: Sequence[Submission]) -> StatusCounts:
    statuses = [item.status for item in submissions]
    return StatusCounts(
        total=len(statuses),
        pending=statuses.count(SubmissionStatus.PENDING),
        approved=statuses.count(SubmissionStatus.APPROVED),
        rejected=statuses.count(SubmissionStatus.REJECTED),
    )


def build_row(submission: Submission) -> DashboardRow:
    # Unknown statuses render like pending.
    try:
        status = SubmissionStatus(submission.status)
    except ValueError:
        status = SubmissionStatus.PENDING

    return DashboardRow(
        submission_id=submission.submission_id,
        name=escape_html(submission.name),
        email=escape_html(submission.email),
        purpose=escape_html(submission.purpose),
        link_href=escape_html(submission.platform_link),
        link_text=escape_html(truncate_text(submission.platform_link, LINK_DISPLAY_LIMIT)),
        status=submission.status,
        status_label=escape_html(capitalize_first(submission.status)),
        status_class=_STATUS_CLASSES[status],
        status_icon=_STATUS_ICONS[status],
        created_at=format_created_at(submission.created_at),
    )


def build_dashboard_view(submissions: Sequence[Submission]) -> DashboardView:
    """Turn owner-scoped rows into the view model the presentation layer renders."""
    counts = count_statuses(submissions)
    return DashboardView(
        rows=[build_row(item) for item in submissions],
        counts=counts,
        loading=False,
        empty=counts.total == 0,
    )
