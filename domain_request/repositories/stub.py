from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from domain_request.domain.errors import RepositoryError
from domain_request.domain.ids import new_submission_public_id
from domain_request.domain.models import SortOrder, Submission, SubmissionListQuery, SubmissionStatus


@dataclass
class _SubmissionRow:
    id: int
    submission_id: str
    name: str
    email: str
    purpose: str
    platform_link: str
    user_id: str | None
    status: str
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


@dataclass
class InMemorySubmissionRepository:
    """Non-network repository with deterministic behavior for local mode and tests."""

    rows: dict[str, _SubmissionRow] = field(default_factory=dict)
    fail_inserts_with: str | None = None
    next_id: int = 1

    async def insert_submission(
        self,
        *,
        name: str,
        email: str,
        purpose: str,
        platform_link: str,
        user_id: str | None,
        status: str,
        created_at: datetime | None = None,
    ) -> Submission:
        if self.fail_inserts_with is not None:
            raise RepositoryError(self.fail_inserts_with)
        if status not in tuple(SubmissionStatus):
            raise RepositoryError(f"unsupported submission status: {status}")

        row = _SubmissionRow(
            id=self.next_id,
            submission_id=new_submission_public_id(),
            name=name,
            email=email,
            purpose=purpose,
            platform_link=platform_link,
            user_id=user_id,
            status=status,
        )
        if created_at is not None:
            row.created_at = created_at
        self.next_id += 1
        self.rows[row.submission_id] = row
        return _snapshot(row)

    async def list_submissions(self, *, query: SubmissionListQuery) -> list[Submission]:
        if query.user_id is None and query.email is None:
            raise ValueError("listing requires an owner filter (user_id or email)")
        items = list(self.rows.values())
        if query.user_id is not None:
            items = [row for row in items if row.user_id == query.user_id]
        if query.email is not None:
            email = query.email.lower()
            items = [row for row in items if row.email.lower() == email]
        items.sort(key=lambda row: (row.created_at, row.id), reverse=query.sort_order == SortOrder.DESC)
        return [_snapshot(row) for row in items[: query.limit]]

    def apply_admin_status(self, *, submission_id: str, status: SubmissionStatus) -> None:
        """Stand-in for the admin side, the only writer of status after insert."""
        row = self.rows.get(submission_id)
        if row is None:
            raise KeyError(f"submission not found: {submission_id}")
        row.status = status


def _snapshot(row: _SubmissionRow) -> Submission:
    return Submission(
        submission_id=row.submission_id,
        name=row.name,
        email=row.email,
        purpose=row.purpose,
        platform_link=row.platform_link,
        user_id=row.user_id,
        status=row.status,
        created_at=row.created_at,
    )
