from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


# Approval lifecycle. Only the admin side moves a submission out of PENDING.
#
# Keep synchronized with the status CHECK constraint in
# db/migrations/000001_bootstrap.up.sql.
class SubmissionStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class OwnerMatch(StrEnum):
    USER_ID = "user_id"
    EMAIL = "email"


class AuthEvent(StrEnum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class Submission:
    submission_id: str
    name: str
    email: str
    purpose: str
    platform_link: str
    user_id: str | None
    status: str
    created_at: datetime


@dataclass(frozen=True)
class SubmissionListQuery:
    user_id: str | None = None
    email: str | None = None
    sort_order: SortOrder = SortOrder.DESC
    # None lists every matching row; the dashboard counts the full set.
    limit: int | None = None


@dataclass(frozen=True)
class IdentityUser:
    user_id: str
    email: str | None = None


@dataclass(frozen=True)
class IdentitySession:
    access_token: str
    user: IdentityUser
