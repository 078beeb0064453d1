from __future__ import annotations

from collections.abc import Mapping
import re
from urllib.parse import urlsplit

from domain_request.domain.dto import FormValidationResult, SubmissionForm
from domain_request.domain.error_taxonomy import ErrorCode

REQUIRED_FIELDS = ("name", "email", "purpose", "platform_link")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
ALLOWED_URL_SCHEMES = frozenset({"http", "https"})
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100


def is_valid_email(value: str) -> bool:
    return value.isascii() and EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_url(value: str) -> bool:
    """Absolute URL with an http(s) scheme and a host."""
    candidate = value.strip()
    if not candidate:
        return False
    try:
        parts = urlsplit(candidate)
        # Accessing .port raises ValueError for malformed ports.
        parts.port
    except ValueError:
        return False
    if any(ch.isspace() for ch in parts.netloc):
        return False
    return parts.scheme.lower() in ALLOWED_URL_SCHEMES and bool(parts.hostname)


def validate_relay_payload(payload: Mapping[str, object]) -> ErrorCode | None:
    """Server-side checks for the relay endpoint, first failure wins."""
    for field_name in REQUIRED_FIELDS:
        value = payload.get(field_name)
        if not isinstance(value, str) or not value.strip():
            return "missing_fields"

    email = str(payload["email"]).strip()
    if not is_valid_email(email):
        return "invalid_email"

    if not is_valid_url(str(payload["platform_link"])):
        return "invalid_platform_link"

    if len(str(payload["name"]).strip()) > NAME_MAX_LENGTH:
        return "name_too_long"

    return None


def validate_form(form: SubmissionForm) -> FormValidationResult:
    """Client-side checks run before anything is written."""
    name = (form.name or "").strip()
    if len(name) < NAME_MIN_LENGTH:
        return FormValidationResult(
            is_valid=False,
            field="name",
            message="Please enter a valid name (at least 2 characters)",
        )

    if not form.email or not is_valid_email(form.email.strip()):
        return FormValidationResult(
            is_valid=False,
            field="email",
            message="Please enter a valid email address",
        )

    if not form.purpose or not form.purpose.strip():
        return FormValidationResult(
            is_valid=False,
            field="purpose",
            message="Please select a purpose for your domain",
        )

    if not form.platform_link or not is_valid_url(form.platform_link):
        return FormValidationResult(
            is_valid=False,
            field="platform_link",
            message="Please enter a valid platform URL",
        )

    if len(name) > NAME_MAX_LENGTH:
        return FormValidationResult(
            is_valid=False,
            field="name",
            message="Name is too long (maximum 100 characters)",
        )

    return FormValidationResult(is_valid=True)


def validate_field(field_name: str, value: str | None) -> FormValidationResult:
    """Single-field check for inline feedback while the form is being filled."""
    cleaned = (value or "").strip()
    message: str | None = None

    if field_name == "name":
        if len(cleaned) < NAME_MIN_LENGTH:
            message = "Name must be at least 2 characters"
        elif len(cleaned) > NAME_MAX_LENGTH:
            message = "Name is too long (max 100 characters)"
    elif field_name == "email":
        if not cleaned or not is_valid_email(cleaned):
            message = "Please enter a valid email address"
    elif field_name == "purpose":
        if not cleaned:
            message = "Please select a purpose"
    elif field_name == "platform_link":
        if not cleaned or not is_valid_url(cleaned):
            message = "Please enter a valid URL"

    if message is not None:
        return FormValidationResult(is_valid=False, field=field_name, message=message)
    return FormValidationResult(is_valid=True, field=field_name)
