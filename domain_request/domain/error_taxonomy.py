from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from domain_request.domain.errors import (
    UpstreamConnectionError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

# Canonical error vocabulary for the relay boundary.
ErrorCode = Literal[
    "method_not_allowed",
    "configuration_error",
    "missing_fields",
    "invalid_email",
    "invalid_platform_link",
    "name_too_long",
    "upstream_rejected",
    "upstream_connection_failed",
    "upstream_unavailable",
    "upstream_timeout",
    "internal_error",
]

ErrorCategory = Literal["client_input", "configuration", "upstream_application", "transport", "internal"]

CANONICAL_ERROR_CODES: tuple[ErrorCode, ...] = (
    "method_not_allowed",
    "configuration_error",
    "missing_fields",
    "invalid_email",
    "invalid_platform_link",
    "name_too_long",
    "upstream_rejected",
    "upstream_connection_failed",
    "upstream_unavailable",
    "upstream_timeout",
    "internal_error",
)

ERROR_CATEGORIES: Mapping[ErrorCode, ErrorCategory] = {
    "method_not_allowed": "client_input",
    "configuration_error": "configuration",
    "missing_fields": "client_input",
    "invalid_email": "client_input",
    "invalid_platform_link": "client_input",
    "name_too_long": "client_input",
    "upstream_rejected": "upstream_application",
    "upstream_connection_failed": "transport",
    "upstream_unavailable": "transport",
    "upstream_timeout": "transport",
    "internal_error": "internal",
}

# Caller-facing messages. Client input messages are user-correctable; the rest
# are generic and never carry upstream or exception detail.
ERROR_MESSAGES: Mapping[ErrorCode, str] = {
    "method_not_allowed": "Method not allowed. Only POST requests are accepted.",
    "configuration_error": "Server configuration error. Please contact administrator.",
    "missing_fields": "Missing required fields. Please provide name, email, purpose, and platform_link.",
    "invalid_email": "Invalid email format.",
    "invalid_platform_link": "Invalid platform URL format.",
    "name_too_long": "Name is too long (maximum 100 characters).",
    "upstream_rejected": "Failed to submit to admin panel",
    "upstream_connection_failed": "Failed to connect to admin panel",
    "upstream_unavailable": "Admin panel is currently unavailable",
    "upstream_timeout": "Request timeout. Please try again",
    "internal_error": "Internal server error occurred",
}

ERROR_STATUS_CODES: Mapping[ErrorCode, int] = {
    "method_not_allowed": 405,
    "configuration_error": 500,
    "missing_fields": 400,
    "invalid_email": 400,
    "invalid_platform_link": 400,
    "name_too_long": 400,
    "upstream_connection_failed": 502,
    "upstream_unavailable": 503,
    "upstream_timeout": 408,
    "internal_error": 500,
}

UPSTREAM_STATUS_MESSAGES: Mapping[int, str] = {
    401: "Authentication failed with admin panel",
    403: "Access denied by admin panel",
    429: "Too many requests. Please try again later",
    500: "Admin panel server error",
}


@dataclass(frozen=True)
class ClassifiedError:
    code: ErrorCode
    status_code: int
    message: str


def is_canonical_error_code(code: str) -> bool:
    return code in CANONICAL_ERROR_CODES


def error_category(code: ErrorCode) -> ErrorCategory:
    return ERROR_CATEGORIES[code]


def classify_error_code(code: ErrorCode) -> ClassifiedError:
    if code == "upstream_rejected":
        raise ValueError("upstream_rejected is classified from the upstream status, use classify_upstream_status()")
    return ClassifiedError(code=code, status_code=ERROR_STATUS_CODES[code], message=ERROR_MESSAGES[code])


def classify_upstream_status(status_code: int) -> ClassifiedError:
    """Map a non-success admin panel status to the caller-facing error.

    The caller-facing status mirrors the upstream status.
    """
    message = UPSTREAM_STATUS_MESSAGES.get(status_code, ERROR_MESSAGES["upstream_rejected"])
    return ClassifiedError(code="upstream_rejected", status_code=status_code, message=message)


def classify_transport_error(exc: BaseException) -> ClassifiedError:
    if isinstance(exc, UpstreamTimeoutError):
        return classify_error_code("upstream_timeout")
    if isinstance(exc, UpstreamUnavailableError):
        return classify_error_code("upstream_unavailable")
    if isinstance(exc, UpstreamConnectionError):
        return classify_error_code("upstream_connection_failed")
    return classify_error_code("internal_error")
