from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
import json
import logging

from domain_request.domain.contracts import AdminPanelClient
from domain_request.domain.dto import AdminPanelResponse, RelayRecord, RelayResult
from domain_request.domain.error_taxonomy import (
    ClassifiedError,
    classify_error_code,
    classify_transport_error,
    classify_upstream_status,
)
from domain_request.domain.errors import UpstreamTransportError
from domain_request.domain.validation import validate_relay_payload
from domain_request.settings import RelaySettings

COMPONENT_ID = "domain.relay.forward"
SUCCESS_MESSAGE = "Application submitted successfully to admin panel"
UNPARSEABLE_RESPONSE = {"message": "Response received but not parseable"}
# Upstream bodies are logged for diagnosis but capped.
LOGGED_BODY_LIMIT = 2000

logger = logging.getLogger("relay")


def build_relay_record(payload: Mapping[str, object], *, now: datetime | None = None) -> RelayRecord:
    """Normalize a validated payload into the record forwarded upstream."""
    stamp = (now or datetime.now(UTC)).astimezone(UTC)
    user_id = _optional_text(payload.get("user_id"))
    return RelayRecord(
        name=str(payload["name"]).strip(),
        email=str(payload["email"]).strip().lower(),
        purpose=str(payload["purpose"]).strip(),
        platform_link=str(payload["platform_link"]).strip(),
        user_id=user_id,
        submitted_at=_iso_timestamp(stamp),
    )


def parse_admin_response(text: str) -> dict[str, object]:
    """Empty and non-JSON bodies degrade to an acknowledgement instead of failing."""
    if not text.strip():
        return {}
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        logger.warning("admin panel response is not parseable")
        return dict(UNPARSEABLE_RESPONSE)
    if isinstance(parsed, dict):
        return parsed
    return {"data": parsed}


def error_result(error: ClassifiedError, *, details: str | None, settings: RelaySettings) -> RelayResult:
    body: dict[str, object] = {"success": False, "error": error.message}
    if details is not None and not settings.is_production:
        body["details"] = details
    return RelayResult(status_code=error.status_code, body=body)


async def relay_submission(
    payload: object,
    *,
    settings: RelaySettings,
    admin_client: AdminPanelClient,
) -> RelayResult:
    """Validate one submission, forward it to the admin panel and classify the outcome.

    Validation failures never reach the upstream call. Every failure is
    returned as a RelayResult; nothing escapes to the caller.
    """
    if not settings.is_configured:
        logger.error(
            "relay configuration missing",
            extra={
                "has_admin_api_url": bool(settings.admin_api_url),
                "has_admin_api_key": bool(settings.admin_api_key),
                "error_code": "configuration_error",
            },
        )
        return error_result(classify_error_code("configuration_error"), details=None, settings=settings)

    fields: Mapping[str, object] = payload if isinstance(payload, Mapping) else {}
    validation_error = validate_relay_payload(fields)
    if validation_error is not None:
        logger.info("relay payload rejected", extra={"error_code": validation_error})
        return error_result(classify_error_code(validation_error), details=None, settings=settings)

    record = build_relay_record(fields)
    logger.info(
        "processing domain application",
        extra={
            "applicant_name": record.name,
            "email": record.email,
            "purpose": record.purpose,
            "submitted_at": record.submitted_at,
        },
    )

    try:
        response = await admin_client.submit(
            url=settings.admin_api_url,
            api_key=settings.admin_api_key,
            payload=record.as_payload(),
            timeout_seconds=settings.timeout_seconds,
        )
    except UpstreamTransportError as exc:
        classified = classify_transport_error(exc)
        logger.error(
            "admin panel transport failure",
            exc_info=exc,
            extra={
                "email": record.email,
                "error_code": classified.code,
                "error_type": type(exc).__name__,
                "status_code": classified.status_code,
            },
        )
        return error_result(classified, details=str(exc), settings=settings)
    except Exception as exc:
        classified = classify_error_code("internal_error")
        logger.exception(
            "relay failed unexpectedly",
            extra={"email": record.email, "error_code": classified.code, "error_type": type(exc).__name__},
        )
        return error_result(classified, details=str(exc), settings=settings)

    if not response.ok:
        return _upstream_failure(response, record=record, settings=settings)

    admin_result = parse_admin_response(response.text)
    logger.info(
        "submitted to admin panel",
        extra={
            "applicant_name": record.name,
            "email": record.email,
            "upstream_status": response.status_code,
        },
    )
    return RelayResult(
        status_code=200,
        body={
            "success": True,
            "message": SUCCESS_MESSAGE,
            "data": {
                "submitted_at": record.submitted_at,
                "admin_response": admin_result,
            },
        },
    )


def _upstream_failure(response: AdminPanelResponse, *, record: RelayRecord, settings: RelaySettings) -> RelayResult:
    classified = classify_upstream_status(response.status_code)
    logger.error(
        "admin panel rejected submission",
        extra={
            "email": record.email,
            "upstream_status": response.status_code,
            "upstream_reason": response.reason_phrase,
            "upstream_body": response.text[:LOGGED_BODY_LIMIT],
            "error_code": classified.code,
        },
    )
    return error_result(classified, details=response.text, settings=settings)


def _reject_constant(token: str) -> object:
    # NaN and Infinity are not JSON and cannot be echoed back to the caller.
    raise ValueError(f"non-standard JSON constant: {token}")


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _iso_timestamp(value: datetime) -> str:
    # Millisecond precision with a Z suffix, e.g. 2025-01-05T14:30:00.123Z
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
