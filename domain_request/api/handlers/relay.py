from __future__ import annotations

import logging

from domain_request.api.handlers.deps import ApiDeps
from domain_request.domain.dto import RelayResult
from domain_request.domain.error_taxonomy import classify_error_code
from domain_request.domain.use_cases.relay import error_result, relay_submission

COMPONENT_ID = "api.relay_send"

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}

logger = logging.getLogger("relay")


async def relay_handler(deps: ApiDeps, *, method: str, body: object) -> RelayResult:
    """Answer one request to the relay endpoint.

    OPTIONS gets an empty 200 for CORS preflight, anything but POST gets 405,
    and every other failure is folded into the error envelope.
    """
    method = method.upper()
    if method == "OPTIONS":
        return RelayResult(status_code=200, body=None)
    if method != "POST":
        return error_result(classify_error_code("method_not_allowed"), details=None, settings=deps.relay_settings)

    logger.info("relay request received")
    try:
        return await relay_submission(body, settings=deps.relay_settings, admin_client=deps.admin_client)
    except Exception as exc:
        logger.exception("relay handler failed", extra={"error_type": type(exc).__name__})
        return error_result(classify_error_code("internal_error"), details=str(exc), settings=deps.relay_settings)
