from __future__ import annotations

from domain_request.api.schemas import SubmitFormResponse
from domain_request.domain.dto import SubmissionForm
from domain_request.domain.models import IdentityUser
from domain_request.services.submission_flow import SubmissionFlow

COMPONENT_ID = "api.submit_form"

OUTCOME_STATUS_CODES = {
    "success": 200,
    "login_required": 401,
    "invalid": 400,
    "error": 502,
}


async def submit_form_handler(
    *,
    form: SubmissionForm,
    user: IdentityUser | None,
    submission_flow: SubmissionFlow,
) -> tuple[int, SubmitFormResponse]:
    outcome = await submission_flow.submit(form, user=user)
    response = SubmitFormResponse(
        success=outcome.success,
        kind=outcome.kind,
        message=outcome.message,
        submission_id=outcome.submission_id,
        warning=outcome.warning,
        redirect_to=outcome.redirect_to,
    )
    return OUTCOME_STATUS_CODES[outcome.kind], response
