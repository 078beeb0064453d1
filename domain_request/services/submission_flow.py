from __future__ import annotations

from dataclasses import dataclass
import logging

from domain_request.domain.contracts import RelayNotifier, SubmissionRepository
from domain_request.domain.dto import SubmissionForm, SubmissionOutcome
from domain_request.domain.errors import DomainDependencyError
from domain_request.domain.models import IdentityUser, SubmissionStatus
from domain_request.domain.validation import validate_form

COMPONENT_ID = "client.submit_form"

LOGIN_REQUIRED_MESSAGE = "Please login first to submit the form"
SUCCESS_MESSAGE = "Application submitted successfully! Check your dashboard for status updates."
RELAY_WARNING = "Your application was saved, but the admin panel could not be notified yet."

logger = logging.getLogger("client")


@dataclass
class SubmissionFlow:
    """Two-sink write: the database insert is authoritative, the relay is advisory."""

    repository: SubmissionRepository
    relay: RelayNotifier

    async def submit(self, form: SubmissionForm, *, user: IdentityUser | None) -> SubmissionOutcome:
        if user is None:
            return SubmissionOutcome(kind="login_required", message=LOGIN_REQUIRED_MESSAGE)

        validation = validate_form(form)
        if not validation.is_valid:
            return SubmissionOutcome(kind="invalid", message=validation.message or "Invalid form data")

        # validate_form guarantees every field is present.
        name = form.name or ""
        email = form.email or ""
        purpose = form.purpose or ""
        platform_link = form.platform_link or ""

        try:
            stored = await self.repository.insert_submission(
                name=name.strip(),
                email=email.strip(),
                purpose=purpose.strip(),
                platform_link=platform_link.strip(),
                user_id=user.user_id,
                status=SubmissionStatus.PENDING.value,
            )
        except DomainDependencyError as exc:
            logger.error(
                "submission storage failed",
                extra={"user_id": user.user_id, "error_type": type(exc).__name__},
            )
            return SubmissionOutcome(kind="error", message=f"Submission failed: {exc}")

        try:
            relay_result = await self.relay.notify(
                payload={
                    "name": name,
                    "email": email,
                    "purpose": purpose,
                    "platform_link": platform_link,
                    "user_id": user.user_id,
                }
            )
            relayed = relay_result.success
        except Exception:
            logger.exception("admin relay raised", extra={"submission_id": stored.submission_id})
            relayed = False

        warning = None
        if not relayed:
            logger.warning(
                "admin relay failed after submission was stored",
                extra={"submission_id": stored.submission_id, "user_id": user.user_id},
            )
            warning = RELAY_WARNING

        return SubmissionOutcome(
            kind="success",
            message=SUCCESS_MESSAGE,
            submission_id=stored.submission_id,
            warning=warning,
            redirect_to="dashboard",
            reset_form=True,
        )
