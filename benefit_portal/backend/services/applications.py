"""Application service – applicant intake and reviewer adjudication.

Applicants act through their secret token; reviewers act through their
authenticated user. Every function works on a :class:`Storage` bound to the
caller's transaction and raises :mod:`core.errors` exceptions on failure.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from benefit_portal.backend.core import notifications
from benefit_portal.backend.core.eligibility import NEEDS_REVIEW, EligibilityOutcome, evaluate_with_lookup
from benefit_portal.backend.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailed,
)
from benefit_portal.backend.core.models import Application, Document, User, utcnow
from benefit_portal.backend.core.security import generate_applicant_token
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.core.uploads import save_upload
from benefit_portal.backend.core.utils.config import UploadSettings
from benefit_portal.backend.schemas import (
    ActivityEventOut,
    ActivityEventWithUserOut,
    ApplicantViewOut,
    ApplicationDetailOut,
    ApplicationListItemOut,
    ApplicationOut,
    ApplicationUpdate,
    DecisionIn,
    DocumentOut,
    IncomeLimitOut,
    ProgramOut,
    StartApplicationIn,
    StartApplicationOut,
)
from benefit_portal.backend.services.programs import require_program

logger = logging.getLogger(__name__)

# Required columns; a null in the request means "leave as is".
_NON_NULLABLE_FIELDS = frozenset({"applicant_name", "applicant_email"})


# ── Lookups ─────────────────────────────────────────────────────────────────


def require_by_token(storage: Storage, token: str) -> Application:
    application = storage.get_application_by_token(token)
    if application is None:
        raise NotFoundError("Application not found")
    return application


def require_by_id(storage: Storage, application_id: int) -> Application:
    application = storage.get_application(application_id)
    if application is None:
        raise NotFoundError("Application not found")
    return application


def _require_editable(application: Application) -> None:
    if not application.is_editable:
        raise ForbiddenError("Cannot edit submitted application")


# ── Applicant operations ────────────────────────────────────────────────────


def start_application(storage: Storage, data: StartApplicationIn) -> StartApplicationOut:
    """Create a draft and send the applicant their magic link."""
    require_program(storage, data.program_id)
    token = generate_applicant_token()
    application = storage.create_application(
        program_id=data.program_id,
        applicant_name=data.applicant_name,
        applicant_email=data.applicant_email,
        applicant_token=token,
        status="Draft",
        system_result=NEEDS_REVIEW,
    )
    notifications.send_magic_link(data.applicant_email, token)
    logger.info("Started application %d for program %d", application.id, data.program_id)
    return StartApplicationOut(token=token, id=application.id)


def get_applicant_view(storage: Storage, token: str) -> ApplicantViewOut:
    application = require_by_token(storage, token)
    return ApplicantViewOut(
        **ApplicationOut.model_validate(application).model_dump(),
        documents=[DocumentOut.model_validate(d) for d in storage.list_documents(application.id)],
        activity_events=[
            ActivityEventOut.model_validate(e)
            for e in storage.list_activity_events(application.id)
        ],
    )


def update_by_token(storage: Storage, token: str, data: ApplicationUpdate) -> Application:
    application = require_by_token(storage, token)
    _require_editable(application)

    updates = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key not in _NON_NULLABLE_FIELDS
    }

    zip_code = updates.get("zip")
    if zip_code and not application.program.accepts_zip(zip_code):
        raise ValidationFailed(
            f"ZIP code {zip_code} is outside the {application.program.region_label} service area",
            field="zip",
        )

    return storage.update_application(application, updates)


def upload_document(
    storage: Storage,
    token: str,
    stream: BinaryIO | None,
    filename: str | None,
    content_type: str | None,
    settings: UploadSettings,
) -> Document:
    application = require_by_token(storage, token)
    if stream is None or not filename:
        raise ValidationFailed("No file uploaded", field="file")
    _require_editable(application)

    stored = save_upload(stream, filename, settings)
    return storage.create_document(
        application_id=application.id,
        filename=stored.original_name,
        path=str(stored.path),
        mime_type=content_type or "application/octet-stream",
        size_bytes=stored.size_bytes,
    )


def calculate_eligibility(storage: Storage, application: Application) -> EligibilityOutcome:
    return evaluate_with_lookup(
        application.program_id,
        application.household_size,
        application.annual_income_cents,
        storage.get_income_limit_for_household,
    )


def submit_by_token(storage: Storage, token: str) -> Application:
    """Run the eligibility calculation and move the application to ``Submitted``."""
    application = require_by_token(storage, token)
    if not application.is_editable:
        raise ConflictError(f"Application is already {application.status}")

    outcome = calculate_eligibility(storage, application)
    storage.update_application(
        application,
        {
            "status": "Submitted",
            "submitted_at": utcnow(),
            "system_result": outcome.result,
            "computed_limit_cents": outcome.computed_limit_cents,
            "rule_version": outcome.rule_version,
        },
    )
    storage.create_activity_event(
        application_id=application.id,
        type="System",
        message=f"Application submitted. System calculation: {outcome.result}",
    )
    logger.info("Application %d submitted: %s", application.id, outcome.summary)
    return application


# ── Reviewer operations ─────────────────────────────────────────────────────


def list_for_review(
    storage: Storage,
    status: str | None = None,
    program_id: int | None = None,
    search: str | None = None,
) -> list[ApplicationListItemOut]:
    return [
        ApplicationListItemOut.model_validate(a)
        for a in storage.list_applications(status=status, program_id=program_id, search=search)
    ]


def get_for_review(storage: Storage, application_id: int) -> ApplicationDetailOut:
    application = require_by_id(storage, application_id)

    snapshot = None
    if application.household_size:
        limit = storage.get_income_limit_for_household(
            application.program_id, application.household_size
        )
        snapshot = IncomeLimitOut.model_validate(limit) if limit is not None else None

    return ApplicationDetailOut(
        **ApplicationOut.model_validate(application).model_dump(),
        documents=[DocumentOut.model_validate(d) for d in storage.list_documents(application.id)],
        activity_events=[
            ActivityEventWithUserOut.model_validate(e)
            for e in storage.list_activity_events(application.id)
        ],
        program=ProgramOut.model_validate(application.program),
        income_limit_snapshot=snapshot,
    )


def record_decision(
    storage: Storage, application_id: int, decision: DecisionIn, reviewer: User
) -> Application:
    """Apply a reviewer decision and log it on the activity timeline."""
    application = require_by_id(storage, application_id)
    if application.status == "Draft":
        raise ConflictError("Cannot decide an application that has not been submitted")

    storage.update_application(application, {"status": decision.status, "reviewed_by": reviewer.id})
    storage.create_activity_event(
        application_id=application.id,
        type="RequestInfo" if decision.status == "NeedsInfo" else "StatusChange",
        message=f"Status changed to {decision.status}. Note: {decision.note}",
        created_by_user_id=reviewer.id,
    )

    if decision.status == "NeedsInfo":
        notifications.send_request_info(
            application.applicant_email, application.applicant_token, decision.note
        )

    logger.info(
        "Reviewer %s set application %d to %s", reviewer.email, application.id, decision.status
    )
    return application
