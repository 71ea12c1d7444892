"""Services package – re-exports all public service functions."""

from __future__ import annotations

from benefit_portal.backend.services.applications import (
    calculate_eligibility,
    get_applicant_view,
    get_for_review,
    list_for_review,
    record_decision,
    start_application,
    submit_by_token,
    update_by_token,
    upload_document,
)
from benefit_portal.backend.services.auth import authenticate
from benefit_portal.backend.services.programs import (
    create_income_limit,
    create_program,
    delete_income_limit,
    require_program,
    update_income_limit,
    update_program,
    validate_zip,
)

__all__ = [
    "authenticate",
    "calculate_eligibility",
    "create_income_limit",
    "create_program",
    "delete_income_limit",
    "get_applicant_view",
    "get_for_review",
    "list_for_review",
    "record_decision",
    "require_program",
    "start_application",
    "submit_by_token",
    "update_by_token",
    "update_income_limit",
    "update_program",
    "upload_document",
    "validate_zip",
]
