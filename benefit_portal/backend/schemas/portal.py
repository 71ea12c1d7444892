"""Pydantic schemas for API request / response validation.

JSON on the wire is camelCase; every model also accepts snake_case input.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

ApplicationStatus = Literal["Draft", "Submitted", "NeedsInfo", "Approved", "Denied"]
DecisionStatus = Literal["Approved", "Denied", "NeedsInfo"]
SystemResult = Literal["Eligible", "NotEligible", "NeedsReview"]
UserRole = Literal["Admin", "Reviewer"]
ResidenceType = Literal["Owner", "Renter", "Other"]
PropertyType = Literal["Single Family", "Condo", "Townhouse", "Multi-Family", "Mobile Home"]

_ZIP_RE = re.compile(r"^\d{5}$")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _clean_zip_list(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    seen: list[str] = []
    for raw in value:
        zip_code = str(raw).strip()
        if not _ZIP_RE.match(zip_code):
            raise ValueError(f"ZIP code must be exactly 5 digits: {zip_code!r}")
        if zip_code not in seen:
            seen.append(zip_code)
    return seen


def _require_name(value: str) -> str:
    if not value.strip():
        raise ValueError("Name is required")
    return value.strip()


# ── Generic responses ───────────────────────────────────────────────────────


class HealthOut(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"


class ErrorOut(BaseModel):
    message: str
    field: str | None = None


# ── Auth ────────────────────────────────────────────────────────────────────


class LoginIn(CamelModel):
    # Unknown or malformed addresses both fail as "Incorrect email." (401).
    email: str
    password: str


class UserOut(CamelModel):
    id: int
    email: str
    role: UserRole
    created_at: datetime | None = None


# ── Programs ────────────────────────────────────────────────────────────────


class ProgramIn(CamelModel):
    name: str = Field(min_length=1)
    region_label: str = Field(min_length=1)
    effective_start: datetime
    effective_end: datetime | None = None
    residence_types: list[ResidenceType] = Field(default_factory=list)
    property_types: list[PropertyType] = Field(default_factory=list)
    document_requirements: list[str] = Field(default_factory=list)
    eligibility_criteria: str | None = None
    allowed_zip_codes: list[str] = Field(default_factory=list)

    @field_validator("allowed_zip_codes")
    @classmethod
    def _zips(cls, value: list[str] | None) -> list[str] | None:
        return _clean_zip_list(value)


class ProgramUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    region_label: str | None = Field(default=None, min_length=1)
    effective_start: datetime | None = None
    effective_end: datetime | None = None
    residence_types: list[ResidenceType] | None = None
    property_types: list[PropertyType] | None = None
    document_requirements: list[str] | None = None
    eligibility_criteria: str | None = None
    allowed_zip_codes: list[str] | None = None

    @field_validator("allowed_zip_codes")
    @classmethod
    def _zips(cls, value: list[str] | None) -> list[str] | None:
        return _clean_zip_list(value)


class ProgramOut(CamelModel):
    id: int
    name: str
    region_label: str
    effective_start: datetime
    effective_end: datetime | None = None
    residence_types: list[str] = Field(default_factory=list)
    property_types: list[str] = Field(default_factory=list)
    document_requirements: list[str] = Field(default_factory=list)
    eligibility_criteria: str | None = None
    allowed_zip_codes: list[str] = Field(default_factory=list)
    created_at: datetime | None = None


class ValidateZipIn(CamelModel):
    program_id: int
    zip_code: str


class ValidateZipOut(BaseModel):
    valid: bool
    message: str | None = None


# ── Income limits ───────────────────────────────────────────────────────────


class IncomeLimitIn(CamelModel):
    household_size: int = Field(ge=1)
    limit_cents: int = Field(ge=0)
    version_label: str = Field(min_length=1)


class IncomeLimitUpdate(CamelModel):
    household_size: int | None = Field(default=None, ge=1)
    limit_cents: int | None = Field(default=None, ge=0)
    version_label: str | None = Field(default=None, min_length=1)


class IncomeLimitOut(CamelModel):
    id: int
    program_id: int
    household_size: int
    limit_cents: int
    version_label: str
    created_at: datetime | None = None


# ── Applications ────────────────────────────────────────────────────────────


class StartApplicationIn(CamelModel):
    program_id: int
    applicant_name: str = Field(min_length=1)
    applicant_email: EmailStr

    @field_validator("applicant_name")
    @classmethod
    def _name(cls, value: str) -> str:
        return _require_name(value)


class StartApplicationOut(BaseModel):
    token: str
    id: int


class ApplicationUpdate(CamelModel):
    """Fields an applicant may change while the application is editable."""

    applicant_name: str | None = Field(default=None, min_length=1)
    applicant_email: EmailStr | None = None
    applicant_phone: str | None = None
    address_line1: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    household_size: int | None = Field(default=None, ge=1)
    annual_income_cents: int | None = Field(default=None, ge=0)

    @field_validator("applicant_name")
    @classmethod
    def _name(cls, value: str | None) -> str | None:
        return None if value is None else _require_name(value)

    @field_validator("zip")
    @classmethod
    def _zip_format(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if value and not _ZIP_RE.match(value):
            raise ValueError("ZIP code must be exactly 5 digits")
        return value


class DecisionIn(CamelModel):
    status: DecisionStatus
    note: str = Field(min_length=1)

    @field_validator("note")
    @classmethod
    def _note_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Note is required")
        return value.strip()


class DocumentOut(CamelModel):
    id: int
    application_id: int
    filename: str
    path: str
    mime_type: str
    size_bytes: int
    uploaded_at: datetime | None = None


class ActivityEventOut(CamelModel):
    id: int
    application_id: int
    type: str
    message: str
    created_by_user_id: int | None = None
    created_at: datetime | None = None


class ActivityEventWithUserOut(ActivityEventOut):
    user: UserOut | None = None


class ApplicationOut(CamelModel):
    id: int
    program_id: int
    applicant_name: str
    applicant_email: str
    applicant_phone: str | None = None
    applicant_token: str
    address_line1: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    household_size: int | None = None
    annual_income_cents: int | None = None
    computed_limit_cents: int | None = None
    system_result: SystemResult | None = None
    rule_version: str | None = None
    status: ApplicationStatus
    submitted_at: datetime | None = None
    reviewed_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApplicantViewOut(ApplicationOut):
    """What the applicant sees through their token link."""

    documents: list[DocumentOut] = Field(default_factory=list)
    activity_events: list[ActivityEventOut] = Field(default_factory=list)


class ApplicationListItemOut(ApplicationOut):
    program: ProgramOut


class ApplicationDetailOut(ApplicationOut):
    documents: list[DocumentOut] = Field(default_factory=list)
    activity_events: list[ActivityEventWithUserOut] = Field(default_factory=list)
    program: ProgramOut
    income_limit_snapshot: IncomeLimitOut | None = None
