"""Schema package – re-exports all public symbols for convenient imports."""

from __future__ import annotations

from benefit_portal.backend.schemas.portal import (
    ActivityEventOut,
    ActivityEventWithUserOut,
    ApplicantViewOut,
    ApplicationDetailOut,
    ApplicationListItemOut,
    ApplicationOut,
    ApplicationStatus,
    ApplicationUpdate,
    DecisionIn,
    DocumentOut,
    ErrorOut,
    HealthOut,
    IncomeLimitIn,
    IncomeLimitOut,
    IncomeLimitUpdate,
    LoginIn,
    ProgramIn,
    ProgramOut,
    ProgramUpdate,
    StartApplicationIn,
    StartApplicationOut,
    UserOut,
    ValidateZipIn,
    ValidateZipOut,
)

__all__ = [
    "ActivityEventOut",
    "ActivityEventWithUserOut",
    "ApplicantViewOut",
    "ApplicationDetailOut",
    "ApplicationListItemOut",
    "ApplicationOut",
    "ApplicationStatus",
    "ApplicationUpdate",
    "DecisionIn",
    "DocumentOut",
    "ErrorOut",
    "HealthOut",
    "IncomeLimitIn",
    "IncomeLimitOut",
    "IncomeLimitUpdate",
    "LoginIn",
    "ProgramIn",
    "ProgramOut",
    "ProgramUpdate",
    "StartApplicationIn",
    "StartApplicationOut",
    "UserOut",
    "ValidateZipIn",
    "ValidateZipOut",
]
