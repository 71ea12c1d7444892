"""ORM models for programs, income limits, applications and their audit trail."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from benefit_portal.backend.core.db import Base, UTCDateTime

USER_ROLES = ("Admin", "Reviewer")
APPLICATION_STATUSES = ("Draft", "Submitted", "NeedsInfo", "Approved", "Denied")

# Applicants may change their answers only in these states.
EDITABLE_STATUSES = frozenset({"Draft", "NeedsInfo"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="Reviewer")
    created_at = Column(UTCDateTime, default=utcnow)


class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    region_label = Column(String(255), nullable=False)
    effective_start = Column(UTCDateTime, nullable=False)
    effective_end = Column(UTCDateTime)

    residence_types = Column(JSON, nullable=False, default=list)
    property_types = Column(JSON, nullable=False, default=list)
    document_requirements = Column(JSON, nullable=False, default=list)
    eligibility_criteria = Column(Text)
    allowed_zip_codes = Column(JSON, nullable=False, default=list)

    created_at = Column(UTCDateTime, default=utcnow)

    income_limits = relationship(
        "IncomeLimit",
        back_populates="program",
        cascade="all, delete-orphan",
        order_by="IncomeLimit.household_size",
    )

    def accepts_zip(self, zip_code: str) -> bool:
        """An empty allow-list means the program serves every ZIP code."""
        return not self.allowed_zip_codes or zip_code in self.allowed_zip_codes


class IncomeLimit(Base):
    __tablename__ = "income_limits"
    __table_args__ = (UniqueConstraint("program_id", "household_size", name="uq_limit_household"),)

    id = Column(Integer, primary_key=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False, index=True)
    household_size = Column(Integer, nullable=False)
    limit_cents = Column(Integer, nullable=False)
    version_label = Column(String(50), nullable=False)
    created_at = Column(UTCDateTime, default=utcnow)

    program = relationship("Program", back_populates="income_limits")


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False, index=True)

    # Applicant
    applicant_name = Column(String(255), nullable=False)
    applicant_email = Column(String(255), nullable=False)
    applicant_phone = Column(String(50))
    applicant_token = Column(String(64), nullable=False, unique=True, index=True)

    # Address
    address_line1 = Column(String(255))
    city = Column(String(120))
    state = Column(String(60))
    zip = Column(String(10))

    # Financials
    household_size = Column(Integer)
    annual_income_cents = Column(Integer)

    # System calculation
    computed_limit_cents = Column(Integer)
    system_result = Column(String(20))
    rule_version = Column(String(50))

    status = Column(String(20), nullable=False, default="Draft", index=True)
    submitted_at = Column(UTCDateTime)
    reviewed_by = Column(Integer, ForeignKey("users.id"))

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    program = relationship("Program")
    reviewer = relationship("User")

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    path = Column(String(1024), nullable=False)
    mime_type = Column(String(255), nullable=False)
    size_bytes = Column(Integer, nullable=False)
    uploaded_at = Column(UTCDateTime, default=utcnow)


class ActivityEvent(Base):
    __tablename__ = "activity_events"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    created_by_user_id = Column(Integer, ForeignKey("users.id"))
    created_at = Column(UTCDateTime, default=utcnow)

    user = relationship("User")
