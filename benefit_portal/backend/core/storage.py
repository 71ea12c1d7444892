"""
Storage layer.

Thin repository over a SQLAlchemy session. Services call these methods and
never build queries themselves; the session's transaction is owned by the
caller (request dependency or ``session_scope``).
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from benefit_portal.backend.core.errors import ConflictError
from benefit_portal.backend.core.models import (
    ActivityEvent,
    Application,
    Document,
    IncomeLimit,
    Program,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)


class Storage:
    """Data access for every table the portal owns."""

    def __init__(self, session: Session):
        self.session = session

    def _add(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    @staticmethod
    def _assign(obj, updates: dict[str, Any]):
        for key, value in updates.items():
            setattr(obj, key, value)
        return obj

    # ── Users ────────────────────────────────────────────────────────────

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.session.scalars(stmt).first()

    def create_user(self, email: str, password_hash: str, role: str = "Reviewer") -> User:
        if self.get_user_by_email(email) is not None:
            raise ConflictError(f"User {email} already exists", field="email")
        return self._add(User(email=email.strip(), password_hash=password_hash, role=role))

    # ── Programs ─────────────────────────────────────────────────────────

    def list_programs(self) -> list[Program]:
        stmt = select(Program).order_by(Program.created_at.desc(), Program.id.desc())
        return list(self.session.scalars(stmt))

    def get_program(self, program_id: int) -> Program | None:
        return self.session.get(Program, program_id)

    def create_program(self, **fields: Any) -> Program:
        return self._add(Program(**fields))

    def update_program(self, program: Program, updates: dict[str, Any]) -> Program:
        self._assign(program, updates)
        self.session.flush()
        return program

    # ── Income limits ────────────────────────────────────────────────────

    def list_income_limits(self, program_id: int) -> list[IncomeLimit]:
        stmt = (
            select(IncomeLimit)
            .where(IncomeLimit.program_id == program_id)
            .order_by(IncomeLimit.household_size)
        )
        return list(self.session.scalars(stmt))

    def get_income_limit(self, limit_id: int) -> IncomeLimit | None:
        return self.session.get(IncomeLimit, limit_id)

    def get_income_limit_for_household(self, program_id: int, size: int) -> IncomeLimit | None:
        stmt = select(IncomeLimit).where(
            IncomeLimit.program_id == program_id,
            IncomeLimit.household_size == size,
        )
        return self.session.scalars(stmt).first()

    def _check_household_free(self, program_id: int, size: int, exclude_id: int | None = None):
        existing = self.get_income_limit_for_household(program_id, size)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(
                f"An income limit for household size {size} already exists",
                field="householdSize",
            )

    def create_income_limit(
        self, program_id: int, household_size: int, limit_cents: int, version_label: str
    ) -> IncomeLimit:
        self._check_household_free(program_id, household_size)
        return self._add(
            IncomeLimit(
                program_id=program_id,
                household_size=household_size,
                limit_cents=limit_cents,
                version_label=version_label,
            )
        )

    def update_income_limit(self, limit: IncomeLimit, updates: dict[str, Any]) -> IncomeLimit:
        if "household_size" in updates:
            self._check_household_free(limit.program_id, updates["household_size"], limit.id)
        self._assign(limit, updates)
        self.session.flush()
        return limit

    def delete_income_limit(self, limit: IncomeLimit) -> None:
        self.session.delete(limit)
        self.session.flush()

    # ── Applications ─────────────────────────────────────────────────────

    def create_application(self, **fields: Any) -> Application:
        return self._add(Application(**fields))

    def get_application(self, application_id: int) -> Application | None:
        return self.session.get(Application, application_id)

    def get_application_by_token(self, token: str) -> Application | None:
        stmt = select(Application).where(Application.applicant_token == token)
        return self.session.scalars(stmt).first()

    def list_applications(
        self,
        status: str | None = None,
        program_id: int | None = None,
        search: str | None = None,
    ) -> list[Application]:
        stmt = select(Application)
        if status:
            stmt = stmt.where(Application.status == status)
        if program_id:
            stmt = stmt.where(Application.program_id == program_id)
        if search:
            stmt = stmt.where(Application.applicant_name.icontains(search.strip(), autoescape=True))
        # Unsubmitted drafts have no submitted_at and sort after everything else.
        stmt = stmt.order_by(
            Application.submitted_at.is_(None),
            Application.submitted_at.desc(),
            Application.id.desc(),
        )
        return list(self.session.scalars(stmt))

    def update_application(self, application: Application, updates: dict[str, Any]) -> Application:
        self._assign(application, updates)
        application.updated_at = utcnow()
        self.session.flush()
        return application

    # ── Documents ────────────────────────────────────────────────────────

    def create_document(self, **fields: Any) -> Document:
        return self._add(Document(**fields))

    def list_documents(self, application_id: int) -> list[Document]:
        stmt = (
            select(Document)
            .where(Document.application_id == application_id)
            .order_by(Document.uploaded_at, Document.id)
        )
        return list(self.session.scalars(stmt))

    # ── Activity ─────────────────────────────────────────────────────────

    def create_activity_event(
        self,
        application_id: int,
        type: str,
        message: str,
        created_by_user_id: int | None = None,
    ) -> ActivityEvent:
        logger.debug("Activity on application %d: [%s] %s", application_id, type, message)
        return self._add(
            ActivityEvent(
                application_id=application_id,
                type=type,
                message=message,
                created_by_user_id=created_by_user_id,
            )
        )

    def list_activity_events(self, application_id: int) -> list[ActivityEvent]:
        stmt = (
            select(ActivityEvent)
            .where(ActivityEvent.application_id == application_id)
            .order_by(ActivityEvent.created_at.desc(), ActivityEvent.id.desc())
        )
        return list(self.session.scalars(stmt))
