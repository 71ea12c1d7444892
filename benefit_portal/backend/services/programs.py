"""Program and income-limit management."""

from __future__ import annotations

import logging
import re

from benefit_portal.backend.core.errors import NotFoundError
from benefit_portal.backend.core.models import IncomeLimit, Program
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.schemas import (
    IncomeLimitIn,
    IncomeLimitUpdate,
    ProgramIn,
    ProgramUpdate,
    ValidateZipOut,
)

logger = logging.getLogger(__name__)

_ZIP_RE = re.compile(r"^\d{5}$")

# Explicit nulls clear these; for every other field null means "unchanged".
_NULLABLE_PROGRAM_FIELDS = frozenset({"effective_end", "eligibility_criteria"})


def require_program(storage: Storage, program_id: int) -> Program:
    program = storage.get_program(program_id)
    if program is None:
        raise NotFoundError("Program not found")
    return program


def create_program(storage: Storage, data: ProgramIn) -> Program:
    program = storage.create_program(**data.model_dump())
    logger.info("Created program %d (%s)", program.id, program.name)
    return program


def update_program(storage: Storage, program_id: int, data: ProgramUpdate) -> Program:
    program = require_program(storage, program_id)
    updates = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key in _NULLABLE_PROGRAM_FIELDS
    }
    return storage.update_program(program, updates)


def _require_limit(storage: Storage, program_id: int, limit_id: int) -> IncomeLimit:
    limit = storage.get_income_limit(limit_id)
    if limit is None or limit.program_id != program_id:
        raise NotFoundError("Income limit not found")
    return limit


def create_income_limit(storage: Storage, program_id: int, data: IncomeLimitIn) -> IncomeLimit:
    require_program(storage, program_id)
    return storage.create_income_limit(program_id=program_id, **data.model_dump())


def update_income_limit(
    storage: Storage, program_id: int, limit_id: int, data: IncomeLimitUpdate
) -> IncomeLimit:
    limit = _require_limit(storage, program_id, limit_id)
    updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    return storage.update_income_limit(limit, updates)


def delete_income_limit(storage: Storage, program_id: int, limit_id: int) -> None:
    limit = _require_limit(storage, program_id, limit_id)
    storage.delete_income_limit(limit)
    logger.info("Deleted income limit %d of program %d", limit_id, program_id)


def validate_zip(storage: Storage, program_id: int, zip_code: str) -> ValidateZipOut:
    """Check whether ``zip_code`` lies inside the program's service area."""
    program = storage.get_program(program_id)
    if program is None:
        return ValidateZipOut(valid=False, message="Program not found")

    zip_code = zip_code.strip()
    if not _ZIP_RE.match(zip_code):
        return ValidateZipOut(valid=False, message="ZIP code must be exactly 5 digits")

    if not program.allowed_zip_codes:
        return ValidateZipOut(valid=True, message=None)
    if zip_code in program.allowed_zip_codes:
        return ValidateZipOut(valid=True, message=None)
    return ValidateZipOut(
        valid=False,
        message=f"ZIP code {zip_code} is outside the {program.region_label} service area",
    )
