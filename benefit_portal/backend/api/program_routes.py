"""Program catalogue and income-limit tables."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from benefit_portal.backend.api.deps import get_current_user, get_storage
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.schemas import (
    IncomeLimitIn,
    IncomeLimitOut,
    IncomeLimitUpdate,
    ProgramIn,
    ProgramOut,
    ProgramUpdate,
    ValidateZipIn,
    ValidateZipOut,
)
from benefit_portal.backend.services import programs as program_service

router = APIRouter(prefix="/programs", tags=["programs"])


# ── Programs ────────────────────────────────────────────────────────────────


@router.get("", response_model=list[ProgramOut])
def list_programs(storage: Storage = Depends(get_storage)) -> list[ProgramOut]:
    return [ProgramOut.model_validate(p) for p in storage.list_programs()]


@router.post(
    "",
    response_model=ProgramOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def create_program(body: ProgramIn, storage: Storage = Depends(get_storage)) -> ProgramOut:
    return ProgramOut.model_validate(program_service.create_program(storage, body))


# Declared before "/{program_id}" so the literal path wins.
@router.post("/validate-zip", response_model=ValidateZipOut)
def validate_zip(body: ValidateZipIn, storage: Storage = Depends(get_storage)) -> ValidateZipOut:
    return program_service.validate_zip(storage, body.program_id, body.zip_code)


@router.get("/{program_id}", response_model=ProgramOut)
def get_program(program_id: int, storage: Storage = Depends(get_storage)) -> ProgramOut:
    return ProgramOut.model_validate(program_service.require_program(storage, program_id))


@router.patch("/{program_id}", response_model=ProgramOut, dependencies=[Depends(get_current_user)])
def update_program(
    program_id: int, body: ProgramUpdate, storage: Storage = Depends(get_storage)
) -> ProgramOut:
    return ProgramOut.model_validate(program_service.update_program(storage, program_id, body))


# ── Income limits ───────────────────────────────────────────────────────────


@router.get("/{program_id}/limits", response_model=list[IncomeLimitOut])
def list_limits(program_id: int, storage: Storage = Depends(get_storage)) -> list[IncomeLimitOut]:
    return [IncomeLimitOut.model_validate(l) for l in storage.list_income_limits(program_id)]


@router.post(
    "/{program_id}/limits",
    response_model=IncomeLimitOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def create_limit(
    program_id: int, body: IncomeLimitIn, storage: Storage = Depends(get_storage)
) -> IncomeLimitOut:
    limit = program_service.create_income_limit(storage, program_id, body)
    return IncomeLimitOut.model_validate(limit)


@router.patch(
    "/{program_id}/limits/{limit_id}",
    response_model=IncomeLimitOut,
    dependencies=[Depends(get_current_user)],
)
def update_limit(
    program_id: int,
    limit_id: int,
    body: IncomeLimitUpdate,
    storage: Storage = Depends(get_storage),
) -> IncomeLimitOut:
    limit = program_service.update_income_limit(storage, program_id, limit_id, body)
    return IncomeLimitOut.model_validate(limit)


@router.delete(
    "/{program_id}/limits/{limit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user)],
)
def delete_limit(program_id: int, limit_id: int, storage: Storage = Depends(get_storage)) -> Response:
    program_service.delete_income_limit(storage, program_id, limit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
