"""Applicant (token) and reviewer (session) endpoints for applications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from benefit_portal.backend.api.deps import get_current_user, get_settings, get_storage
from benefit_portal.backend.core.models import User
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.core.utils.config import PortalSettings
from benefit_portal.backend.schemas import (
    ApplicantViewOut,
    ApplicationDetailOut,
    ApplicationListItemOut,
    ApplicationOut,
    ApplicationStatus,
    ApplicationUpdate,
    DecisionIn,
    DocumentOut,
    StartApplicationIn,
    StartApplicationOut,
)
from benefit_portal.backend.services import applications as application_service

router = APIRouter(prefix="/applications", tags=["applications"])


# ── Public applicant routes ─────────────────────────────────────────────────


@router.post("/start", response_model=StartApplicationOut, status_code=status.HTTP_201_CREATED)
def start(body: StartApplicationIn, storage: Storage = Depends(get_storage)) -> StartApplicationOut:
    return application_service.start_application(storage, body)


@router.get("/by-token/{token}", response_model=ApplicantViewOut)
def get_by_token(token: str, storage: Storage = Depends(get_storage)) -> ApplicantViewOut:
    return application_service.get_applicant_view(storage, token)


@router.patch("/by-token/{token}", response_model=ApplicationOut)
def update_by_token(
    token: str, body: ApplicationUpdate, storage: Storage = Depends(get_storage)
) -> ApplicationOut:
    application = application_service.update_by_token(storage, token, body)
    return ApplicationOut.model_validate(application)


@router.post("/by-token/{token}/upload", response_model=DocumentOut)
def upload(
    token: str,
    file: UploadFile | None = File(default=None),
    storage: Storage = Depends(get_storage),
    settings: PortalSettings = Depends(get_settings),
) -> DocumentOut:
    document = application_service.upload_document(
        storage,
        token,
        stream=file.file if file is not None else None,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        settings=settings.uploads,
    )
    return DocumentOut.model_validate(document)


@router.post("/by-token/{token}/submit", response_model=ApplicationOut)
def submit(token: str, storage: Storage = Depends(get_storage)) -> ApplicationOut:
    return ApplicationOut.model_validate(application_service.submit_by_token(storage, token))


# ── Reviewer routes ─────────────────────────────────────────────────────────


@router.get(
    "",
    response_model=list[ApplicationListItemOut],
    dependencies=[Depends(get_current_user)],
)
def list_applications(
    status: ApplicationStatus | None = None,
    program_id: int | None = Query(default=None, alias="programId"),
    search: str | None = None,
    storage: Storage = Depends(get_storage),
) -> list[ApplicationListItemOut]:
    return application_service.list_for_review(
        storage, status=status, program_id=program_id, search=search
    )


@router.get(
    "/{application_id}",
    response_model=ApplicationDetailOut,
    dependencies=[Depends(get_current_user)],
)
def get_application(
    application_id: int, storage: Storage = Depends(get_storage)
) -> ApplicationDetailOut:
    return application_service.get_for_review(storage, application_id)


@router.post("/{application_id}/decision", response_model=ApplicationOut)
def decide(
    application_id: int,
    body: DecisionIn,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> ApplicationOut:
    application = application_service.record_decision(storage, application_id, body, user)
    return ApplicationOut.model_validate(application)
