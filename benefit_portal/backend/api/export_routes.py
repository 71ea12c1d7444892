"""CSV download of applications for reviewers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from benefit_portal.backend.api.deps import get_current_user, get_storage
from benefit_portal.backend.core.analysis.exporter import applications_to_csv
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.schemas import ApplicationStatus

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/applications", dependencies=[Depends(get_current_user)])
def export_applications(
    status: ApplicationStatus | None = None,
    program_id: int | None = Query(default=None, alias="programId"),
    search: str | None = None,
    storage: Storage = Depends(get_storage),
) -> Response:
    applications = storage.list_applications(status=status, program_id=program_id, search=search)
    return Response(
        content=applications_to_csv(applications),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="applications.csv"'},
    )
