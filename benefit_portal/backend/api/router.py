"""API route handlers.

Every feature router is gathered here so the application factory in
``app.py`` includes a single router under ``/api``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from benefit_portal.backend.api import (
    application_routes,
    auth_routes,
    export_routes,
    program_routes,
)
from benefit_portal.backend.schemas import ErrorOut, HealthOut

logger = logging.getLogger(__name__)

router = APIRouter(
    responses={
        400: {"model": ErrorOut, "description": "Validation failed"},
        401: {"model": ErrorOut, "description": "Not authenticated"},
    }
)


@router.get("/health", response_model=HealthOut, include_in_schema=False)
async def health_check() -> HealthOut:
    """Liveness probe (suppressed from access log via log filter)."""
    return HealthOut()


router.include_router(auth_routes.router)
router.include_router(program_routes.router)
router.include_router(application_routes.router)
router.include_router(export_routes.router)
