"""FastAPI application factory.

Instantiate with:
    uvicorn benefit_portal.backend.api.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from benefit_portal.backend.api.router import router
from benefit_portal.backend.core.db import build_engine, build_session_factory, init_db, session_scope
from benefit_portal.backend.core.errors import PortalError
from benefit_portal.backend.core.seed import seed_database
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.core.utils.config import PortalSettings, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, seed defaults and make sure the upload directory exists."""
    settings: PortalSettings = app.state.settings
    init_db(app.state.engine)
    if settings.seed.enabled:
        with session_scope(app.state.session_factory) as session:
            seed_database(Storage(session), settings.seed)
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Backend ready – uploads in %s", settings.upload_dir.resolve())
    yield
    app.state.engine.dispose()


def create_app(settings: PortalSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    application = FastAPI(
        title="Benefit Eligibility Portal API",
        version="0.1.0",
        description="Applicant intake and reviewer adjudication backend",
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.engine = build_engine(settings.database.url, echo=settings.database.echo)
    application.state.session_factory = build_session_factory(application.state.engine)

    # ── CORS ───────────────────────────────────────────────────────────────
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Cookie session holding the reviewer's user id ──────────────────────
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.session.secret,
        session_cookie=settings.session.cookie_name,
        max_age=settings.session.max_age_seconds,
        same_site="lax",
    )

    # ── Serve uploaded documents as static files ───────────────────────────
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    application.mount(
        "/uploads",
        StaticFiles(directory=str(settings.upload_dir)),
        name="uploads",
    )

    # ── Register all API routes under /api ─────────────────────────────────
    application.include_router(router, prefix="/api")

    _install_error_handlers(application)

    # ── Suppress noisy access-log lines for health polls ───────────────────
    _install_access_log_filter()

    return application


def _install_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(PortalError)
    async def _portal_error(request: Request, exc: PortalError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @application.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        # List indexes are dropped so the field names the enclosing attribute.
        loc = [part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"]
        message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
        content = {"message": message}
        if loc:
            content["field"] = loc[-1]
        return JSONResponse(status_code=400, content=content)


class _QuietPollFilter(logging.Filter):
    """Drop uvicorn access-log records for /api/health."""

    _NOISY = ("/api/health",)

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not any(path in msg for path in self._NOISY)


def _install_access_log_filter() -> None:
    """Attach the filter to uvicorn's access logger (if it exists)."""
    uvicorn_access = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, _QuietPollFilter) for f in uvicorn_access.filters):
        uvicorn_access.addFilter(_QuietPollFilter())


# Module-level instance used by uvicorn.
app = create_app()
