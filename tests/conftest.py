"""Shared pytest fixtures for the test suite.

Import any of these in a test file by simply declaring the fixture name as a
parameter — pytest discovers them automatically from this conftest.py.

Fixture overview
----------------
settings         — portal settings pointing at a throw-away SQLite file and
                   upload directory under ``tmp_path``
storage          — :class:`Storage` on a fresh schema, committed on teardown
program          — program with income limits for household sizes 1–3
app              — FastAPI application built from ``settings``
client           — anonymous TestClient (lifespan runs: schema + seed)
reviewer         — TestClient logged in as the seeded admin
seeded_program_id — id of the program created by seeding
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from benefit_portal.backend.core.db import build_engine, build_session_factory, init_db
from benefit_portal.backend.core.models import Program
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.core.utils.config import PortalSettings

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"


# ── Settings / storage ───────────────────────────────────────────────────────


@pytest.fixture
def settings(tmp_path: Path) -> PortalSettings:
    return PortalSettings.model_validate(
        {
            "database": {"url": f"sqlite:///{tmp_path / 'portal.db'}"},
            "session": {"secret": "test-secret"},
            "uploads": {"directory": str(tmp_path / "uploads"), "max_bytes": 1024},
            "seed": {"admin_email": ADMIN_EMAIL, "admin_password": ADMIN_PASSWORD},
        }
    )


@pytest.fixture
def storage(settings: PortalSettings) -> Iterator[Storage]:
    engine = build_engine(settings.database.url)
    init_db(engine)
    session = build_session_factory(engine)()
    try:
        yield Storage(session)
        session.commit()
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def program(storage: Storage) -> Program:
    """Program with limits $35k / $40k / $45k for household sizes 1–3."""
    program = storage.create_program(
        name="Heating Assistance",
        region_label="North County",
        effective_start=datetime(2024, 1, 1, tzinfo=timezone.utc),
        allowed_zip_codes=["12345", "12346"],
    )
    for size in (1, 2, 3):
        storage.create_income_limit(
            program_id=program.id,
            household_size=size,
            limit_cents=3_000_000 + size * 500_000,
            version_label="2024-V1",
        )
    return program


# ── HTTP ─────────────────────────────────────────────────────────────────────


@pytest.fixture
def app(settings: PortalSettings):
    from benefit_portal.backend.api.app import create_app

    return create_app(settings)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def reviewer(app) -> Iterator[TestClient]:
    with TestClient(app) as c:
        resp = c.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200, resp.text
        yield c


@pytest.fixture
def seeded_program_id(client: TestClient) -> int:
    programs = client.get("/api/programs").json()
    return next(p["id"] for p in programs if p["name"] == "Example Rebate Program")
