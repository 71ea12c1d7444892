"""Idempotent seeding of the admin account and an example program."""

from __future__ import annotations

import logging

from benefit_portal.backend.core.models import utcnow
from benefit_portal.backend.core.security import hash_password
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.core.utils.config import SeedSettings

logger = logging.getLogger(__name__)

EXAMPLE_PROGRAM_NAME = "Example Rebate Program"
EXAMPLE_VERSION_LABEL = "2024-V1"
BASE_LIMIT_CENTS = 3_000_000  # $30,000
PER_PERSON_CENTS = 500_000  # + $5,000 per household member
MAX_SEEDED_HOUSEHOLD = 6


def seed_database(storage: Storage, settings: SeedSettings) -> dict[str, bool]:
    """
    Create the admin user and example program when they are missing.

    Returns:
        Which of ``admin`` / ``program`` were created on this call
    """
    created = {"admin": False, "program": False}

    if storage.get_user_by_email(settings.admin_email) is None:
        storage.create_user(
            email=settings.admin_email,
            password_hash=hash_password(settings.admin_password),
            role="Admin",
        )
        created["admin"] = True
        logger.info("Seeded admin user %s", settings.admin_email)

    if not storage.list_programs():
        program = storage.create_program(
            name=EXAMPLE_PROGRAM_NAME,
            region_label="Statewide",
            effective_start=utcnow(),
        )
        for size in range(1, MAX_SEEDED_HOUSEHOLD + 1):
            storage.create_income_limit(
                program_id=program.id,
                household_size=size,
                limit_cents=BASE_LIMIT_CENTS + size * PER_PERSON_CENTS,
                version_label=EXAMPLE_VERSION_LABEL,
            )
        created["program"] = True
        logger.info("Seeded program %r with %d income limits", program.name, MAX_SEEDED_HOUSEHOLD)

    return created
