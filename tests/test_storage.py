"""
Unit tests for the storage layer and seeding.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from benefit_portal.backend.core.errors import ConflictError
from benefit_portal.backend.core.models import Program
from benefit_portal.backend.core.seed import seed_database
from benefit_portal.backend.core.storage import Storage
from benefit_portal.backend.core.utils.config import SeedSettings


def _application(storage: Storage, program: Program, name: str, token: str, **fields):
    return storage.create_application(
        program_id=program.id,
        applicant_name=name,
        applicant_email=f"{token}@example.com",
        applicant_token=token,
        **fields,
    )


class TestUsers:
    def test_email_lookup_is_case_insensitive(self, storage: Storage) -> None:
        storage.create_user("Reviewer@Example.com", "hash")
        assert storage.get_user_by_email("reviewer@example.com") is not None

    def test_duplicate_email_conflicts(self, storage: Storage) -> None:
        storage.create_user("a@example.com", "hash")
        with pytest.raises(ConflictError):
            storage.create_user("A@example.com", "hash")

    def test_default_role_is_reviewer(self, storage: Storage) -> None:
        assert storage.create_user("r@example.com", "hash").role == "Reviewer"


class TestIncomeLimits:
    def test_lookup_by_household(self, storage: Storage, program: Program) -> None:
        limit = storage.get_income_limit_for_household(program.id, 2)
        assert limit.limit_cents == 4_000_000
        assert storage.get_income_limit_for_household(program.id, 7) is None

    def test_listed_by_household_size(self, storage: Storage, program: Program) -> None:
        sizes = [l.household_size for l in storage.list_income_limits(program.id)]
        assert sizes == [1, 2, 3]

    def test_duplicate_household_conflicts(self, storage: Storage, program: Program) -> None:
        with pytest.raises(ConflictError):
            storage.create_income_limit(program.id, 2, 1, "2025-V1")

    def test_update_to_taken_size_conflicts(self, storage: Storage, program: Program) -> None:
        limit = storage.get_income_limit_for_household(program.id, 1)
        with pytest.raises(ConflictError):
            storage.update_income_limit(limit, {"household_size": 3})

    def test_update_keeping_own_size(self, storage: Storage, program: Program) -> None:
        limit = storage.get_income_limit_for_household(program.id, 1)
        storage.update_income_limit(limit, {"household_size": 1, "limit_cents": 10})
        assert storage.get_income_limit_for_household(program.id, 1).limit_cents == 10

    def test_delete(self, storage: Storage, program: Program) -> None:
        storage.delete_income_limit(storage.get_income_limit_for_household(program.id, 3))
        assert len(storage.list_income_limits(program.id)) == 2


class TestApplications:
    def test_filters(self, storage: Storage, program: Program) -> None:
        other = storage.create_program(
            name="Other", region_label="Elsewhere", effective_start=datetime.now(timezone.utc)
        )
        _application(storage, program, "Ada Lovelace", "t1", status="Submitted")
        _application(storage, program, "Grace Hopper", "t2")
        _application(storage, other, "Alan Turing", "t3", status="Submitted")

        assert len(storage.list_applications()) == 3
        assert {a.applicant_token for a in storage.list_applications(status="Submitted")} == {"t1", "t3"}
        assert [a.applicant_token for a in storage.list_applications(program_id=other.id)] == ["t3"]
        assert [a.applicant_token for a in storage.list_applications(search="hopp")] == ["t2"]

    def test_search_treats_wildcards_literally(self, storage: Storage, program: Program) -> None:
        _application(storage, program, "Jane Doe", "t1")
        _application(storage, program, "Bob Smith", "t2")
        _application(storage, program, "100% Pure_Name", "t3")

        assert storage.list_applications(search="%") == storage.list_applications(search="100%")
        assert [a.applicant_token for a in storage.list_applications(search="%")] == ["t3"]
        assert storage.list_applications(search="J_ne") == []
        assert [a.applicant_token for a in storage.list_applications(search="pure_")] == ["t3"]

    def test_timestamps_read_back_as_utc(self, storage: Storage, program: Program) -> None:
        submitted = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
        app = _application(storage, program, "Ada", "t1", status="Submitted", submitted_at=submitted)
        storage.session.expire_all()

        reloaded = storage.get_application(app.id)
        assert reloaded.submitted_at.tzinfo is not None
        assert reloaded.submitted_at.utcoffset() == timedelta(0)
        assert reloaded.submitted_at == submitted

    def test_sorted_by_submission_newest_first_drafts_last(self, storage: Storage, program: Program) -> None:
        now = datetime.now(timezone.utc)
        _application(storage, program, "Draft", "draft")
        _application(storage, program, "Old", "old", status="Submitted", submitted_at=now - timedelta(days=2))
        _application(storage, program, "New", "new", status="Submitted", submitted_at=now)

        assert [a.applicant_token for a in storage.list_applications()] == ["new", "old", "draft"]

    def test_update_bumps_updated_at(self, storage: Storage, program: Program) -> None:
        app = _application(storage, program, "Ada", "t1")
        storage.update_application(app, {"city": "Springfield"})
        assert app.city == "Springfield"
        assert app.updated_at is not None

    def test_activity_newest_first(self, storage: Storage, program: Program) -> None:
        app = _application(storage, program, "Ada", "t1")
        storage.create_activity_event(app.id, "System", "first")
        storage.create_activity_event(app.id, "Note", "second")
        assert [e.message for e in storage.list_activity_events(app.id)] == ["second", "first"]


class TestSeed:
    def test_seed_is_idempotent(self, storage: Storage) -> None:
        settings = SeedSettings(admin_email="boss@example.com", admin_password="pw")

        assert seed_database(storage, settings) == {"admin": True, "program": True}
        assert seed_database(storage, settings) == {"admin": False, "program": False}

        admin = storage.get_user_by_email("boss@example.com")
        assert admin.role == "Admin"

        (program,) = storage.list_programs()
        limits = storage.list_income_limits(program.id)
        assert [l.household_size for l in limits] == [1, 2, 3, 4, 5, 6]
        assert limits[0].limit_cents == 3_500_000
        assert limits[-1].limit_cents == 6_000_000
        assert {l.version_label for l in limits} == {"2024-V1"}
