"""
API tests for the applicant intake flow and reviewer adjudication.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from benefit_portal.backend.core.utils.config import PortalSettings


@pytest.fixture
def token(client: TestClient, seeded_program_id: int) -> str:
    resp = client.post(
        "/api/applications/start",
        json={
            "programId": seeded_program_id,
            "applicantName": "Jane Doe",
            "applicantEmail": "jane@example.com",
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["token"]


def _fill(client: TestClient, token: str, household: int = 3, income_cents: int = 4_000_000) -> None:
    resp = client.patch(
        f"/api/applications/by-token/{token}",
        json={
            "addressLine1": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip": "62701",
            "householdSize": household,
            "annualIncomeCents": income_cents,
        },
    )
    assert resp.status_code == 200, resp.text


def _submit(client: TestClient, token: str) -> dict:
    resp = client.post(f"/api/applications/by-token/{token}/submit")
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestStart:
    def test_start_creates_draft(self, client: TestClient, token: str) -> None:
        assert len(token) == 32

        body = client.get(f"/api/applications/by-token/{token}").json()
        assert body["status"] == "Draft"
        assert body["systemResult"] == "NeedsReview"
        assert body["applicantName"] == "Jane Doe"
        assert body["documents"] == []
        assert body["activityEvents"] == []

    def test_magic_link_is_logged(self, client: TestClient, seeded_program_id: int, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="benefit_portal.backend.core.notifications"):
            resp = client.post(
                "/api/applications/start",
                json={"programId": seeded_program_id, "applicantName": "A", "applicantEmail": "a@example.com"},
            )
        token = resp.json()["token"]
        assert f"/apply/{token}" in caplog.text

    def test_unknown_program(self, client: TestClient) -> None:
        resp = client.post(
            "/api/applications/start",
            json={"programId": 9999, "applicantName": "A", "applicantEmail": "a@example.com"},
        )
        assert resp.status_code == 404

    def test_invalid_email(self, client: TestClient, seeded_program_id: int) -> None:
        resp = client.post(
            "/api/applications/start",
            json={"programId": seeded_program_id, "applicantName": "A", "applicantEmail": "nope"},
        )
        assert resp.status_code == 400
        assert resp.json()["field"] == "applicantEmail"

    def test_blank_name(self, client: TestClient, seeded_program_id: int) -> None:
        resp = client.post(
            "/api/applications/start",
            json={"programId": seeded_program_id, "applicantName": "   ", "applicantEmail": "a@example.com"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"message": "Name is required", "field": "applicantName"}

    def test_unknown_token(self, client: TestClient) -> None:
        assert client.get("/api/applications/by-token/deadbeef").status_code == 404


class TestApplicantUpdates:
    def test_partial_update(self, client: TestClient, token: str) -> None:
        _fill(client, token)
        resp = client.patch(f"/api/applications/by-token/{token}", json={"applicantPhone": "555-0100"})
        body = resp.json()
        assert body["applicantPhone"] == "555-0100"
        assert body["city"] == "Springfield"
        assert body["householdSize"] == 3

    def test_status_cannot_be_set_by_applicant(self, client: TestClient, token: str) -> None:
        resp = client.patch(f"/api/applications/by-token/{token}", json={"status": "Approved"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "Draft"

    def test_negative_income_rejected(self, client: TestClient, token: str) -> None:
        resp = client.patch(f"/api/applications/by-token/{token}", json={"annualIncomeCents": -1})
        assert resp.status_code == 400
        assert resp.json()["field"] == "annualIncomeCents"

    def test_zip_outside_service_area(self, reviewer: TestClient, client: TestClient, token: str) -> None:
        program_id = client.get(f"/api/applications/by-token/{token}").json()["programId"]
        reviewer.patch(f"/api/programs/{program_id}", json={"allowedZipCodes": ["11111"]})

        resp = client.patch(f"/api/applications/by-token/{token}", json={"zip": "22222"})
        assert resp.status_code == 400
        assert resp.json()["field"] == "zip"
        assert client.patch(f"/api/applications/by-token/{token}", json={"zip": "11111"}).status_code == 200

    def test_cannot_edit_after_submit(self, client: TestClient, token: str) -> None:
        _fill(client, token)
        _submit(client, token)
        resp = client.patch(f"/api/applications/by-token/{token}", json={"city": "Elsewhere"})
        assert resp.status_code == 403
        assert resp.json()["message"] == "Cannot edit submitted application"

    def test_blank_name_rejected(self, client: TestClient, token: str) -> None:
        resp = client.patch(f"/api/applications/by-token/{token}", json={"applicantName": "   "})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Name is required", "field": "applicantName"}


class TestUpload:
    def test_upload_document(self, client: TestClient, token: str, settings: PortalSettings) -> None:
        resp = client.post(
            f"/api/applications/by-token/{token}/upload",
            files={"file": ("pay stub.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert resp.status_code == 200, resp.text
        doc = resp.json()
        assert doc["filename"] == "pay stub.pdf"
        assert doc["mimeType"] == "application/pdf"
        assert doc["sizeBytes"] == 8

        stored = Path(doc["path"])
        assert stored.parent == settings.upload_dir
        assert stored.read_bytes() == b"%PDF-1.4"

        docs = client.get(f"/api/applications/by-token/{token}").json()["documents"]
        assert [d["id"] for d in docs] == [doc["id"]]

        served = client.get(f"/uploads/{stored.name}")
        assert served.status_code == 200
        assert served.content == b"%PDF-1.4"

    def test_missing_file(self, client: TestClient, token: str) -> None:
        resp = client.post(f"/api/applications/by-token/{token}/upload")
        assert resp.status_code == 400

    def test_unknown_token(self, client: TestClient) -> None:
        resp = client.post(
            "/api/applications/by-token/nope/upload",
            files={"file": ("a.pdf", b"x", "application/pdf")},
        )
        assert resp.status_code == 404

    def test_disallowed_type(self, client: TestClient, token: str) -> None:
        resp = client.post(
            f"/api/applications/by-token/{token}/upload",
            files={"file": ("run.sh", b"echo", "text/x-sh")},
        )
        assert resp.status_code == 400

    def test_too_large(self, client: TestClient, token: str) -> None:
        # conftest caps uploads at 1 KiB
        resp = client.post(
            f"/api/applications/by-token/{token}/upload",
            files={"file": ("big.png", b"x" * 2048, "image/png")},
        )
        assert resp.status_code == 413

    def test_exactly_at_limit(self, client: TestClient, token: str) -> None:
        resp = client.post(
            f"/api/applications/by-token/{token}/upload",
            files={"file": ("edge.png", b"x" * 1024, "image/png")},
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["sizeBytes"] == 1024

    def test_upload_after_submit_forbidden(self, client: TestClient, token: str) -> None:
        _fill(client, token)
        _submit(client, token)
        resp = client.post(
            f"/api/applications/by-token/{token}/upload",
            files={"file": ("late.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert resp.status_code == 403
        assert client.get(f"/api/applications/by-token/{token}").json()["documents"] == []


class TestSubmit:
    def test_eligible(self, client: TestClient, token: str) -> None:
        _fill(client, token, household=3, income_cents=4_000_000)
        body = _submit(client, token)

        assert body["status"] == "Submitted"
        assert body["systemResult"] == "Eligible"
        assert body["computedLimitCents"] == 4_500_000
        assert body["ruleVersion"] == "2024-V1"
        assert body["submittedAt"] is not None

        events = client.get(f"/api/applications/by-token/{token}").json()["activityEvents"]
        assert [e["type"] for e in events] == ["System"]
        assert events[0]["message"] == "Application submitted. System calculation: Eligible"
        assert events[0]["createdByUserId"] is None

    def test_submitted_at_round_trips(self, client: TestClient, token: str) -> None:
        _fill(client, token)
        submitted = _submit(client, token)["submittedAt"]
        assert submitted.endswith("Z")
        assert client.get(f"/api/applications/by-token/{token}").json()["submittedAt"] == submitted

    def test_not_eligible(self, client: TestClient, token: str) -> None:
        _fill(client, token, household=1, income_cents=3_500_001)
        assert _submit(client, token)["systemResult"] == "NotEligible"

    def test_no_limit_for_household(self, client: TestClient, token: str) -> None:
        _fill(client, token, household=12)
        body = _submit(client, token)
        assert body["systemResult"] == "NeedsReview"
        assert body["computedLimitCents"] is None

    def test_unanswered_income(self, client: TestClient, token: str) -> None:
        body = _submit(client, token)
        assert body["systemResult"] == "NeedsReview"

    def test_double_submit_conflicts(self, client: TestClient, token: str) -> None:
        _submit(client, token)
        assert client.post(f"/api/applications/by-token/{token}/submit").status_code == 409


class TestReview:
    def test_list_and_filters(self, reviewer: TestClient, client: TestClient, token: str, seeded_program_id: int) -> None:
        _fill(client, token)
        _submit(client, token)
        client.post(
            "/api/applications/start",
            json={"programId": seeded_program_id, "applicantName": "Bob Smith", "applicantEmail": "bob@example.com"},
        )

        apps = reviewer.get("/api/applications").json()
        assert [a["applicantName"] for a in apps] == ["Jane Doe", "Bob Smith"]
        assert apps[0]["program"]["id"] == seeded_program_id

        assert len(reviewer.get("/api/applications", params={"status": "Submitted"}).json()) == 1
        assert [a["applicantName"] for a in reviewer.get("/api/applications", params={"search": "bob"}).json()] == ["Bob Smith"]
        assert reviewer.get("/api/applications", params={"programId": 9999}).json() == []

    def test_invalid_status_filter(self, reviewer: TestClient) -> None:
        assert reviewer.get("/api/applications", params={"status": "Bogus"}).status_code == 400

    def test_detail(self, reviewer: TestClient, client: TestClient, token: str) -> None:
        _fill(client, token, household=2)
        app_id = _submit(client, token)["id"]

        body = reviewer.get(f"/api/applications/{app_id}").json()
        assert body["program"]["name"] == "Example Rebate Program"
        assert body["incomeLimitSnapshot"]["householdSize"] == 2
        assert body["incomeLimitSnapshot"]["limitCents"] == 4_000_000
        assert body["activityEvents"][0]["user"] is None

    def test_detail_unknown(self, reviewer: TestClient) -> None:
        assert reviewer.get("/api/applications/9999").status_code == 404

    def test_decision_approve(self, reviewer: TestClient, client: TestClient, token: str) -> None:
        _fill(client, token)
        app_id = _submit(client, token)["id"]

        resp = reviewer.post(f"/api/applications/{app_id}/decision", json={"status": "Approved", "note": "Docs verified"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "Approved"
        assert resp.json()["reviewedBy"] is not None

        events = reviewer.get(f"/api/applications/{app_id}").json()["activityEvents"]
        assert events[0]["type"] == "StatusChange"
        assert events[0]["message"] == "Status changed to Approved. Note: Docs verified"
        assert events[0]["user"]["email"] == "admin@example.com"

    def test_request_info_reopens_for_applicant(
        self, reviewer: TestClient, client: TestClient, token: str, caplog
    ) -> None:
        _fill(client, token)
        app_id = _submit(client, token)["id"]

        with caplog.at_level(logging.INFO, logger="benefit_portal.backend.core.notifications"):
            resp = reviewer.post(
                f"/api/applications/{app_id}/decision",
                json={"status": "NeedsInfo", "note": "Upload a pay stub"},
            )
        assert resp.json()["status"] == "NeedsInfo"
        assert f"/apply/{token}" in caplog.text

        events = reviewer.get(f"/api/applications/{app_id}").json()["activityEvents"]
        assert events[0]["type"] == "RequestInfo"

        # Applicant can edit and resubmit
        _fill(client, token, income_cents=1_000_000)
        assert _submit(client, token)["status"] == "Submitted"

    def test_decision_validation(self, reviewer: TestClient, client: TestClient, token: str) -> None:
        app_id = _submit(client, token)["id"]
        url = f"/api/applications/{app_id}/decision"

        assert reviewer.post(url, json={"status": "Approved", "note": ""}).status_code == 400
        assert reviewer.post(url, json={"status": "Submitted", "note": "x"}).status_code == 400
        assert reviewer.post("/api/applications/9999/decision", json={"status": "Denied", "note": "x"}).status_code == 404

    def test_draft_cannot_be_decided(self, reviewer: TestClient, client: TestClient, token: str) -> None:
        app_id = client.get(f"/api/applications/by-token/{token}").json()["id"]
        resp = reviewer.post(f"/api/applications/{app_id}/decision", json={"status": "Denied", "note": "x"})
        assert resp.status_code == 409


class TestExport:
    def test_csv_export(self, reviewer: TestClient, client: TestClient, token: str) -> None:
        _fill(client, token, household=3, income_cents=4_000_050)
        _submit(client, token)

        resp = reviewer.get("/api/exports/applications")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert 'filename="applications.csv"' in resp.headers["content-disposition"]

        header, row = list(csv.reader(io.StringIO(resp.text)))
        assert header[:3] == ["ID", "Applicant", "Email"]
        assert row[1] == "Jane Doe"
        assert row[4:8] == ["Submitted", "Eligible", "40000.50", "3"]

    def test_export_filters(self, reviewer: TestClient, token: str) -> None:
        resp = reviewer.get("/api/exports/applications", params={"status": "Approved"})
        assert len(list(csv.reader(io.StringIO(resp.text)))) == 1
