"""
Application export.

Builds the reviewer CSV export with pandas so quoting of names and emails
containing commas or quotes is handled by the CSV writer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from benefit_portal.backend.core.models import Application

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "ID",
    "Applicant",
    "Email",
    "Program ID",
    "Status",
    "System Result",
    "Income",
    "Household Size",
    "Submitted At",
]


def _dollars(cents: int | None) -> str:
    return "" if cents is None else f"{cents / 100:.2f}"


def _utc_iso(value: datetime | None) -> str:
    """UTC with millisecond precision and a trailing ``Z``; naive values are UTC."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def applications_frame(applications: Iterable[Application]) -> pd.DataFrame:
    rows = [
        {
            "ID": app.id,
            "Applicant": app.applicant_name,
            "Email": app.applicant_email,
            "Program ID": app.program_id,
            "Status": app.status,
            "System Result": app.system_result or "",
            "Income": _dollars(app.annual_income_cents),
            "Household Size": "" if app.household_size is None else app.household_size,
            "Submitted At": _utc_iso(app.submitted_at),
        }
        for app in applications
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def applications_to_csv(applications: Iterable[Application]) -> str:
    """Render applications as CSV text (header row always present)."""
    return applications_frame(applications).to_csv(index=False, lineterminator="\n")


def export_applications_csv(applications: Iterable[Application], filepath: Path) -> int:
    """
    Write the export to ``filepath``.

    Returns:
        Number of application rows written
    """
    df = applications_frame(applications)
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(filepath, index=False, lineterminator="\n")
    logger.info("Exported %d applications to %s", len(df), filepath)
    return len(df)
