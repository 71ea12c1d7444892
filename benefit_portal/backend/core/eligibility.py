"""
Eligibility calculation.

Compares an applicant's reported annual income with the program's income
limit for their household size. The result is advisory: reviewers make the
final decision, the system result only records what the published limit
says.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from benefit_portal.backend.core.models import IncomeLimit

ELIGIBLE = "Eligible"
NOT_ELIGIBLE = "NotEligible"
NEEDS_REVIEW = "NeedsReview"


@dataclass(frozen=True)
class EligibilityOutcome:
    """System result plus the rule that produced it."""

    result: str
    computed_limit_cents: int | None = None
    rule_version: str | None = None

    @property
    def summary(self) -> str:
        if self.computed_limit_cents is None:
            return f"{self.result} (no income limit applied)"
        return (
            f"{self.result} against limit ${self.computed_limit_cents / 100:,.2f} "
            f"({self.rule_version})"
        )


def evaluate(
    household_size: int | None,
    annual_income_cents: int | None,
    limit: IncomeLimit | None,
) -> EligibilityOutcome:
    """
    Decide the system result for one application.

    Args:
        household_size: Reported household size, or None when not answered
        annual_income_cents: Reported income in cents, or None when not answered
        limit: Income limit matching the household size, or None

    Returns:
        ``NeedsReview`` when any input is missing, otherwise ``Eligible`` when
        income is at or below the limit and ``NotEligible`` above it.
    """
    if not household_size or annual_income_cents is None or limit is None:
        return EligibilityOutcome(result=NEEDS_REVIEW)

    result = ELIGIBLE if annual_income_cents <= limit.limit_cents else NOT_ELIGIBLE
    return EligibilityOutcome(
        result=result,
        computed_limit_cents=limit.limit_cents,
        rule_version=limit.version_label,
    )


def evaluate_with_lookup(
    program_id: int,
    household_size: int | None,
    annual_income_cents: int | None,
    lookup: Callable[[int, int], IncomeLimit | None],
) -> EligibilityOutcome:
    """Run :func:`evaluate`, fetching the limit only when the answers allow it."""
    if not household_size or annual_income_cents is None:
        return EligibilityOutcome(result=NEEDS_REVIEW)
    return evaluate(household_size, annual_income_cents, lookup(program_id, household_size))
