"""Pre-persistence checks for new submissions.

Both checks read the store and must run inside the same transaction and
per-key lock as the insert they guard.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from leave_engine.models.enums import SubmissionCategory
from leave_engine.services.balance import compute_leave_balance, count_form_submissions, current_year
from leave_engine.services.capability import BALANCE_CATEGORIES

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.models.enums import EmploymentClassification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation check."""

    ok: bool
    reason: str | None = None


ACCEPTED = ValidationResult(ok=True)


def _rejected(reason: str) -> ValidationResult:
    return ValidationResult(ok=False, reason=reason)


async def validate_leave_request(
    session: AsyncSession,
    person_id: uuid.UUID,
    classification: EmploymentClassification | None,
    category: SubmissionCategory,
    days: int,
    year: int | None = None,
) -> ValidationResult:
    """Accept or reject a day-counted request against the remaining balance."""
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        return _rejected("Requested days must be a positive whole number.")

    category = SubmissionCategory(category)
    if category not in BALANCE_CATEGORIES:
        return ACCEPTED

    balance = await compute_leave_balance(session, person_id, classification, year)
    bucket = balance.annual_leave if category == SubmissionCategory.ANNUAL_LEAVE else balance.medical_leave
    if days > bucket.remaining:
        logger.warning(
            "Rejected %s request for %s: requested=%d remaining=%d",
            category,
            person_id,
            days,
            bucket.remaining,
        )
        return _rejected(f"Insufficient {category} balance. Remaining: {bucket.remaining} days.")
    return ACCEPTED


async def validate_form_quota(
    session: AsyncSession,
    person_id: uuid.UUID,
    limit: int,
    year: int | None = None,
) -> ValidationResult:
    """Reject a student form once the yearly count limit has been reached."""
    resolved_year = year if year is not None else current_year()
    count = await count_form_submissions(session, person_id, resolved_year)
    if count >= limit:
        logger.warning("Rejected form for %s: %d of %d used in %d", person_id, count, limit, resolved_year)
        return _rejected(f"Maximum upload limit ({limit}) reached for forms this year ({resolved_year})")
    return ACCEPTED
