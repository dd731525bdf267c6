"""Leave balance aggregation.

Balances are derived from the submissions table on every call. Nothing is
cached, so a balance can never drift from the rows it summarises.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from leave_engine.exceptions import ForbiddenError, NotFoundError
from leave_engine.models.enums import Capability, SubmissionCategory, SubmissionStatus
from leave_engine.models.submission import Submission
from leave_engine.schemas.balance import BalanceResponse, CategoryBalance, FormQuota, LeaveBalance
from leave_engine.services.capability import BALANCE_CATEGORIES, FORM_CATEGORIES, has_capability, is_student
from leave_engine.services.entitlement import entitlement_for

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.models.enums import EmploymentClassification
    from leave_engine.services.person import PersonDirectory, PersonInfo

_COUNTED_STATUSES = [SubmissionStatus.APPROVED.value, SubmissionStatus.PENDING.value]


def current_year() -> int:
    return datetime.now(UTC).year


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """Half-open UTC range [Jan 1 year, Jan 1 year+1)."""
    return datetime(year, 1, 1, tzinfo=UTC), datetime(year + 1, 1, 1, tzinfo=UTC)


def requested_days(metadata: dict[str, Any] | None) -> int:
    """Day count recorded on a submission; missing or malformed values count as 0."""
    if not metadata:
        return 0
    days = metadata.get("days")
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        return 0
    return days


def _category_balance(total: int, used: int, pending: int) -> CategoryBalance:
    return CategoryBalance(total=total, used=used, pending=pending, remaining=max(0, total - used - pending))


async def compute_leave_balance(
    session: AsyncSession,
    person_id: uuid.UUID,
    classification: EmploymentClassification | None,
    year: int | None = None,
) -> LeaveBalance:
    """Sum used (approved) and pending days per category for the calendar year.

    remaining = max(0, total - used - pending); historical over-allocation
    clamps to zero instead of going negative.
    """
    start, end = year_bounds(year if year is not None else current_year())
    entitlement = entitlement_for(classification)

    result = await session.execute(
        select(Submission.category, Submission.status, Submission.request_metadata).where(
            col(Submission.requester_id) == person_id,
            col(Submission.category).in_([c.value for c in BALANCE_CATEGORIES]),
            col(Submission.status).in_(_COUNTED_STATUSES),
            col(Submission.created_at) >= start,
            col(Submission.created_at) < end,
        )
    )

    used = {category: 0 for category in BALANCE_CATEGORIES}
    pending = {category: 0 for category in BALANCE_CATEGORIES}
    for category, status, metadata in result.all():
        bucket = used if status == SubmissionStatus.APPROVED.value else pending
        bucket[SubmissionCategory(category)] += requested_days(metadata)

    annual = SubmissionCategory.ANNUAL_LEAVE
    medical = SubmissionCategory.MEDICAL_CERT
    return LeaveBalance(
        annual_leave=_category_balance(entitlement.days_for(annual), used[annual], pending[annual]),
        medical_leave=_category_balance(entitlement.days_for(medical), used[medical], pending[medical]),
    )


async def count_form_submissions(
    session: AsyncSession,
    person_id: uuid.UUID,
    year: int | None = None,
) -> int:
    """Count student forms created in the year, whatever their status."""
    start, end = year_bounds(year if year is not None else current_year())
    result = await session.execute(
        select(func.count())
        .select_from(Submission)
        .where(
            col(Submission.requester_id) == person_id,
            col(Submission.category).in_([c.value for c in FORM_CATEGORIES]),
            col(Submission.created_at) >= start,
            col(Submission.created_at) < end,
        )
    )
    return int(result.scalar_one())


async def get_person_balance(
    session: AsyncSession,
    directory: PersonDirectory,
    viewer: PersonInfo,
    person_id: uuid.UUID,
    year: int | None,
    form_limit: int,
) -> BalanceResponse:
    """Balance view for a person. Viewers may see their own, or anyone's with VIEW_ALL_SUBMISSIONS."""
    if viewer.id != person_id and not has_capability(viewer, Capability.VIEW_ALL_SUBMISSIONS):
        raise ForbiddenError("Not authorized to view this balance")

    person = await directory.get_person(person_id)
    if person is None:
        raise NotFoundError("Person not found")

    resolved_year = year if year is not None else current_year()
    balance = await compute_leave_balance(session, person.id, person.employment_classification, resolved_year)

    forms: FormQuota | None = None
    if is_student(person.role):
        count = await count_form_submissions(session, person.id, resolved_year)
        forms = FormQuota(limit=form_limit, used=count, remaining=max(0, form_limit - count))

    return BalanceResponse(
        person_id=person.id,
        year=resolved_year,
        employment_classification=person.employment_classification,
        annual_leave=balance.annual_leave,
        medical_leave=balance.medical_leave,
        forms=forms,
    )
