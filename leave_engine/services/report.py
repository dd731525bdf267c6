"""Reporting service: audit log queries and leave statistics."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import and_, case, func, select
from sqlmodel import col

from leave_engine.models.audit import AuditLog
from leave_engine.models.enums import Role, SubmissionCategory, SubmissionStatus
from leave_engine.models.submission import Submission
from leave_engine.schemas.report import AuditLogEntryResponse, AuditLogListResponse, LeaveStatsResponse
from leave_engine.services.capability import BALANCE_CATEGORIES

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession


async def query_audit_log(
    session: AsyncSession,
    *,
    action: str | None = None,
    actor_id: uuid.UUID | None = None,
    target_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AuditLogListResponse:
    """Query audit log entries with optional filters, newest first."""
    filters = []

    if action is not None:
        filters.append(col(AuditLog.action) == action)
    if actor_id is not None:
        filters.append(col(AuditLog.actor_id) == actor_id)
    if target_id is not None:
        filters.append(col(AuditLog.target_id) == target_id)
    if start_date is not None:
        filters.append(col(AuditLog.created_at) >= datetime.combine(start_date, time.min, tzinfo=UTC))
    if end_date is not None:
        filters.append(
            col(AuditLog.created_at) < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=UTC)
        )

    count_result = await session.execute(select(func.count()).select_from(AuditLog).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(AuditLog).where(*filters).order_by(col(AuditLog.created_at).desc()).offset(offset).limit(limit)
    )
    entries = list(result.scalars().all())

    return AuditLogListResponse(
        items=[
            AuditLogEntryResponse(
                id=e.id,
                action=e.action,
                target_id=e.target_id,
                target_type=e.target_type,
                actor_id=e.actor_id,
                actor_role=e.actor_role,
                details=e.details or {},
                created_at=e.created_at,
            )
            for e in entries
        ],
        total=total,
    )


async def get_leave_stats(session: AsyncSession) -> LeaveStatsResponse:
    """Counts of staff leave submissions by status.

    ``medical`` counts every MEDICAL_CERT submission, student medical forms
    included.
    """

    def _count_where(condition: object) -> object:
        return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

    staff = col(Submission.requester_role) != Role.STUDENT.value
    result = await session.execute(
        select(
            _count_where(staff).label("total"),
            _count_where(and_(staff, col(Submission.status) == SubmissionStatus.PENDING.value)).label("pending"),
            _count_where(and_(staff, col(Submission.status) == SubmissionStatus.APPROVED.value)).label("approved"),
            _count_where(and_(staff, col(Submission.status) == SubmissionStatus.REJECTED.value)).label("rejected"),
            _count_where(col(Submission.category) == SubmissionCategory.MEDICAL_CERT.value).label("medical"),
        ).where(col(Submission.category).in_([c.value for c in BALANCE_CATEGORIES]))
    )
    row = result.one()
    return LeaveStatsResponse(
        total=int(row.total),
        pending=int(row.pending),
        approved=int(row.approved),
        rejected=int(row.rejected),
        medical=int(row.medical),
    )
