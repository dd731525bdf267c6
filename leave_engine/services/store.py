"""Persistence for submissions.

Rows are created once and afterwards only change through a conditional
status update out of PENDING. Nothing here commits: the caller owns the
transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update
from sqlmodel import col

from leave_engine.exceptions import InvalidTransitionError, NotFoundError
from leave_engine.models.base import now_utc
from leave_engine.models.enums import SubmissionStatus
from leave_engine.models.submission import Submission

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession


async def insert_submission(session: AsyncSession, submission: Submission) -> uuid.UUID:
    """Add a new submission and flush so its id is assigned."""
    session.add(submission)
    await session.flush()
    return submission.id


async def get_submission_or_404(session: AsyncSession, submission_id: uuid.UUID) -> Submission:
    """Fetch a submission by ID. Raises NotFound if absent."""
    result = await session.execute(select(Submission).where(col(Submission.id) == submission_id))
    submission = result.scalar_one_or_none()
    if submission is None:
        raise NotFoundError("Submission not found")
    return submission


async def update_status(
    session: AsyncSession,
    submission: Submission,
    new_status: SubmissionStatus,
    metadata_patch: dict[str, Any],
) -> Submission:
    """Move a PENDING submission to new_status, merging metadata_patch into its metadata.

    The status check and the write are one UPDATE statement guarded by
    ``status = 'PENDING'``, so of two racing transitions only one can match.
    """
    merged = {**(submission.request_metadata or {}), **metadata_patch}
    result = await session.execute(
        update(Submission)
        .where(
            col(Submission.id) == submission.id,
            col(Submission.status) == SubmissionStatus.PENDING.value,
        )
        .values(status=new_status.value, request_metadata=merged, updated_at=now_utc())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise InvalidTransitionError("Submission has already been decided")

    await session.refresh(submission)
    return submission
