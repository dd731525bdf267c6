# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from contextlib import nullcontext
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from leave_engine.exceptions import ForbiddenError, InvalidTransitionError, TransientStorageError, ValidationError
from leave_engine.models.base import now_utc
from leave_engine.models.enums import (
    AuditAction,
    Capability,
    Decision,
    Role,
    SubmissionCategory,
    SubmissionStatus,
)
from leave_engine.models.ledger import FORMS_LEDGER_KEY
from leave_engine.models.submission import NO_FILE_REFERENCE, Submission
from leave_engine.schemas.metadata import STAFF_METADATA, STUDENT_METADATA, LeaveMetadata
from leave_engine.schemas.submission import SubmissionListResponse, SubmissionResponse
from leave_engine.services.audit import model_to_audit_dict, record_audit
from leave_engine.services.balance import current_year
from leave_engine.services.capability import (
    can_submit,
    has_capability,
    is_balance_tracked,
    is_count_capped,
    is_student,
    review_capability_for,
)
from leave_engine.services.ledger import lock_ledger_for_update
from leave_engine.services.locks import submission_locks
from leave_engine.services.store import get_submission_or_404, insert_submission, update_status
from leave_engine.services.validator import validate_form_quota, validate_leave_request

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.schemas.metadata import RequestMetadata
    from leave_engine.schemas.submission import CreateSubmissionPayload, DecisionPayload
    from leave_engine.services.person import PersonDirectory, PersonInfo

logger = logging.getLogger(__name__)

# Student forms that may be submitted without an attached file.
_FILE_OPTIONAL_STUDENT_CATEGORIES = frozenset({SubmissionCategory.EARLY_DISMISSAL})

_DECISION_OUTCOMES: dict[Decision, tuple[SubmissionStatus, AuditAction]] = {
    Decision.APPROVE: (SubmissionStatus.APPROVED, AuditAction.APPROVE),
    Decision.REJECT: (SubmissionStatus.REJECTED, AuditAction.REJECT),
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_submission_response(submission: Submission) -> SubmissionResponse:
    """Map a submission model to its response schema."""
    return SubmissionResponse(
        id=submission.id,
        requester_id=submission.requester_id,
        requester_role=Role(submission.requester_role),
        category=SubmissionCategory(submission.category),
        status=SubmissionStatus(submission.status),
        file_reference=submission.file_reference,
        request_metadata=submission.request_metadata or {},
        created_at=submission.created_at,
        updated_at=submission.updated_at,
    )


def _format_metadata_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def decode_metadata(category: SubmissionCategory, role: Role, payload: dict[str, Any]) -> RequestMetadata:
    """Decode a raw metadata payload into the variant for this category and requester."""
    variants = STUDENT_METADATA if is_student(role) else STAFF_METADATA
    model = variants.get(category)
    if model is None:
        raise ValidationError(f"{category} submissions are not accepted from {role} users")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid {category} metadata: {_format_metadata_errors(exc)}") from None


def _resolve_file_reference(category: SubmissionCategory, role: Role, file_reference: str | None) -> str:
    reference = (file_reference or "").strip()
    if reference:
        return reference
    if is_student(role) and category not in _FILE_OPTIONAL_STUDENT_CATEGORIES:
        raise ValidationError("File is required for this submission type")
    return NO_FILE_REFERENCE


def _can_view(viewer: PersonInfo, submission: Submission) -> bool:
    if submission.requester_id == viewer.id or has_capability(viewer, Capability.VIEW_ALL_SUBMISSIONS):
        return True
    return has_capability(viewer, Capability.VIEW_STUDENT_FORMS) and is_student(submission.requester_role)


async def _commit_or_raise(session: AsyncSession, operation: str) -> None:
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Commit failed during %s", operation)
        raise TransientStorageError(f"Could not {operation}; nothing was saved") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_submission(
    session: AsyncSession,
    requester: PersonInfo,
    payload: CreateSubmissionPayload,
    *,
    form_limit: int,
) -> SubmissionResponse:
    """Validate and persist a new submission, with its CREATE_SUBMISSION audit entry.

    Flow:
    1. Check the requester may submit this category.
    2. Decode metadata and resolve the file reference.
    3. Under the per-(requester, ledger key, year) lock, lock the ledger row.
    4. Validate against the day balance (staff leave) or form quota (student forms).
    5. Insert the submission, bump the ledger version, write the audit entry.
    6. Commit all of it as one transaction.
    """
    category = payload.category
    role = requester.role
    if not can_submit(role, category):
        raise ForbiddenError(f"{role} users cannot submit {category}")

    metadata = decode_metadata(category, role, payload.metadata)
    file_reference = _resolve_file_reference(category, role, payload.file_reference)

    year = current_year()
    ledger_key: str | None = None
    if is_balance_tracked(category, role):
        ledger_key = category.value
    elif is_count_capped(category, role):
        ledger_key = FORMS_LEDGER_KEY

    initial_status = SubmissionStatus.PENDING
    if review_capability_for(category, role) is None:
        initial_status = SubmissionStatus.APPROVED

    guard = submission_locks.hold((requester.id, ledger_key, year)) if ledger_key else nullcontext()
    async with guard:
        try:
            if ledger_key is not None:
                ledger = await lock_ledger_for_update(session, requester.id, ledger_key, year)

                if isinstance(metadata, LeaveMetadata):
                    result = await validate_leave_request(
                        session, requester.id, requester.employment_classification, category, metadata.days, year
                    )
                else:
                    result = await validate_form_quota(session, requester.id, form_limit, year)

                if not result.ok:
                    await session.rollback()
                    raise ValidationError(result.reason or "Request rejected")

                ledger.version += 1
                ledger.updated_at = now_utc()

            submission = Submission(
                requester_id=requester.id,
                requester_role=role.value,
                category=category.value,
                status=initial_status.value,
                file_reference=file_reference,
                request_metadata=metadata.model_dump(mode="json"),
            )
            await insert_submission(session, submission)

            await record_audit(
                session,
                action=AuditAction.CREATE_SUBMISSION,
                target_id=submission.id,
                actor_id=requester.id,
                actor_role=role.value,
                details={
                    "category": category.value,
                    "status": initial_status.value,
                    "requested_days": metadata.days if isinstance(metadata, LeaveMetadata) else None,
                    "submission": model_to_audit_dict(submission),
                },
            )
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("Failed to create %s submission for %s", category, requester.id)
            raise TransientStorageError("Could not save the submission; nothing was saved") from exc

        await _commit_or_raise(session, "create the submission")

    logger.info("Created %s submission %s for %s (%s)", category, submission.id, requester.id, initial_status)
    return _build_submission_response(submission)


async def decide(
    session: AsyncSession,
    directory: PersonDirectory,
    actor_id: uuid.UUID,
    submission_id: uuid.UUID,
    payload: DecisionPayload,
) -> SubmissionResponse:
    """Approve or reject a PENDING submission.

    Authorization is evaluated on every call from the actor's current role and
    flags. A second decision on the same submission fails with
    InvalidTransition, whatever the decision.
    """
    actor = await directory.get_person(actor_id)
    if actor is None:
        raise ForbiddenError("Unknown actor")

    async with submission_locks.hold(("decision", submission_id)):
        try:
            submission = await get_submission_or_404(session, submission_id)
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("Failed to load submission %s for decision", submission_id)
            raise TransientStorageError("Could not load the submission; nothing was changed") from exc

        required = review_capability_for(submission.category, submission.requester_role)
        if required is None:
            raise ForbiddenError(f"{submission.category} submissions are not reviewable")
        if not has_capability(actor, required):
            logger.warning("Actor %s lacks %s for submission %s", actor.id, required, submission.id)
            raise ForbiddenError(f"{required} is required to decide on this submission")

        if submission.status != SubmissionStatus.PENDING.value:
            raise InvalidTransitionError(f"Submission is already {submission.status}")

        previous_status = submission.status
        new_status, action = _DECISION_OUTCOMES[payload.decision]
        patch = {
            "reviewer_comments": payload.comments,
            "reviewer_id": str(actor.id),
            "reviewed_at": now_utc().isoformat(),
        }

        try:
            await update_status(session, submission, new_status, patch)
            await record_audit(
                session,
                action=action,
                target_id=submission.id,
                actor_id=actor.id,
                actor_role=actor.role.value,
                details={
                    "decision": payload.decision.value,
                    "comments": payload.comments,
                    "previous_status": previous_status,
                    "status": new_status.value,
                },
            )
        except InvalidTransitionError:
            await session.rollback()
            raise
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("Failed to record decision on submission %s", submission_id)
            raise TransientStorageError("Could not save the decision; nothing was saved") from exc

        await _commit_or_raise(session, "save the decision")

    logger.info("Submission %s %s by %s", submission.id, new_status, actor.id)
    return _build_submission_response(submission)


async def get_submission(
    session: AsyncSession,
    viewer: PersonInfo,
    submission_id: uuid.UUID,
) -> SubmissionResponse:
    """Get a single submission visible to the viewer."""
    submission = await get_submission_or_404(session, submission_id)
    if not _can_view(viewer, submission):
        raise ForbiddenError("Not authorized to view this submission")
    return _build_submission_response(submission)


async def list_submissions(
    session: AsyncSession,
    viewer: PersonInfo,
    *,
    person_id: uuid.UUID | None = None,
    category: SubmissionCategory | None = None,
    status_filter: SubmissionStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> SubmissionListResponse:
    """List submissions visible to the viewer, ordered by created_at DESC.

    Viewers with VIEW_ALL_SUBMISSIONS see everything; VIEW_STUDENT_FORMS adds
    student submissions to one's own; everyone else sees only their own.
    """
    filters: list[Any] = []

    if not has_capability(viewer, Capability.VIEW_ALL_SUBMISSIONS):
        if has_capability(viewer, Capability.VIEW_STUDENT_FORMS):
            filters.append(
                or_(
                    col(Submission.requester_role) == Role.STUDENT.value,
                    col(Submission.requester_id) == viewer.id,
                )
            )
        else:
            if person_id is not None and person_id != viewer.id:
                raise ForbiddenError("Not authorized to view other people's submissions")
            filters.append(col(Submission.requester_id) == viewer.id)

    if person_id is not None:
        filters.append(col(Submission.requester_id) == person_id)
    if category is not None:
        filters.append(col(Submission.category) == category.value)
    if status_filter is not None:
        filters.append(col(Submission.status) == status_filter.value)
    if start_date is not None:
        filters.append(col(Submission.created_at) >= datetime.combine(start_date, time.min, tzinfo=UTC))
    if end_date is not None:
        end_exclusive = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=UTC)
        filters.append(col(Submission.created_at) < end_exclusive)

    count_result = await session.execute(select(func.count()).select_from(Submission).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Submission)
        .where(*filters)
        .order_by(col(Submission.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    submissions = list(result.scalars().all())

    return SubmissionListResponse(
        items=[_build_submission_response(s) for s in submissions],
        total=total,
    )
