# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from leave_engine.api.deps import AuthDep, CurrentPersonDep, DirectoryDep, SettingsDep
from leave_engine.db import SessionDep
from leave_engine.models.enums import SubmissionCategory, SubmissionStatus
from leave_engine.schemas.submission import (
    CreateSubmissionPayload,
    DecisionPayload,
    SubmissionListResponse,
    SubmissionResponse,
)
from leave_engine.services import submission as submission_service

submissions_router = APIRouter(prefix="/submissions", tags=["submissions"])


@submissions_router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_submission(
    payload: CreateSubmissionPayload,
    session: SessionDep,
    person: CurrentPersonDep,
    settings: SettingsDep,
) -> SubmissionResponse:
    """Create a leave request or student form for the caller."""
    return await submission_service.create_submission(
        session, person, payload, form_limit=settings.form_submission_limit
    )


@submissions_router.get("", response_model=SubmissionListResponse)
async def list_submissions(
    session: SessionDep,
    person: CurrentPersonDep,
    person_id: uuid.UUID | None = Query(default=None),
    category: SubmissionCategory | None = Query(default=None),
    status_filter: SubmissionStatus | None = Query(default=None, alias="status"),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> SubmissionListResponse:
    """List submissions visible to the caller with optional filters."""
    return await submission_service.list_submissions(
        session,
        person,
        person_id=person_id,
        category=category,
        status_filter=status_filter,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
        limit=limit,
    )


@submissions_router.get("/{submission_id}", response_model=SubmissionResponse)
async def get_submission(
    submission_id: uuid.UUID,
    session: SessionDep,
    person: CurrentPersonDep,
) -> SubmissionResponse:
    """Get a single submission."""
    return await submission_service.get_submission(session, person, submission_id)


@submissions_router.post("/{submission_id}/decision", response_model=SubmissionResponse)
async def decide_submission(
    submission_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AuthDep,
    directory: DirectoryDep,
) -> SubmissionResponse:
    """Approve or reject a pending submission."""
    return await submission_service.decide(session, directory, auth.user_id, submission_id, payload)
