# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from leave_engine.models.enums import Decision, Role, SubmissionCategory, SubmissionStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateSubmissionPayload(BaseModel):
    """Request body for creating a leave request or student form."""

    category: SubmissionCategory
    file_reference: str | None = Field(default=None, max_length=1024)
    metadata: dict[str, Any] = Field(default_factory=dict)


class DecisionPayload(BaseModel):
    """Request body for approve/reject decisions."""

    decision: Decision
    comments: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SubmissionResponse(BaseModel):
    """Response schema for a single submission."""

    id: uuid.UUID
    requester_id: uuid.UUID
    requester_role: Role
    category: SubmissionCategory
    status: SubmissionStatus
    file_reference: str
    request_metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class SubmissionListResponse(BaseModel):
    """Paginated list of submissions."""

    items: list[SubmissionResponse]
    total: int
