# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UUIDBase
from leave_engine.models.enums import SubmissionStatus

NO_FILE_REFERENCE = "no-file-uploaded"


class Submission(UUIDBase, TimestampMixin, table=True):
    """A leave request or student form moving through the review workflow."""

    __tablename__ = "submissions"
    __table_args__ = (
        sa.Index("ix_submission_requester_category_created", "requester_id", "category", "created_at"),
        sa.Index("ix_submission_category_status", "category", "status"),
    )

    requester_id: uuid.UUID = Field(index=True)
    requester_role: str = Field(max_length=20)
    category: str = Field(max_length=50)
    status: str = Field(
        default=SubmissionStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    file_reference: str = Field(default=NO_FILE_REFERENCE, max_length=1024)
    request_metadata: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
