# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class AuditLogEntryResponse(BaseModel):
    """Response schema for a single audit log entry."""

    id: uuid.UUID
    action: str
    target_id: uuid.UUID
    target_type: str
    actor_id: uuid.UUID
    actor_role: str | None
    details: dict[str, Any]
    created_at: datetime


class AuditLogListResponse(BaseModel):
    """Paginated list of audit log entries."""

    items: list[AuditLogEntryResponse]
    total: int


class LeaveStatsResponse(BaseModel):
    """Counts of staff leave submissions for the approvals dashboard."""

    total: int
    pending: int
    approved: int
    rejected: int
    medical: int
