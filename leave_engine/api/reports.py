# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from leave_engine.api.deps import AuditViewerDep, StatsViewerDep
from leave_engine.db import SessionDep
from leave_engine.schemas.report import AuditLogListResponse, LeaveStatsResponse
from leave_engine.services import report as report_service

reports_router = APIRouter(tags=["reports"])


@reports_router.get("/audit-log", response_model=AuditLogListResponse)
async def query_audit_log(
    session: SessionDep,
    viewer: AuditViewerDep,
    action: str | None = Query(default=None),
    actor_id: uuid.UUID | None = Query(default=None),
    target_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditLogListResponse:
    """Query audit log entries with optional filters (admin only)."""
    return await report_service.query_audit_log(
        session,
        action=action,
        actor_id=actor_id,
        target_id=target_id,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
        limit=limit,
    )


@reports_router.get("/reports/leave-stats", response_model=LeaveStatsResponse)
async def get_leave_stats(
    session: SessionDep,
    viewer: StatsViewerDep,
) -> LeaveStatsResponse:
    """Staff leave counts for the approvals dashboard."""
    return await report_service.get_leave_stats(session)
