# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from leave_engine.api.deps import CurrentPersonDep, DirectoryDep, SettingsDep
from leave_engine.db import SessionDep
from leave_engine.schemas.balance import BalanceResponse
from leave_engine.services import balance as balance_service

person_balance_router = APIRouter(
    prefix="/persons/{person_id}/balance",
    tags=["balances"],
)


@person_balance_router.get("", response_model=BalanceResponse)
async def get_person_balance(
    person_id: uuid.UUID,
    session: SessionDep,
    viewer: CurrentPersonDep,
    directory: DirectoryDep,
    settings: SettingsDep,
    year: int | None = Query(default=None, ge=1900, le=2100),
) -> BalanceResponse:
    """Get leave balances (and form quota, for students) for a person."""
    return await balance_service.get_person_balance(
        session, directory, viewer, person_id, year, settings.form_submission_limit
    )
