# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leave_engine.models.base import now_utc

FORMS_LEDGER_KEY = "FORMS"


class SubmissionLedger(SQLModel, table=True):
    """Per-requester, per-year lock row guarding balance checks.

    Holds no balance figures. Creation locks the row FOR UPDATE before reading
    the balance so that validate-then-insert commits as one unit.
    """

    __tablename__ = "submission_ledger"
    __table_args__ = (sa.PrimaryKeyConstraint("requester_id", "ledger_key", "year"),)

    requester_id: uuid.UUID
    ledger_key: str = Field(max_length=50)
    year: int
    version: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now()},
    )
