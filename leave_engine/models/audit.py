# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import UUIDBase, now_utc


class AuditLog(UUIDBase, table=True):
    """Immutable record of every mutation on a submission."""

    __tablename__ = "audit_logs"
    __table_args__ = (sa.Index("ix_audit_target", "target_type", "target_id"),)

    action: str = Field(max_length=50, index=True)
    target_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("submissions.id"), nullable=False),
    )
    target_type: str = Field(max_length=50)
    actor_id: uuid.UUID = Field(index=True)
    actor_role: str | None = Field(default=None, max_length=20)
    details: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
    created_at: datetime = Field(
        default_factory=now_utc,
        index=True,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
