from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from leave_engine.models.audit import AuditLog
from leave_engine.models.enums import AuditTargetType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from leave_engine.models.enums import AuditAction


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Serialize a SQLModel instance to a JSON-safe dict for audit logging."""
    data: dict[str, Any] = {}
    for key, value in model.model_dump().items():
        if isinstance(value, uuid.UUID):
            data[key] = str(value)
        elif isinstance(value, (datetime, date)):
            data[key] = value.isoformat()
        else:
            data[key] = value
    return data


async def record_audit(
    session: AsyncSession,
    *,
    action: AuditAction,
    target_id: uuid.UUID,
    actor_id: uuid.UUID,
    details: dict[str, Any],
    actor_role: str | None = None,
    target_type: AuditTargetType = AuditTargetType.SUBMISSION,
) -> AuditLog:
    """Append an immutable audit entry within the caller's transaction.

    The entry is flushed immediately so that a failed write aborts the
    enclosing mutation instead of surfacing only at commit.
    """
    entry = AuditLog(
        action=action.value,
        target_id=target_id,
        target_type=target_type.value,
        actor_id=actor_id,
        actor_role=actor_role,
        details=details,
    )
    session.add(entry)
    await session.flush()
    return entry
