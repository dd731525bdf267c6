from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import col

from leave_engine.models.ledger import SubmissionLedger

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def _ensure_ledger_row(
    session: AsyncSession,
    requester_id: uuid.UUID,
    ledger_key: str,
    year: int,
) -> None:
    """Insert the ledger row if absent; concurrent inserts of the same key are ignored."""
    dialect = session.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    values = {"requester_id": requester_id, "ledger_key": ledger_key, "year": year, "version": 0}
    if insert is not None:
        await session.execute(insert(SubmissionLedger).values(**values).on_conflict_do_nothing())
        return

    existing = await session.get(SubmissionLedger, (requester_id, ledger_key, year))
    if existing is None:
        session.add(SubmissionLedger(**values))
        await session.flush()


async def lock_ledger_for_update(
    session: AsyncSession,
    requester_id: uuid.UUID,
    ledger_key: str,
    year: int,
) -> SubmissionLedger:
    """Return the requester's ledger row for the year, locked FOR UPDATE."""
    await _ensure_ledger_row(session, requester_id, ledger_key, year)
    result = await session.execute(
        select(SubmissionLedger)
        .where(
            col(SubmissionLedger.requester_id) == requester_id,
            col(SubmissionLedger.ledger_key) == ledger_key,
            col(SubmissionLedger.year) == year,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()
