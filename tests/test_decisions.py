"""Tests for approving and rejecting submissions: reviewer authorization,
terminal states, metadata merge, balance effects and audit entries.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlmodel import col

from leave_engine.models import AuditLog, RoleFlag, Submission

if TYPE_CHECKING:
    import pytest
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from leave_engine.services.person import InMemoryPersonDirectory, PersonInfo
    from tests.conftest import People

SUBMISSIONS_URL = "/submissions"


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


def _leave_payload(days: int, category: str = "ANNUAL_LEAVE") -> dict[str, Any]:
    start = date(2026, 5, 4)
    return {
        "category": category,
        "metadata": {
            "days": days,
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=days - 1)).isoformat(),
            "reason": "Personal",
        },
    }


def _letter_payload() -> dict[str, Any]:
    return {
        "category": "LETTERS",
        "file_reference": "uploads/parent-note.pdf",
        "metadata": {"full_name": "Nurul Aisyah", "class_name": "5 Amanah", "reason": "Family event"},
    }


async def _submit(client: AsyncClient, people: People, person: PersonInfo, payload: dict[str, Any]) -> str:
    resp = await client.post(SUBMISSIONS_URL, json=payload, headers=people.headers(person))
    assert resp.status_code == 201
    return resp.json()["id"]


async def _decide(
    client: AsyncClient,
    people: People,
    actor: PersonInfo,
    submission_id: str,
    decision: str = "APPROVE",
    comments: str | None = None,
) -> Any:
    return await client.post(
        f"{SUBMISSIONS_URL}/{submission_id}/decision",
        json={"decision": decision, "comments": comments},
        headers=people.headers(actor),
    )


async def _annual_balance(client: AsyncClient, people: People, person: PersonInfo) -> dict[str, Any]:
    resp = await client.get(f"/persons/{person.id}/balance", headers=people.headers(person))
    return resp.json()["annual_leave"]


# ---------------------------------------------------------------------------
# Approve / reject
# ---------------------------------------------------------------------------


async def test_principal_approves_leave(
    async_client: AsyncClient,
    people: People,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    teacher = people.full_time
    submission_id = await _submit(async_client, people, teacher, _leave_payload(5))

    resp = await _decide(async_client, people, people.principal, submission_id, comments="Enjoy")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "APPROVED"
    assert data["request_metadata"]["reviewer_comments"] == "Enjoy"
    assert data["request_metadata"]["reviewer_id"] == str(people.principal.id)
    assert data["request_metadata"]["reviewed_at"]
    assert data["request_metadata"]["days"] == 5

    balance = await _annual_balance(async_client, people, teacher)
    assert balance == {"total": 14, "used": 5, "pending": 0, "remaining": 9}

    async with session_factory() as session:
        result = await session.execute(select(AuditLog).where(col(AuditLog.action) == "APPROVE"))
        entries = list(result.scalars().all())
    assert len(entries) == 1
    assert str(entries[0].target_id) == submission_id
    assert entries[0].actor_id == people.principal.id
    assert entries[0].details["decision"] == "APPROVE"
    assert entries[0].details["comments"] == "Enjoy"
    assert entries[0].details["previous_status"] == "PENDING"
    assert entries[0].details["status"] == "APPROVED"


async def test_rejection_releases_pending_days(async_client: AsyncClient, people: People) -> None:
    teacher = people.full_time
    submission_id = await _submit(async_client, people, teacher, _leave_payload(10))
    assert (await _annual_balance(async_client, people, teacher))["remaining"] == 4

    resp = await _decide(async_client, people, people.principal, submission_id, decision="REJECT")
    assert resp.status_code == 200
    assert resp.json()["status"] == "REJECTED"

    balance = await _annual_balance(async_client, people, teacher)
    assert balance == {"total": 14, "used": 0, "pending": 0, "remaining": 14}


async def test_non_principal_cannot_decide(async_client: AsyncClient, people: People) -> None:
    submission_id = await _submit(async_client, people, people.full_time, _leave_payload(2))

    for actor in (people.part_time, people.form_teacher, people.admin, people.full_time):
        resp = await _decide(async_client, people, actor, submission_id)
        assert resp.status_code == 403
        assert resp.json()["error"] == "Forbidden"

    resp = await async_client.get(
        f"{SUBMISSIONS_URL}/{submission_id}", headers=people.headers(people.full_time)
    )
    assert resp.json()["status"] == "PENDING"


async def test_second_decision_is_invalid_transition(async_client: AsyncClient, people: People) -> None:
    submission_id = await _submit(async_client, people, people.full_time, _leave_payload(2))
    first = await _decide(async_client, people, people.principal, submission_id)
    assert first.status_code == 200

    for decision in ("APPROVE", "REJECT"):
        resp = await _decide(async_client, people, people.principal, submission_id, decision=decision)
        assert resp.status_code == 409
        assert resp.json()["error"] == "InvalidTransition"

    resp = await async_client.get(f"{SUBMISSIONS_URL}/{submission_id}", headers=people.headers(people.principal))
    assert resp.json()["status"] == "APPROVED"


async def test_rejecting_twice_is_not_idempotent(async_client: AsyncClient, people: People) -> None:
    submission_id = await _submit(async_client, people, people.full_time, _leave_payload(2))
    assert (await _decide(async_client, people, people.principal, submission_id, "REJECT")).status_code == 200

    resp = await _decide(async_client, people, people.principal, submission_id, "REJECT")
    assert resp.status_code == 409


async def test_decide_unknown_submission(async_client: AsyncClient, people: People) -> None:
    resp = await _decide(async_client, people, people.principal, str(uuid.uuid4()))
    assert resp.status_code == 404


async def test_decide_unknown_actor(async_client: AsyncClient, people: People) -> None:
    submission_id = await _submit(async_client, people, people.full_time, _leave_payload(2))
    resp = await async_client.post(
        f"{SUBMISSIONS_URL}/{submission_id}/decision",
        json={"decision": "APPROVE"},
        headers={"X-User-Id": str(uuid.uuid4())},
    )
    assert resp.status_code == 403


async def test_invalid_decision_value(async_client: AsyncClient, people: People) -> None:
    submission_id = await _submit(async_client, people, people.full_time, _leave_payload(2))
    resp = await _decide(async_client, people, people.principal, submission_id, decision="MAYBE")
    assert resp.status_code == 422


async def test_capability_is_read_on_every_decision(
    async_client: AsyncClient,
    people: People,
    directory: InMemoryPersonDirectory,
) -> None:
    """Removing the principal flag takes effect on the next call."""
    first_id = await _submit(async_client, people, people.full_time, _leave_payload(1))
    second_id = await _submit(async_client, people, people.full_time, _leave_payload(1))

    assert (await _decide(async_client, people, people.principal, first_id)).status_code == 200

    directory.seed(people.principal.model_copy(update={"role_flags": frozenset({RoleFlag.FORM})}))
    assert (await _decide(async_client, people, people.principal, second_id)).status_code == 403


# ---------------------------------------------------------------------------
# Student forms
# ---------------------------------------------------------------------------


async def test_admin_reviews_student_forms(async_client: AsyncClient, people: People) -> None:
    submission_id = await _submit(async_client, people, people.student, _letter_payload())

    resp = await _decide(async_client, people, people.principal, submission_id)
    assert resp.status_code == 403

    resp = await _decide(async_client, people, people.form_teacher, submission_id)
    assert resp.status_code == 403

    resp = await _decide(async_client, people, people.admin, submission_id, comments="Noted")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "APPROVED"
    assert data["request_metadata"]["reviewer_comments"] == "Noted"
    assert data["request_metadata"]["class_name"] == "5 Amanah"


async def test_rejected_forms_still_count_toward_quota(async_client: AsyncClient, people: People) -> None:
    ids = [await _submit(async_client, people, people.student, _letter_payload()) for _ in range(5)]
    for submission_id in ids:
        assert (await _decide(async_client, people, people.admin, submission_id, "REJECT")).status_code == 200

    resp = await async_client.post(SUBMISSIONS_URL, json=_letter_payload(), headers=people.headers(people.student))
    assert resp.status_code == 400


async def test_assignment_is_not_reviewable(async_client: AsyncClient, people: People) -> None:
    submission_id = await _submit(
        async_client,
        people,
        people.student,
        {"category": "ASSIGNMENT", "file_reference": "uploads/essay.docx", "metadata": {}},
    )
    resp = await _decide(async_client, people, people.admin, submission_id)
    assert resp.status_code == 403


async def test_unauthorized_actor_forbidden_on_decided_submission(async_client: AsyncClient, people: People) -> None:
    submission_id = await _submit(async_client, people, people.full_time, _leave_payload(2))
    assert (await _decide(async_client, people, people.principal, submission_id)).status_code == 200

    for decision in ("APPROVE", "REJECT"):
        resp = await _decide(async_client, people, people.part_time, submission_id, decision=decision)
        assert resp.status_code == 403
        assert resp.json()["error"] == "Forbidden"


# ---------------------------------------------------------------------------
# Timestamps and storage failures
# ---------------------------------------------------------------------------


def _as_naive_utc(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=None)


async def test_decision_updates_timestamp(async_client: AsyncClient, people: People) -> None:
    created = await async_client.post(
        SUBMISSIONS_URL, json=_leave_payload(2), headers=people.headers(people.full_time)
    )
    before = created.json()

    resp = await _decide(async_client, people, people.principal, before["id"])
    after = resp.json()

    assert after["created_at"] != after["updated_at"]
    assert _as_naive_utc(after["updated_at"]) > _as_naive_utc(before["updated_at"])


async def test_audit_failure_rolls_back_decision(
    async_client: AsyncClient,
    people: People,
    session_factory: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    submission_id = await _submit(async_client, people, people.full_time, _leave_payload(2))

    async def _failing_audit(*args: Any, **kwargs: Any) -> None:
        raise OperationalError("INSERT INTO audit_logs", {}, Exception("disk I/O error"))

    monkeypatch.setattr("leave_engine.services.submission.record_audit", _failing_audit)

    resp = await _decide(async_client, people, people.principal, submission_id, comments="Approved")
    assert resp.status_code == 503
    assert resp.json()["error"] == "TransientStorageError"

    async with session_factory() as session:
        result = await session.execute(select(Submission).where(col(Submission.id) == uuid.UUID(submission_id)))
        stored = result.scalar_one()
        decisions = await session.execute(
            select(func.count()).select_from(AuditLog).where(col(AuditLog.action) == "APPROVE")
        )
        assert decisions.scalar_one() == 0
    assert stored.status == "PENDING"
    assert "reviewer_comments" not in stored.request_metadata

    monkeypatch.undo()
    retry = await _decide(async_client, people, people.principal, submission_id)
    assert retry.status_code == 200


async def test_load_failure_is_transient(
    async_client: AsyncClient,
    people: People,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    submission_id = await _submit(async_client, people, people.full_time, _leave_payload(2))

    async def _failing_load(*args: Any, **kwargs: Any) -> None:
        raise OperationalError("SELECT submissions", {}, Exception("connection reset"))

    monkeypatch.setattr("leave_engine.services.submission.get_submission_or_404", _failing_load)

    resp = await _decide(async_client, people, people.principal, submission_id)
    assert resp.status_code == 503
    assert resp.json()["error"] == "TransientStorageError"
