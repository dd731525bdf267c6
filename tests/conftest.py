from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leave_engine.db import get_session
from leave_engine.main import app
from leave_engine.models import EmploymentClassification, Role, RoleFlag, SQLModel
from leave_engine.services.person import InMemoryPersonDirectory, PersonInfo, set_person_directory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@dataclass(frozen=True)
class People:
    """The cast of people seeded into the directory for every test."""

    full_time: PersonInfo
    permanent_part_time: PersonInfo
    part_time: PersonInfo
    unclassified: PersonInfo
    principal: PersonInfo
    form_teacher: PersonInfo
    admin: PersonInfo
    student: PersonInfo
    other_student: PersonInfo

    @staticmethod
    def headers(person: PersonInfo) -> dict[str, str]:
        return {"X-User-Id": str(person.id)}

    def all(self) -> list[PersonInfo]:
        return [
            self.full_time,
            self.permanent_part_time,
            self.part_time,
            self.unclassified,
            self.principal,
            self.form_teacher,
            self.admin,
            self.student,
            self.other_student,
        ]


def _teacher(
    name: str,
    classification: EmploymentClassification | None,
    flags: frozenset[RoleFlag] = frozenset(),
) -> PersonInfo:
    return PersonInfo(
        id=uuid.uuid4(),
        name=name,
        role=Role.TEACHER,
        employment_classification=classification,
        role_flags=flags,
    )


@pytest.fixture
def people() -> People:
    return People(
        full_time=_teacher("Aminah", EmploymentClassification.FULL_TIME),
        permanent_part_time=_teacher("Hafiz", EmploymentClassification.PERMANENT_PART_TIME),
        part_time=_teacher("Siti", EmploymentClassification.PART_TIME),
        unclassified=_teacher("Rahman", None),
        principal=_teacher("Puan Zainab", EmploymentClassification.FULL_TIME, frozenset({RoleFlag.PRINCIPAL})),
        form_teacher=_teacher("Encik Daud", EmploymentClassification.FULL_TIME, frozenset({RoleFlag.FORM})),
        admin=PersonInfo(id=uuid.uuid4(), name="Office Admin", role=Role.ADMIN),
        student=PersonInfo(id=uuid.uuid4(), name="Nurul", role=Role.STUDENT),
        other_student=PersonInfo(id=uuid.uuid4(), name="Irfan", role=Role.STUDENT),
    )


@pytest.fixture(autouse=True)
def directory(people: People) -> Iterator[InMemoryPersonDirectory]:
    """Seed the in-memory person directory for every test."""
    directory = InMemoryPersonDirectory()
    for person in people.all():
        directory.seed(person)
    set_person_directory(directory)
    yield directory
    set_person_directory(InMemoryPersonDirectory())


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Create a fresh database per test.

    A file-backed SQLite database is used unless TEST_DATABASE_URL points
    elsewhere, so that concurrent sessions get separate connections.
    """
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'leave_engine.db'}"
    _engine = create_async_engine(url)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Session for arranging and inspecting state directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    """Async HTTP client whose requests each get their own database session."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
