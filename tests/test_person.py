from __future__ import annotations

import uuid

from leave_engine.models import EmploymentClassification, Role, RoleFlag
from leave_engine.services.person import (
    InMemoryPersonDirectory,
    PersonDirectory,
    PersonInfo,
    get_person_directory,
    set_person_directory,
)


async def test_in_memory_directory_lookup() -> None:
    directory = InMemoryPersonDirectory()
    person = PersonInfo(
        id=uuid.uuid4(),
        name="Aminah",
        role=Role.TEACHER,
        employment_classification=EmploymentClassification.FULL_TIME,
        role_flags=frozenset({RoleFlag.FORM}),
    )
    directory.seed(person)

    assert await directory.get_person(person.id) == person
    assert await directory.get_person(uuid.uuid4()) is None


def test_in_memory_directory_satisfies_protocol() -> None:
    assert isinstance(InMemoryPersonDirectory(), PersonDirectory)


def test_person_defaults() -> None:
    person = PersonInfo(id=uuid.uuid4(), name="Nurul", role=Role.STUDENT)
    assert person.employment_classification is None
    assert person.role_flags == frozenset()


def test_set_person_directory() -> None:
    directory = InMemoryPersonDirectory()
    set_person_directory(directory)
    assert get_person_directory() is directory
