# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from leave_engine.models.enums import EmploymentClassification, Role, RoleFlag


class PersonInfo(BaseModel):
    """Person metadata from the user directory."""

    id: uuid.UUID
    name: str
    role: Role
    employment_classification: EmploymentClassification | None = None
    role_flags: frozenset[RoleFlag] = Field(default_factory=frozenset)


@runtime_checkable
class PersonDirectory(Protocol):
    """Interface for the user directory."""

    async def get_person(self, person_id: uuid.UUID) -> PersonInfo | None:
        """Fetch person metadata. Returns None if not found."""
        ...


class InMemoryPersonDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._people: dict[uuid.UUID, PersonInfo] = {}

    def seed(self, person: PersonInfo) -> None:
        """Seed a person for testing."""
        self._people[person.id] = person

    async def get_person(self, person_id: uuid.UUID) -> PersonInfo | None:
        """Fetch person metadata. Returns None if not found."""
        return self._people.get(person_id)


_person_directory: PersonDirectory = InMemoryPersonDirectory()


def get_person_directory() -> PersonDirectory:
    """FastAPI dependency for the person directory."""
    return _person_directory


def set_person_directory(directory: PersonDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _person_directory
    _person_directory = directory
