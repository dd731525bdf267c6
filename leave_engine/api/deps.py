# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from leave_engine.config import Settings, get_settings
from leave_engine.exceptions import ForbiddenError
from leave_engine.models.enums import Capability
from leave_engine.schemas.auth import AuthContext
from leave_engine.services.capability import has_capability
from leave_engine.services.person import PersonDirectory, PersonInfo, get_person_directory


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]
DirectoryDep = Annotated[PersonDirectory, Depends(get_person_directory)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_current_person(
    auth: AuthDep,
    directory: DirectoryDep,
) -> PersonInfo:
    """Resolve the caller through the person directory on every request."""
    person = await directory.get_person(auth.user_id)
    if person is None:
        raise ForbiddenError("Unknown user")
    return person


CurrentPersonDep = Annotated[PersonInfo, Depends(get_current_person)]


def require_capability(capability: Capability):  # noqa: ANN201
    """Build a dependency that rejects callers without the capability."""

    async def _dependency(person: CurrentPersonDep) -> PersonInfo:
        if not has_capability(person, capability):
            raise ForbiddenError(f"{capability} is required")
        return person

    return Depends(_dependency)


AuditViewerDep = Annotated[PersonInfo, require_capability(Capability.VIEW_AUDIT_LOG)]
StatsViewerDep = Annotated[PersonInfo, require_capability(Capability.VIEW_LEAVE_STATS)]
