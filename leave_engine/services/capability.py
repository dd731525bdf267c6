"""Authorization matrix for submissions.

Capabilities are granted by a person's primary role or by their role flags.
Every check reads the person as passed in; nothing is cached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from leave_engine.models.enums import Capability, Role, RoleFlag, SubmissionCategory

if TYPE_CHECKING:
    from leave_engine.services.person import PersonInfo

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.STUDENT: frozenset(),
    Role.TEACHER: frozenset(),
    Role.ADMIN: frozenset(
        {
            Capability.REVIEW_STUDENT_FORMS,
            Capability.VIEW_ALL_SUBMISSIONS,
            Capability.VIEW_AUDIT_LOG,
            Capability.VIEW_LEAVE_STATS,
        }
    ),
}

FLAG_CAPABILITIES: dict[RoleFlag, frozenset[Capability]] = {
    RoleFlag.PRINCIPAL: frozenset(
        {
            Capability.REVIEW_STAFF_LEAVE,
            Capability.VIEW_ALL_SUBMISSIONS,
            Capability.VIEW_LEAVE_STATS,
        }
    ),
    RoleFlag.FORM: frozenset({Capability.VIEW_STUDENT_FORMS}),
    RoleFlag.TAHFIZ: frozenset({Capability.VIEW_STUDENT_FORMS}),
}

SUBMITTABLE_CATEGORIES: dict[Role, frozenset[SubmissionCategory]] = {
    Role.STUDENT: frozenset(
        {
            SubmissionCategory.ASSIGNMENT,
            SubmissionCategory.MEDICAL_CERT,
            SubmissionCategory.EARLY_DISMISSAL,
            SubmissionCategory.LETTERS,
        }
    ),
    Role.TEACHER: frozenset({SubmissionCategory.ANNUAL_LEAVE, SubmissionCategory.MEDICAL_CERT}),
    Role.ADMIN: frozenset({SubmissionCategory.ANNUAL_LEAVE, SubmissionCategory.MEDICAL_CERT}),
}

BALANCE_CATEGORIES = frozenset({SubmissionCategory.ANNUAL_LEAVE, SubmissionCategory.MEDICAL_CERT})

# Student forms share one yearly count cap.
FORM_CATEGORIES = frozenset(
    {SubmissionCategory.MEDICAL_CERT, SubmissionCategory.EARLY_DISMISSAL, SubmissionCategory.LETTERS}
)


def capabilities_of(person: PersonInfo) -> frozenset[Capability]:
    """Union of the capabilities granted by the person's role and flags."""
    granted = set(ROLE_CAPABILITIES.get(person.role, frozenset()))
    for flag in person.role_flags:
        granted |= FLAG_CAPABILITIES.get(flag, frozenset())
    return frozenset(granted)


def has_capability(person: PersonInfo, capability: Capability) -> bool:
    return capability in capabilities_of(person)


def is_student(role: Role | str) -> bool:
    return Role(role) == Role.STUDENT


def can_submit(role: Role | str, category: SubmissionCategory | str) -> bool:
    return SubmissionCategory(category) in SUBMITTABLE_CATEGORIES.get(Role(role), frozenset())


def is_balance_tracked(category: SubmissionCategory | str, requester_role: Role | str) -> bool:
    """Staff leave is limited by a day balance."""
    return not is_student(requester_role) and SubmissionCategory(category) in BALANCE_CATEGORIES


def is_count_capped(category: SubmissionCategory | str, requester_role: Role | str) -> bool:
    """Student forms are limited by a yearly count."""
    return is_student(requester_role) and SubmissionCategory(category) in FORM_CATEGORIES


def review_capability_for(
    category: SubmissionCategory | str,
    requester_role: Role | str,
) -> Capability | None:
    """Capability a reviewer needs to decide on this kind of submission.

    None means the submission is not reviewable at all.
    """
    if is_balance_tracked(category, requester_role):
        return Capability.REVIEW_STAFF_LEAVE
    if is_count_capped(category, requester_role):
        return Capability.REVIEW_STUDENT_FORMS
    return None
