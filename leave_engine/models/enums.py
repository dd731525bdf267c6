from __future__ import annotations

import enum


class SubmissionCategory(enum.StrEnum):
    """Closed set of submission types."""

    ANNUAL_LEAVE = "ANNUAL_LEAVE"
    MEDICAL_CERT = "MEDICAL_CERT"
    ASSIGNMENT = "ASSIGNMENT"
    EARLY_DISMISSAL = "EARLY_DISMISSAL"
    LETTERS = "LETTERS"


class SubmissionStatus(enum.StrEnum):
    """Lifecycle of a reviewable submission. APPROVED and REJECTED are terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Decision(enum.StrEnum):
    """Reviewer decision on a pending submission."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


class EmploymentClassification(enum.StrEnum):
    """Employment tier that determines leave entitlement."""

    FULL_TIME = "FULL_TIME"
    PERMANENT_PART_TIME = "PERMANENT_PART_TIME"
    PART_TIME = "PART_TIME"


class Role(enum.StrEnum):
    """Primary role of a person."""

    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class RoleFlag(enum.StrEnum):
    """Additional duties a teacher may hold."""

    FORM = "FORM"
    TAHFIZ = "TAHFIZ"
    PRINCIPAL = "PRINCIPAL"


class Capability(enum.StrEnum):
    """Actions gated by role or role flag."""

    REVIEW_STAFF_LEAVE = "REVIEW_STAFF_LEAVE"
    REVIEW_STUDENT_FORMS = "REVIEW_STUDENT_FORMS"
    VIEW_ALL_SUBMISSIONS = "VIEW_ALL_SUBMISSIONS"
    VIEW_STUDENT_FORMS = "VIEW_STUDENT_FORMS"
    VIEW_AUDIT_LOG = "VIEW_AUDIT_LOG"
    VIEW_LEAVE_STATS = "VIEW_LEAVE_STATS"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE_SUBMISSION = "CREATE_SUBMISSION"
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class AuditTargetType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    SUBMISSION = "SUBMISSION"
