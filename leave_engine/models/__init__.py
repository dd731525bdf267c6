from sqlmodel import SQLModel

from leave_engine.models.audit import AuditLog
from leave_engine.models.base import TimestampMixin, UUIDBase
from leave_engine.models.enums import (
    AuditAction,
    AuditTargetType,
    Capability,
    Decision,
    EmploymentClassification,
    Role,
    RoleFlag,
    SubmissionCategory,
    SubmissionStatus,
)
from leave_engine.models.ledger import SubmissionLedger
from leave_engine.models.submission import NO_FILE_REFERENCE, Submission

__all__ = [
    "NO_FILE_REFERENCE",
    "AuditAction",
    "AuditLog",
    "AuditTargetType",
    "Capability",
    "Decision",
    "EmploymentClassification",
    "Role",
    "RoleFlag",
    "SQLModel",
    "Submission",
    "SubmissionCategory",
    "SubmissionLedger",
    "SubmissionStatus",
    "TimestampMixin",
    "UUIDBase",
]
