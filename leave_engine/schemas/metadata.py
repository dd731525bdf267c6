"""Per-category request metadata.

Submissions persist their metadata as a JSON object. Each (category, audience)
pair has its own variant with its own required fields; payloads are decoded
into the matching variant once, at the service boundary, and stored from the
variant's JSON dump.
"""

from __future__ import annotations

import calendar
import datetime
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leave_engine.models.enums import SubmissionCategory


class _MetadataBase(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class LeaveMetadata(_MetadataBase):
    """Staff annual leave or medical leave."""

    days: int = Field(gt=0)
    start_date: datetime.date
    end_date: datetime.date
    reason: str = Field(min_length=1, max_length=2000)

    @model_validator(mode="after")
    def _validate_span(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        span = (self.end_date - self.start_date).days + 1
        if self.days != span:
            msg = f"days ({self.days}) must equal the inclusive span from start_date to end_date ({span})"
            raise ValueError(msg)
        return self


class MedicalFormMetadata(_MetadataBase):
    """Student medical certificate form."""

    full_name: str = Field(min_length=1, max_length=255)
    class_name: str = Field(min_length=1, max_length=100)
    date: datetime.date
    reason: str = Field(min_length=1, max_length=2000)


class EarlyDismissalMetadata(_MetadataBase):
    """Student early dismissal form with the date entered as separate parts."""

    full_name: str = Field(min_length=1, max_length=255)
    class_name: str = Field(min_length=1, max_length=100)
    day: int
    month: int
    year: int
    time: str = Field(min_length=1, max_length=10)
    ampm: Literal["AM", "PM"]
    reason: str = Field(min_length=1, max_length=2000)

    @model_validator(mode="after")
    def _validate_date_parts(self) -> Self:
        if not 1900 <= self.year <= 2100:
            msg = "year must be between 1900 and 2100"
            raise ValueError(msg)
        if not 1 <= self.month <= 12:
            msg = "month must be between 1 and 12"
            raise ValueError(msg)
        if not 1 <= self.day <= calendar.monthrange(self.year, self.month)[1]:
            msg = f"{self.year}-{self.month:02d}-{self.day:02d} is not a calendar date"
            raise ValueError(msg)
        return self


class LetterMetadata(_MetadataBase):
    """Student letter (e.g. a parent's note)."""

    full_name: str = Field(min_length=1, max_length=255)
    class_name: str = Field(min_length=1, max_length=100)
    reason: str = Field(min_length=1, max_length=2000)
    title: str | None = Field(default=None, max_length=255)


class AssignmentMetadata(_MetadataBase):
    """Assignment hand-in. Not reviewed by this engine."""

    assignment_id: str | None = Field(default=None, max_length=255)
    note: str | None = Field(default=None, max_length=2000)


RequestMetadata = LeaveMetadata | MedicalFormMetadata | EarlyDismissalMetadata | LetterMetadata | AssignmentMetadata

STAFF_METADATA: dict[SubmissionCategory, type[RequestMetadata]] = {
    SubmissionCategory.ANNUAL_LEAVE: LeaveMetadata,
    SubmissionCategory.MEDICAL_CERT: LeaveMetadata,
}

STUDENT_METADATA: dict[SubmissionCategory, type[RequestMetadata]] = {
    SubmissionCategory.ASSIGNMENT: AssignmentMetadata,
    SubmissionCategory.MEDICAL_CERT: MedicalFormMetadata,
    SubmissionCategory.EARLY_DISMISSAL: EarlyDismissalMetadata,
    SubmissionCategory.LETTERS: LetterMetadata,
}
