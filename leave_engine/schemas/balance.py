# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from leave_engine.models.enums import EmploymentClassification


class CategoryBalance(BaseModel):
    """Day balance for one leave category in one year."""

    total: int
    used: int = 0
    pending: int = 0
    remaining: int


class LeaveBalance(BaseModel):
    """Balances for both day-tracked categories."""

    annual_leave: CategoryBalance
    medical_leave: CategoryBalance


class FormQuota(BaseModel):
    """Yearly count quota for student forms."""

    limit: int
    used: int
    remaining: int


class BalanceResponse(BaseModel):
    """Balance view for a person and year."""

    person_id: uuid.UUID
    year: int
    employment_classification: EmploymentClassification | None
    annual_leave: CategoryBalance
    medical_leave: CategoryBalance
    forms: FormQuota | None = None
