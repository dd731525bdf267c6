"""Annual leave entitlement by employment classification."""

from __future__ import annotations

from typing import NamedTuple

from leave_engine.models.enums import EmploymentClassification, SubmissionCategory


class Entitlement(NamedTuple):
    annual_leave_days: int
    medical_leave_days: int

    def days_for(self, category: SubmissionCategory) -> int:
        """Allotment for a day-tracked category; 0 for anything else."""
        if category == SubmissionCategory.ANNUAL_LEAVE:
            return self.annual_leave_days
        if category == SubmissionCategory.MEDICAL_CERT:
            return self.medical_leave_days
        return 0


NO_ENTITLEMENT = Entitlement(annual_leave_days=0, medical_leave_days=0)

# PART_TIME medical leave is provisional until confirmed against HR policy.
ENTITLEMENTS: dict[EmploymentClassification, Entitlement] = {
    EmploymentClassification.FULL_TIME: Entitlement(annual_leave_days=14, medical_leave_days=14),
    EmploymentClassification.PERMANENT_PART_TIME: Entitlement(annual_leave_days=7, medical_leave_days=14),
    EmploymentClassification.PART_TIME: Entitlement(annual_leave_days=7, medical_leave_days=7),
}


def entitlement_for(classification: EmploymentClassification | str | None) -> Entitlement:
    """Return the yearly allotment for a classification. Unknown or missing yields zero days."""
    if classification is None:
        return NO_ENTITLEMENT
    try:
        key = EmploymentClassification(classification)
    except ValueError:
        return NO_ENTITLEMENT
    return ENTITLEMENTS.get(key, NO_ENTITLEMENT)
