# preopd/intake/derived.py
"""
Values computed from the intake snapshot rather than stored in it.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from preopd.intake.masters import COMPLAINT_MASTERS, ComplaintMaster
from preopd.intake.schema import (
    Allergy,
    ChronicCondition,
    Complaint,
    MedicationDetails,
    PreOPDIntakeData,
)


def find_complaint_master(
    text: str,
    table: Iterable[ComplaintMaster] = COMPLAINT_MASTERS,
) -> Optional[ComplaintMaster]:
    needle = text.lower()
    for master in table:
        if master.label.lower() == needle:
            return master
    return None


def derive_complaint(
    complaint: Complaint,
    table: Iterable[ComplaintMaster] = COMPLAINT_MASTERS,
) -> Complaint:
    """
    Recompute specialty and redFlagTriggered from the master table.

    A red flag needs both a red-flag complaint and "Severe" severity.
    Free text that matches nothing gets no specialty and no red flag.
    """
    master = find_complaint_master(complaint.complaint, table)
    if master is None:
        specialty, red_flag = "", False
    else:
        specialty = master.specialty
        red_flag = master.red_flag and complaint.severity == "Severe"

    if complaint.specialty == specialty and complaint.red_flag_triggered == red_flag:
        return complaint
    return complaint.model_copy(
        update={"specialty": specialty, "red_flag_triggered": red_flag}
    )


def flatten_medications(data: PreOPDIntakeData) -> List[MedicationDetails]:
    """Chronic-condition medications first, then current medications."""
    meds: List[MedicationDetails] = []
    for condition in data.chronic_conditions:
        meds.extend(condition.medications)
    meds.extend(data.past_history.current_medications)
    return meds


def chronic_medications(conditions: Sequence[ChronicCondition]) -> List[MedicationDetails]:
    return [med for condition in conditions for med in condition.medications]


def allergy_conflicts(
    allergy: Allergy,
    medications: Iterable[MedicationDetails],
) -> List[MedicationDetails]:
    """
    Medications whose name contains the drug-allergy substance.

    Plain case-insensitive substring match, so brand/generic pairs are missed
    and unrelated names can match.
    """
    if not allergy.has_allergies or "Drug" not in allergy.types or not allergy.substance:
        return []

    substance = allergy.substance.lower()
    return [med for med in medications if substance in med.name.lower()]


def has_red_flag(data: PreOPDIntakeData) -> bool:
    return any(c.red_flag_triggered for c in data.complaints)


def uncontrolled_warning(condition: ChronicCondition) -> Optional[str]:
    name = condition.name.lower()
    if ("diabetes" in name or "hypertension" in name) and not condition.medications:
        return (
            "No medications recorded - suggests possible poor control "
            "or unmanaged condition."
        )
    return None


def intake_counts(data: PreOPDIntakeData) -> dict:
    return {
        "complaints": len(data.complaints),
        "chronicConditions": len(data.chronic_conditions),
        "medications": len(flatten_medications(data)),
    }
