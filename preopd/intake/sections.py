# preopd/intake/sections.py
"""
Edits for each intake section.

Every function takes the current slice and returns the new one; nothing is
modified in place. Callers wrap the result in the matching action and
dispatch it.
"""
from __future__ import annotations

from typing import Any, Sequence, Tuple

from preopd.intake.derived import chronic_medications, derive_complaint
from preopd.intake.schema import (
    MAX_COMPLAINTS,
    MAX_HISTORY_ENTRIES,
    Allergy,
    AllergyType,
    ChronicCondition,
    Complaint,
    Hospitalization,
    MedicationDetails,
    PastHistory,
    Surgery,
)


def _replace(model, **changes):
    # Re-validate so bad field values are rejected, not stored
    merged = model.model_dump()
    merged.update(changes)
    return type(model).model_validate(merged)


# ----------------------------------------------------------------------
# Presenting complaints
# ----------------------------------------------------------------------

def add_complaint(complaints: Sequence[Complaint]) -> Tuple[Complaint, ...]:
    if len(complaints) >= MAX_COMPLAINTS:
        return tuple(complaints)
    return (*complaints, Complaint())


def update_complaint(
    complaints: Sequence[Complaint],
    complaint_id: str,
    **changes: Any,
) -> Tuple[Complaint, ...]:
    return tuple(
        derive_complaint(_replace(c, **changes)) if c.id == complaint_id else c
        for c in complaints
    )


def remove_complaint(
    complaints: Sequence[Complaint], complaint_id: str
) -> Tuple[Complaint, ...]:
    return tuple(c for c in complaints if c.id != complaint_id)


# ----------------------------------------------------------------------
# Chronic conditions
# ----------------------------------------------------------------------

def add_condition(
    conditions: Sequence[ChronicCondition], name: str
) -> Tuple[ChronicCondition, ...]:
    # Duplicate names are allowed
    return (*conditions, ChronicCondition(name=name))


def update_condition(
    conditions: Sequence[ChronicCondition],
    condition_id: str,
    **changes: Any,
) -> Tuple[ChronicCondition, ...]:
    return tuple(
        _replace(c, **changes) if c.id == condition_id else c for c in conditions
    )


def remove_condition(
    conditions: Sequence[ChronicCondition], condition_id: str
) -> Tuple[ChronicCondition, ...]:
    return tuple(c for c in conditions if c.id != condition_id)


def _with_condition_medications(conditions, condition_id, transform):
    return tuple(
        c.model_copy(update={"medications": transform(c.medications)})
        if c.id == condition_id
        else c
        for c in conditions
    )


def add_medication_to_condition(
    conditions: Sequence[ChronicCondition],
    condition_id: str,
    medication: MedicationDetails | None = None,
) -> Tuple[ChronicCondition, ...]:
    new_med = medication or MedicationDetails()
    return _with_condition_medications(
        conditions, condition_id, lambda meds: (*meds, new_med)
    )


def update_condition_medication(
    conditions: Sequence[ChronicCondition],
    condition_id: str,
    medication_id: str,
    **changes: Any,
) -> Tuple[ChronicCondition, ...]:
    return _with_condition_medications(
        conditions,
        condition_id,
        lambda meds: update_medication(meds, medication_id, **changes),
    )


def remove_condition_medication(
    conditions: Sequence[ChronicCondition],
    condition_id: str,
    medication_id: str,
) -> Tuple[ChronicCondition, ...]:
    return _with_condition_medications(
        conditions,
        condition_id,
        lambda meds: remove_medication(meds, medication_id),
    )


# ----------------------------------------------------------------------
# Medication lists (shared by conditions and current medications)
# ----------------------------------------------------------------------

def update_medication(
    medications: Sequence[MedicationDetails],
    medication_id: str,
    **changes: Any,
) -> Tuple[MedicationDetails, ...]:
    return tuple(
        _replace(m, **changes) if m.id == medication_id else m for m in medications
    )


def remove_medication(
    medications: Sequence[MedicationDetails], medication_id: str
) -> Tuple[MedicationDetails, ...]:
    return tuple(m for m in medications if m.id != medication_id)


# ----------------------------------------------------------------------
# Allergies
# ----------------------------------------------------------------------

def set_has_allergies(allergy: Allergy, has_allergies: bool) -> Allergy:
    return allergy.model_copy(update={"has_allergies": has_allergies})


def toggle_allergy_type(allergy: Allergy, allergy_type: AllergyType) -> Allergy:
    if allergy_type in allergy.types:
        types = tuple(t for t in allergy.types if t != allergy_type)
    else:
        types = (*allergy.types, allergy_type)
    return _replace(allergy, types=types)


def update_allergy(allergy: Allergy, **changes: Any) -> Allergy:
    return _replace(allergy, **changes)


# ----------------------------------------------------------------------
# Past history
# ----------------------------------------------------------------------

def add_illness(history: PastHistory, value: str) -> PastHistory:
    illness = value.strip()
    if (
        not illness
        or illness in history.illnesses
        or len(history.illnesses) >= MAX_HISTORY_ENTRIES
    ):
        return history
    return history.model_copy(update={"illnesses": (*history.illnesses, illness)})


def remove_illness(history: PastHistory, illness: str) -> PastHistory:
    return history.model_copy(
        update={"illnesses": tuple(i for i in history.illnesses if i != illness)}
    )


def add_surgery(history: PastHistory, name: str, year: str = "") -> PastHistory:
    if not name.strip() or len(history.surgeries) >= MAX_HISTORY_ENTRIES:
        return history
    surgery = Surgery(name=name.strip(), year=year.strip())
    return history.model_copy(update={"surgeries": (*history.surgeries, surgery)})


def remove_surgery(history: PastHistory, index: int) -> PastHistory:
    return history.model_copy(
        update={"surgeries": tuple(s for i, s in enumerate(history.surgeries) if i != index)}
    )


def add_hospitalization(history: PastHistory, reason: str, year: str = "") -> PastHistory:
    if not reason.strip() or len(history.hospitalizations) >= MAX_HISTORY_ENTRIES:
        return history
    entry = Hospitalization(reason=reason.strip(), year=year.strip())
    return history.model_copy(
        update={"hospitalizations": (*history.hospitalizations, entry)}
    )


def remove_hospitalization(history: PastHistory, index: int) -> PastHistory:
    return history.model_copy(
        update={
            "hospitalizations": tuple(
                h for i, h in enumerate(history.hospitalizations) if i != index
            )
        }
    )


def add_current_medication(
    history: PastHistory, medication: MedicationDetails | None = None
) -> PastHistory:
    new_med = medication or MedicationDetails()
    return history.model_copy(
        update={"current_medications": (*history.current_medications, new_med)}
    )


def update_current_medication(
    history: PastHistory, medication_id: str, **changes: Any
) -> PastHistory:
    return history.model_copy(
        update={
            "current_medications": update_medication(
                history.current_medications, medication_id, **changes
            )
        }
    )


def remove_current_medication(history: PastHistory, medication_id: str) -> PastHistory:
    return history.model_copy(
        update={
            "current_medications": remove_medication(
                history.current_medications, medication_id
            )
        }
    )


def copy_from_chronic(
    history: PastHistory, conditions: Sequence[ChronicCondition]
) -> PastHistory:
    """Replace current medications with every chronic-condition medication."""
    return history.model_copy(
        update={"current_medications": tuple(chronic_medications(conditions))}
    )


def set_overall_compliance(history: PastHistory, compliance: str) -> PastHistory:
    return history.model_copy(update={"overall_compliance": compliance})
