# preopd/intake/__init__.py
from .schema import (
    Allergy,
    ChronicCondition,
    Complaint,
    MedicationDetails,
    PastHistory,
    PreOPDIntakeData,
)
from .reducer import INITIAL_INTAKE_STATE, reduce

__all__ = [
    "Allergy",
    "ChronicCondition",
    "Complaint",
    "MedicationDetails",
    "PastHistory",
    "PreOPDIntakeData",
    "INITIAL_INTAKE_STATE",
    "reduce",
]
