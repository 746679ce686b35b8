# preopd/intake/masters.py
"""
Static lookup tables used by the intake sections.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class ComplaintMaster:
    label: str
    red_flag: bool
    specialty: str


COMPLAINT_MASTERS: List[ComplaintMaster] = [
    ComplaintMaster("Chest Pain", True, "Cardiology"),
    ComplaintMaster("Shortness of Breath", True, "Cardiology"),
    ComplaintMaster("Severe Headache", True, "Neurology"),
    ComplaintMaster("High Fever", True, "General Medicine"),
    ComplaintMaster("Abdominal Pain", False, "Gastroenterology"),
    ComplaintMaster("Fever", False, "General Medicine"),
    ComplaintMaster("Cough", False, "Pulmonology"),
    ComplaintMaster("Headache", False, "Neurology"),
    ComplaintMaster("Diarrhea", False, "Gastroenterology"),
    ComplaintMaster("Back Pain", False, "Orthopedics"),
]

CHRONIC_CONDITIONS: List[str] = [
    "Diabetes Mellitus",
    "Hypertension",
    "Asthma",
    "COPD",
    "Chronic Kidney Disease",
    "Coronary Artery Disease",
    "Hyperthyroidism",
    "Hypothyroidism",
    "Rheumatoid Arthritis",
    "Osteoarthritis",
]

MEDICATIONS: List[str] = [
    "Metformin",
    "Insulin",
    "Amlodipine",
    "Lisinopril",
    "Atorvastatin",
    "Aspirin",
    "Levothyroxine",
    "Salbutamol",
    "Prednisolone",
    "Paracetamol",
]

FREQUENCIES: List[str] = ["OD", "BD", "TDS", "QHS", "QID", "PRN", "Weekly", "Monthly"]
ROUTES: List[str] = ["Oral", "SC", "IV", "IM", "Inhaled", "Topical", "Sublingual"]
SEVERITY: List[str] = ["Mild", "Moderate", "Severe"]
COMPLIANCE: List[str] = ["Taking", "Missed", "Ran out", "Unknown"]

# Upload categories for previous records, id -> label
RECORD_CATEGORIES: Dict[str, str] = {
    "lab-reports": "Lab Reports",
    "radiology": "Radiology",
    "prescriptions": "Prescriptions",
    "discharge-summaries": "Discharge",
    "other": "Other",
}


def as_dict() -> dict:
    return {
        "complaints": [
            {"label": m.label, "redFlag": m.red_flag, "specialty": m.specialty}
            for m in COMPLAINT_MASTERS
        ],
        "chronicConditions": list(CHRONIC_CONDITIONS),
        "medications": list(MEDICATIONS),
        "frequencies": list(FREQUENCIES),
        "routes": list(ROUTES),
        "severity": list(SEVERITY),
        "compliance": list(COMPLIANCE),
        "recordCategories": [
            {"id": key, "label": label} for key, label in RECORD_CATEGORIES.items()
        ],
    }
