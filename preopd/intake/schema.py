# preopd/intake/schema.py
from __future__ import annotations

import uuid
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MAX_COMPLAINTS = 5
MAX_HISTORY_ENTRIES = 5

Severity = Literal["", "Mild", "Moderate", "Severe"]
DurationUnit = Literal["h", "d", "w", "mo", "yr", "Unknown"]
OnMedication = Literal["Yes", "No", "Unknown"]
AllergyType = Literal["Drug", "Food", "Other"]


def new_id() -> str:
    return uuid.uuid4().hex


class IntakeModel(BaseModel):
    """
    Shared config: camelCase on the wire and in the stored document,
    snake_case in Python, immutable once built.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ComplaintDuration(IntakeModel):
    value: str = ""
    unit: DurationUnit = "d"


class Complaint(IntakeModel):
    id: str = Field(default_factory=new_id)
    complaint: str = ""
    severity: Severity = ""
    duration: ComplaintDuration = Field(default_factory=ComplaintDuration)
    # Both derived from the complaint master table on every edit
    specialty: str = ""
    red_flag_triggered: bool = False


class MedicationDetails(IntakeModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    dose: str = ""
    frequency: str = "OD"
    route: str = "Oral"
    duration: str = "Unknown"
    compliance: str = "Unknown"
    notes: str = Field("", max_length=160)


class ChronicCondition(IntakeModel):
    id: str = Field(default_factory=new_id)
    name: str
    duration: str = "Unknown"
    on_medication: OnMedication = "Unknown"
    medications: Tuple[MedicationDetails, ...] = ()


class Allergy(IntakeModel):
    has_allergies: bool = False
    types: Tuple[AllergyType, ...] = Field((), alias="type")
    substance: str = ""
    reaction: str = Field("", max_length=160)
    severity: Severity = ""


class Surgery(IntakeModel):
    name: str
    year: str = ""


class Hospitalization(IntakeModel):
    reason: str
    year: str = ""


class PastHistory(IntakeModel):
    illnesses: Tuple[str, ...] = Field((), max_length=MAX_HISTORY_ENTRIES)
    surgeries: Tuple[Surgery, ...] = Field((), max_length=MAX_HISTORY_ENTRIES)
    hospitalizations: Tuple[Hospitalization, ...] = Field(
        (), max_length=MAX_HISTORY_ENTRIES
    )
    current_medications: Tuple[MedicationDetails, ...] = ()
    overall_compliance: str = "Unknown"


class PreOPDIntakeData(IntakeModel):
    """
    The whole intake for one encounter. Each section is a slice that is
    replaced wholesale by the reducer; the object is persisted in one write.
    """

    complaints: Tuple[Complaint, ...] = Field((), max_length=MAX_COMPLAINTS)
    chronic_conditions: Tuple[ChronicCondition, ...] = ()
    allergies: Allergy = Field(default_factory=Allergy)
    past_history: PastHistory = Field(default_factory=PastHistory)


class PatientSummary(IntakeModel):
    id: str
    uhid: str
    full_name: str
    age: Optional[int] = None
    gender: Optional[str] = None
    chronic_conditions: List[str] = Field(default_factory=list)


class VitalsSnapshot(IntakeModel):
    """Latest vitals as read back for the clinical summary prompt."""

    weight: str = ""
    height: str = ""
    bmi: str = ""
    pulse: str = ""
    bp_systolic: str = ""
    bp_diastolic: str = ""
    map: str = ""
    temperature: str = ""
    spo2: str = ""
    respiratory_rate: str = ""
    pain_score: str = ""
    gcs_e: str = ""
    gcs_v: str = ""
    gcs_m: str = ""
    recorded_at: Optional[str] = None
