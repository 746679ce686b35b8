# preopd/intake/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from preopd.intake.actions import ResetAll
from preopd.intake.derived import (
    allergy_conflicts,
    flatten_medications,
    has_red_flag,
    intake_counts,
    uncontrolled_warning,
)
from preopd.intake.records import ExtractedRecords
from preopd.intake.reducer import INITIAL_INTAKE_STATE, reduce
from preopd.intake.schema import PatientSummary, PreOPDIntakeData, new_id
from preopd.intake.summarizer import PromptKind


@dataclass
class SubmitStatus:
    is_saving: bool = False
    show_success: bool = False
    error_message: str = ""


@dataclass
class IntakeSession:
    """
    Everything one Pre-OPD encounter holds before it is submitted.

    `version` goes up on every change to the patient, the snapshot or the
    uploaded records, so a summary started against an older version can be
    recognised as stale when it returns.
    """

    id: str = field(default_factory=new_id)
    patient: Optional[PatientSummary] = None
    data: PreOPDIntakeData = field(default_factory=lambda: INITIAL_INTAKE_STATE)
    version: int = 0
    records: ExtractedRecords = field(default_factory=ExtractedRecords)

    ai_clinical_summary: str = ""
    ai_history_summary: str = ""
    clinical_expanded: bool = False
    history_expanded: bool = False

    status: SubmitStatus = field(default_factory=SubmitStatus)

    def touch(self) -> int:
        self.version += 1
        return self.version

    def apply(self, action: Any) -> PreOPDIntakeData:
        new_data = reduce(self.data, action)
        if new_data is not self.data:
            self.data = new_data
            self.touch()
        return self.data

    def summary(self, kind: PromptKind) -> str:
        if kind is PromptKind.CLINICAL:
            return self.ai_clinical_summary
        return self.ai_history_summary

    def set_summary(self, kind: PromptKind, text: str, expanded: bool) -> None:
        if kind is PromptKind.CLINICAL:
            self.ai_clinical_summary = text
            self.clinical_expanded = expanded
        else:
            self.ai_history_summary = text
            self.history_expanded = expanded

    def clear(self) -> None:
        """Clear-form: snapshot, records, summaries and status in one go."""
        self.data = reduce(self.data, ResetAll())
        self.records.clear()
        self.ai_clinical_summary = ""
        self.ai_history_summary = ""
        self.clinical_expanded = False
        self.history_expanded = False
        self.status = SubmitStatus()
        self.touch()

    def view(self) -> dict:
        data = self.data
        medications = flatten_medications(data)
        return {
            "id": self.id,
            "version": self.version,
            "patient": self.patient.to_document() if self.patient else None,
            "intake": data.to_document(),
            "derived": {
                "counts": intake_counts(data),
                "redFlag": has_red_flag(data),
                "allergyConflicts": [
                    m.to_document() for m in allergy_conflicts(data.allergies, medications)
                ],
                "uncontrolledWarnings": {
                    c.id: warning
                    for c in data.chronic_conditions
                    if (warning := uncontrolled_warning(c))
                },
            },
            "records": self.records.listing(),
            "extractedRecords": self.records.as_map(),
            "aiClinicalSummary": self.ai_clinical_summary,
            "aiHistorySummary": self.ai_history_summary,
            "clinicalExpanded": self.clinical_expanded,
            "historyExpanded": self.history_expanded,
            "status": {
                "isSaving": self.status.is_saving,
                "showSuccess": self.status.show_success,
                "errorMessage": self.status.error_message,
            },
        }
