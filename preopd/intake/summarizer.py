# preopd/intake/summarizer.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from preopd.intake.derived import allergy_conflicts, flatten_medications
from preopd.intake.schema import (
    Allergy,
    MedicationDetails,
    PatientSummary,
    PreOPDIntakeData,
    VitalsSnapshot,
)
from preopd.llm import LLMClient


FALLBACK_SUMMARY = "Unable to generate summary. Please try again."

# Previous-record text is cut to this many characters per prompt
RECORDS_EXCERPT_CHARS = 500


class PromptKind(str, Enum):
    CLINICAL = "clinical"
    HISTORY = "history"


SYSTEM_PROMPTS: Dict[PromptKind, str] = {
    PromptKind.CLINICAL: (
        "You are a medical assistant supporting a pre-consultation (Pre-OPD) intake. "
        "Write a concise clinical summary for the consulting doctor from the intake "
        "data provided.\n\n"
        "RULES:\n"
        "- Lead with the presenting complaints and call out any red flags first.\n"
        "- Comment on vitals outside normal ranges: Temp(97.8-99.1°F), Pulse(60-100bpm), "
        "Resp(12-20/min), SpO2(95-100%), BP(Sys<120, Dia<80).\n"
        "- Mention drug allergy conflicts with current medications.\n"
        "- Do NOT invent findings that are not in the data.\n"
        "- Use short markdown sections with bullet points."
    ),
    PromptKind.HISTORY: (
        "You are a medical assistant. Summarise the patient's medical history for the "
        "consulting doctor: chronic conditions and how they are treated, past illnesses, "
        "surgeries, hospitalizations, current medications and adherence, and allergies.\n\n"
        "RULES:\n"
        "- Be brief and factual; do NOT invent details.\n"
        "- Flag conditions with no recorded treatment and poor medication compliance.\n"
        "- Use short markdown sections with bullet points."
    ),
}


@dataclass
class SummaryContext:
    patient: PatientSummary
    data: PreOPDIntakeData
    vitals: Optional[VitalsSnapshot] = None
    extracted_records: Dict[str, str] = field(default_factory=dict)


def _or_none(items: Sequence[str]) -> str:
    return ", ".join(i for i in items if i) or "None"


def _na(value: str) -> str:
    return value or "N/A"


def _format_medication(med: MedicationDetails) -> str:
    parts = [med.name or "Unnamed medication"]
    if med.dose:
        parts.append(med.dose)
    if med.frequency:
        parts.append(med.frequency)
    if med.route:
        parts.append(med.route)
    parts.append(f"compliance: {med.compliance}")
    return ", ".join(parts)


def _format_allergies(allergy: Allergy, medications: List[MedicationDetails]) -> List[str]:
    if not allergy.has_allergies:
        return ["Allergies: No known allergies"]

    lines = [
        f"Allergies: {_or_none(allergy.types)} - substance: {allergy.substance or 'unspecified'}"
        f", reaction: {allergy.reaction or 'unspecified'}"
        f", severity: {allergy.severity or 'unspecified'}"
    ]
    conflicts = allergy_conflicts(allergy, medications)
    if conflicts:
        lines.append(
            "Possible drug allergy conflicts: " + "; ".join(m.name for m in conflicts)
        )
    return lines


def _format_records(extracted_records: Dict[str, str]) -> List[str]:
    if not extracted_records:
        return ["Previous records: none analyzed"]

    text = "\n\n".join(
        f"--- {category} ---\n{content}" for category, content in extracted_records.items()
    )
    excerpt = text[:RECORDS_EXCERPT_CHARS]
    if len(text) > RECORDS_EXCERPT_CHARS:
        excerpt += "..."
    return ["Previous records (excerpt):", excerpt]


def _format_patient(patient: PatientSummary) -> List[str]:
    return [
        "Patient Information:",
        f"- Name: {patient.full_name}",
        f"- UHID: {patient.uhid}",
        f"- Age: {patient.age if patient.age is not None else 'N/A'}",
        f"- Gender: {patient.gender or 'N/A'}",
        f"- Registered chronic conditions: {_or_none(patient.chronic_conditions)}",
    ]


def _format_vitals(vitals: Optional[VitalsSnapshot]) -> List[str]:
    if vitals is None:
        return ["Vitals: not recorded"]
    return [
        f"Vitals (recorded {vitals.recorded_at or 'N/A'}):",
        f"- Weight: {_na(vitals.weight)} kg",
        f"- Height: {_na(vitals.height)} cm",
        f"- BMI: {_na(vitals.bmi)}",
        f"- Pulse: {_na(vitals.pulse)} bpm",
        f"- Blood Pressure (SYS/DIA): {_na(vitals.bp_systolic)}/{_na(vitals.bp_diastolic)} mmHg",
        f"- MAP: {_na(vitals.map)} mmHg",
        f"- Temperature: {_na(vitals.temperature)} °F",
        f"- SpO2: {_na(vitals.spo2)} %",
        f"- Respiratory Rate: {_na(vitals.respiratory_rate)} breaths/min",
        f"- Pain Score: {_na(vitals.pain_score)} / 10",
        f"- GCS (E/V/M): {_na(vitals.gcs_e)}/{_na(vitals.gcs_v)}/{_na(vitals.gcs_m)}",
    ]


def build_clinical_prompt(context: SummaryContext) -> str:
    data = context.data
    medications = flatten_medications(data)

    lines = _format_patient(context.patient)
    lines.append("")

    lines.append(f"Presenting complaints ({len(data.complaints)}):")
    if not data.complaints:
        lines.append("- None")
    for c in data.complaints:
        duration = f"{c.duration.value}{c.duration.unit}" if c.duration.value else "unknown"
        line = (
            f"- {c.complaint or 'Unspecified'}; severity: {c.severity or 'unspecified'}"
            f"; duration: {duration}; specialty: {c.specialty or 'unassigned'}"
        )
        if c.red_flag_triggered:
            line += "; RED FLAG"
        lines.append(line)

    lines.append(
        f"Known chronic conditions: {_or_none([c.name for c in data.chronic_conditions])}"
    )
    lines.append(f"Regular medications: {len(medications)}")
    lines.append(f"Overall medication compliance: {data.past_history.overall_compliance}")
    lines.extend(_format_allergies(data.allergies, medications))
    lines.append("")
    lines.extend(_format_vitals(context.vitals))
    lines.append("")
    lines.extend(_format_records(context.extracted_records))
    return "\n".join(lines)


def build_history_prompt(context: SummaryContext) -> str:
    data = context.data
    history = data.past_history
    medications = flatten_medications(data)

    lines = _format_patient(context.patient)
    lines.append("")

    lines.append("Chronic conditions:")
    if not data.chronic_conditions:
        lines.append("- None")
    for condition in data.chronic_conditions:
        lines.append(
            f"- {condition.name} (duration: {condition.duration}, "
            f"on medication: {condition.on_medication})"
        )
        for med in condition.medications:
            lines.append(f"    * {_format_medication(med)}")

    lines.append(f"Past illnesses: {_or_none(history.illnesses)}")
    lines.append(
        "Surgeries: "
        + _or_none([f"{s.name} ({s.year or 'year unknown'})" for s in history.surgeries])
    )
    lines.append(
        "Hospitalizations: "
        + _or_none(
            [f"{h.reason} ({h.year or 'year unknown'})" for h in history.hospitalizations]
        )
    )
    lines.append("Current medications:")
    if not history.current_medications:
        lines.append("- None")
    for med in history.current_medications:
        lines.append(f"- {_format_medication(med)}")
    lines.append(f"Overall medication compliance: {history.overall_compliance}")
    lines.extend(_format_allergies(data.allergies, medications))
    lines.append("")
    lines.extend(_format_records(context.extracted_records))
    return "\n".join(lines)


_PROMPT_BUILDERS = {
    PromptKind.CLINICAL: build_clinical_prompt,
    PromptKind.HISTORY: build_history_prompt,
}


class SummarizationService:
    """
    Turns an intake snapshot into free-text summaries via the LLM.

    Provider errors propagate; callers decide what to show instead.
    """

    def __init__(self, llm_client: LLMClient, temperature: float = 0.2):
        self.llm_client = llm_client
        self.temperature = temperature

    def build_messages(self, kind: PromptKind, context: SummaryContext) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPTS[kind]},
            {"role": "user", "content": _PROMPT_BUILDERS[kind](context)},
        ]

    def summarize(self, kind: PromptKind, context: SummaryContext) -> str:
        raw = self.llm_client.chat(
            self.build_messages(kind, context), temperature=self.temperature
        )
        # Stored as returned; whitespace only decides the fallback
        if not raw or not raw.strip():
            return FALLBACK_SUMMARY
        return raw
