# preopd/intake/vitals.py
from __future__ import annotations

import math
from typing import Dict, Optional

from pydantic import Field

from preopd.intake.schema import IntakeModel


class RiskFlags(IntakeModel):
    diabetes: bool = False
    heart_disease: bool = False
    kidney: bool = False


class VitalsInput(IntakeModel):
    """Vitals as typed in; values are kept as strings, "" means not taken."""

    weight: str = ""
    height: str = ""
    pulse: str = ""
    bp_systolic: str = ""
    bp_diastolic: str = ""
    temperature: str = ""
    spo2: str = ""
    respiratory_rate: str = ""
    pain_score: str = ""
    gcs_e: str = ""
    gcs_v: str = ""
    gcs_m: str = ""
    risk_flags: RiskFlags = Field(default_factory=RiskFlags)


def _number(value: str) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # "nan" and "inf" parse but are not measurements
    return number if math.isfinite(number) else None


def _in_int_range(value: str, low: int, high: int) -> bool:
    number = _number(value)
    return number is not None and number.is_integer() and low <= number <= high


def compute_bmi(weight: str, height: str) -> str:
    weight_kg = _number(weight)
    height_cm = _number(height)
    if not weight_kg or not height_cm or weight_kg <= 0 or height_cm <= 0:
        return ""
    height_m = height_cm / 100
    return f"{weight_kg / (height_m * height_m):.1f}"


def compute_map(systolic: str, diastolic: str) -> str:
    """Mean arterial pressure: diastolic + (systolic - diastolic) / 3."""
    sys_ = _number(systolic)
    dia = _number(diastolic)
    if not sys_ or not dia or sys_ <= 0 or dia <= 0:
        return ""
    return f"{dia + (sys_ - dia) / 3:.0f}"


def bmi_category(bmi: str) -> Optional[str]:
    value = _number(bmi)
    if not value or value <= 0:
        return None
    if value < 18.5:
        return "Underweight"
    if value < 25:
        return "Normal"
    if value < 30:
        return "Overweight"
    return "Obese"


def validate_vitals(vitals: VitalsInput) -> Dict[str, str]:
    """
    Return field -> message for every failed check; empty dict means valid.
    """
    errors: Dict[str, str] = {}

    weight = _number(vitals.weight)
    if weight is None or weight < 1:
        errors["weight"] = "Required (1-350 kg)"

    height = _number(vitals.height)
    if height is None or height < 30:
        errors["height"] = "Required (30-250 cm)"

    pulse = _number(vitals.pulse)
    if pulse is None or pulse < 20:
        errors["pulse"] = "Required (>20 bpm)"

    systolic = _number(vitals.bp_systolic)
    if systolic is None or systolic <= 0:
        errors["bpSystolic"] = "Required"

    diastolic = _number(vitals.bp_diastolic)
    if diastolic is None or diastolic <= 0:
        errors["bpDiastolic"] = "Required"

    # Optional fields are only checked once something is entered
    if vitals.pain_score and not _in_int_range(vitals.pain_score, 0, 10):
        errors["painScore"] = "0-10 integer only"

    for key, value, high in (
        ("gcsE", vitals.gcs_e, 4),
        ("gcsV", vitals.gcs_v, 5),
        ("gcsM", vitals.gcs_m, 6),
    ):
        if value and not _in_int_range(value, 1, high):
            errors[key] = f"1-{high}"

    gcs = [_number(v) for v in (vitals.gcs_e, vitals.gcs_v, vitals.gcs_m)]
    if all(v is not None for v in gcs):
        total = sum(gcs)
        if total < 3 or total > 15:
            errors["gcsE"] = errors["gcsV"] = errors["gcsM"] = "Invalid total GCS score"

    return errors
