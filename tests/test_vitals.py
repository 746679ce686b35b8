import pytest

from preopd.errors import InvalidVitalsError, PatientNotFoundError
from preopd.intake.vitals import (
    VitalsInput,
    bmi_category,
    compute_bmi,
    compute_map,
    validate_vitals,
)


def _valid(**overrides):
    values = dict(weight="70", height="175", pulse="72", bp_systolic="120", bp_diastolic="80")
    values.update(overrides)
    return VitalsInput(**values)


def test_bmi():
    assert compute_bmi("70", "175") == "22.9"
    assert compute_bmi("", "175") == ""
    assert compute_bmi("70", "abc") == ""


def test_map():
    assert compute_map("120", "80") == "93"
    assert compute_map("120", "") == ""


def test_bmi_category():
    assert bmi_category("17.0") == "Underweight"
    assert bmi_category("22.9") == "Normal"
    assert bmi_category("27") == "Overweight"
    assert bmi_category("31") == "Obese"
    assert bmi_category("") is None


def test_validation_passes_for_complete_vitals():
    assert validate_vitals(_valid()) == {}


def test_validation_reports_each_field():
    errors = validate_vitals(VitalsInput())
    assert set(errors) == {"weight", "height", "pulse", "bpSystolic", "bpDiastolic"}


def test_diastolic_must_be_positive():
    assert validate_vitals(_valid(bp_diastolic="0"))["bpDiastolic"] == "Required"


def test_non_finite_numbers_count_as_missing():
    errors = validate_vitals(
        VitalsInput(weight="nan", height="inf", pulse="NaN", bp_systolic="-inf", bp_diastolic="nan")
    )
    assert set(errors) == {"weight", "height", "pulse", "bpSystolic", "bpDiastolic"}
    assert compute_bmi("nan", "170") == ""
    assert compute_map("inf", "80") == ""
    assert bmi_category("nan") is None


def test_pain_score_range():
    assert validate_vitals(_valid(pain_score="0")) == {}
    assert validate_vitals(_valid(pain_score="10")) == {}
    for bad in ("11", "-1", "4.5", "severe"):
        assert validate_vitals(_valid(pain_score=bad))["painScore"] == "0-10 integer only"


def test_gcs_component_ranges():
    assert validate_vitals(_valid(gcs_e="4", gcs_v="5", gcs_m="6")) == {}
    assert validate_vitals(_valid(gcs_e="5"))["gcsE"] == "1-4"
    assert validate_vitals(_valid(gcs_v="2.5"))["gcsV"] == "1-5"
    assert validate_vitals(_valid(gcs_m="7"))["gcsM"] == "1-6"


def test_gcs_total_checked_only_when_complete():
    assert validate_vitals(_valid(gcs_e="1")) == {}
    errors = validate_vitals(_valid(gcs_e="1", gcs_v="1", gcs_m="0"))
    assert errors["gcsE"] == "Invalid total GCS score"


def test_record_and_read_latest(service, patient):
    service.record_vitals(patient.id, _valid(pulse="80"))
    stored = service.record_vitals(patient.id, _valid(pulse="96", temperature="100.4"))

    assert stored.bmi == "22.9"
    assert stored.map == "93"

    latest = service.latest_vitals(patient.id)
    assert latest.pulse == "96"
    assert latest.temperature == "100.4"


def test_latest_vitals_none_when_missing(service, patient):
    assert service.latest_vitals(patient.id) is None


def test_invalid_vitals_are_not_stored(service, patient):
    with pytest.raises(InvalidVitalsError) as excinfo:
        service.record_vitals(patient.id, _valid(weight="0"))
    assert "weight" in excinfo.value.errors
    assert service.latest_vitals(patient.id) is None


def test_vitals_for_unknown_patient(service):
    with pytest.raises(PatientNotFoundError):
        service.record_vitals("missing", _valid())
