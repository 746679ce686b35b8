import pytest
from pydantic import ValidationError

from preopd.intake import sections
from preopd.intake.schema import (
    Allergy,
    ChronicCondition,
    MedicationDetails,
    PastHistory,
)


class TestComplaints:
    def test_add_stops_at_five(self):
        complaints = ()
        for _ in range(8):
            complaints = sections.add_complaint(complaints)
        assert len(complaints) == 5
        assert len({c.id for c in complaints}) == 5

    def test_new_complaint_defaults(self):
        (complaint,) = sections.add_complaint(())
        assert complaint.complaint == ""
        assert complaint.severity == ""
        assert complaint.duration.unit == "d"
        assert complaint.specialty == ""
        assert complaint.red_flag_triggered is False

    def test_severe_chest_pain_is_a_red_flag(self):
        complaints = sections.add_complaint(())
        cid = complaints[0].id

        complaints = sections.update_complaint(complaints, cid, complaint="Chest Pain")
        assert complaints[0].specialty == "Cardiology"
        assert complaints[0].red_flag_triggered is False

        complaints = sections.update_complaint(complaints, cid, severity="Severe")
        assert complaints[0].red_flag_triggered is True

    def test_mild_chest_pain_is_not_a_red_flag(self):
        complaints = sections.add_complaint(())
        complaints = sections.update_complaint(
            complaints, complaints[0].id, complaint="Chest Pain", severity="Mild"
        )
        assert complaints[0].specialty == "Cardiology"
        assert complaints[0].red_flag_triggered is False

    def test_lookup_ignores_case(self):
        complaints = sections.add_complaint(())
        complaints = sections.update_complaint(
            complaints, complaints[0].id, complaint="shortness of BREATH", severity="Severe"
        )
        assert complaints[0].specialty == "Cardiology"
        assert complaints[0].red_flag_triggered is True

    @pytest.mark.parametrize("severity", ["", "Mild", "Moderate", "Severe"])
    def test_unknown_complaint_has_no_specialty(self, severity):
        complaints = sections.add_complaint(())
        complaints = sections.update_complaint(
            complaints, complaints[0].id, complaint="made up symptom", severity=severity
        )
        assert complaints[0].specialty == ""
        assert complaints[0].red_flag_triggered is False

    def test_editing_away_from_master_clears_derived_fields(self):
        complaints = sections.add_complaint(())
        cid = complaints[0].id
        complaints = sections.update_complaint(
            complaints, cid, complaint="Chest Pain", severity="Severe"
        )
        complaints = sections.update_complaint(complaints, cid, complaint="Chest Pai")
        assert complaints[0].specialty == ""
        assert complaints[0].red_flag_triggered is False

    def test_update_leaves_other_complaints_alone(self):
        complaints = sections.add_complaint(sections.add_complaint(()))
        updated = sections.update_complaint(complaints, complaints[0].id, complaint="Cough")
        assert updated[1] is complaints[1]

    def test_duration_and_invalid_values(self):
        complaints = sections.add_complaint(())
        cid = complaints[0].id
        complaints = sections.update_complaint(
            complaints, cid, duration={"value": "3", "unit": "w"}
        )
        assert complaints[0].duration.value == "3"
        with pytest.raises(ValidationError):
            sections.update_complaint(complaints, cid, severity="Unbearable")

    def test_remove(self):
        complaints = sections.add_complaint(sections.add_complaint(()))
        remaining = sections.remove_complaint(complaints, complaints[0].id)
        assert [c.id for c in remaining] == [complaints[1].id]


class TestChronicConditions:
    def test_add_condition_defaults_and_duplicates(self):
        conditions = sections.add_condition((), "Hypertension")
        conditions = sections.add_condition(conditions, "Hypertension")
        assert len(conditions) == 2
        assert conditions[0].duration == "Unknown"
        assert conditions[0].on_medication == "Unknown"
        assert conditions[0].medications == ()

    def test_medication_lifecycle(self):
        conditions = sections.add_condition((), "Diabetes Mellitus")
        cid = conditions[0].id

        conditions = sections.add_medication_to_condition(conditions, cid)
        med = conditions[0].medications[0]
        assert med.frequency == "OD"
        assert med.route == "Oral"

        conditions = sections.update_condition_medication(
            conditions, cid, med.id, name="Metformin", dose="500 mg", frequency="BD"
        )
        assert conditions[0].medications[0].name == "Metformin"
        assert conditions[0].medications[0].frequency == "BD"

        conditions = sections.remove_condition_medication(conditions, cid, med.id)
        assert conditions[0].medications == ()

    def test_medications_belong_to_one_condition(self):
        conditions = sections.add_condition(sections.add_condition((), "Asthma"), "COPD")
        conditions = sections.add_medication_to_condition(
            conditions, conditions[0].id, MedicationDetails(name="Salbutamol")
        )
        assert [m.name for m in conditions[0].medications] == ["Salbutamol"]
        assert conditions[1].medications == ()

    def test_update_and_remove_condition(self):
        conditions = sections.add_condition((), "Asthma")
        cid = conditions[0].id
        conditions = sections.update_condition(conditions, cid, on_medication="Yes")
        assert conditions[0].on_medication == "Yes"
        assert sections.remove_condition(conditions, cid) == ()


class TestAllergies:
    def test_toggle_type(self):
        allergy = sections.toggle_allergy_type(Allergy(), "Drug")
        allergy = sections.toggle_allergy_type(allergy, "Food")
        assert allergy.types == ("Drug", "Food")
        allergy = sections.toggle_allergy_type(allergy, "Drug")
        assert allergy.types == ("Food",)

    def test_set_and_update(self):
        allergy = sections.set_has_allergies(Allergy(), True)
        allergy = sections.update_allergy(allergy, substance="Penicillin", severity="Severe")
        assert allergy.has_allergies is True
        assert allergy.substance == "Penicillin"

    def test_reaction_length_limit(self):
        with pytest.raises(ValidationError):
            sections.update_allergy(Allergy(), reaction="x" * 161)


class TestPastHistory:
    def test_illnesses_capped_at_five(self):
        history = PastHistory()
        for name in ["Malaria", "Typhoid", "Dengue", "Jaundice", "Measles", "Mumps"]:
            history = sections.add_illness(history, name)
        assert history.illnesses == ("Malaria", "Typhoid", "Dengue", "Jaundice", "Measles")

    def test_duplicate_illness_is_ignored(self):
        history = sections.add_illness(PastHistory(), "Malaria")
        again = sections.add_illness(history, "Malaria")
        assert again is history
        assert sections.add_illness(history, "  Malaria  ") is history

    def test_blank_illness_is_ignored(self):
        history = PastHistory()
        assert sections.add_illness(history, "   ") is history

    def test_remove_illness(self):
        history = sections.add_illness(sections.add_illness(PastHistory(), "A"), "B")
        assert sections.remove_illness(history, "A").illnesses == ("B",)

    def test_surgeries_and_hospitalizations(self):
        history = PastHistory()
        for year in range(2010, 2017):
            history = sections.add_surgery(history, "Appendectomy", str(year))
            history = sections.add_hospitalization(history, "Pneumonia", str(year))
        assert len(history.surgeries) == 5
        assert len(history.hospitalizations) == 5

        history = sections.remove_surgery(history, 0)
        history = sections.remove_hospitalization(history, 4)
        assert history.surgeries[0].year == "2011"
        assert history.hospitalizations[-1].year == "2013"

    def test_current_medications(self):
        history = sections.add_current_medication(PastHistory())
        med_id = history.current_medications[0].id
        history = sections.update_current_medication(history, med_id, name="Aspirin")
        assert history.current_medications[0].name == "Aspirin"
        history = sections.remove_current_medication(history, med_id)
        assert history.current_medications == ()

    def test_copy_from_chronic(self):
        conditions = (
            ChronicCondition(name="Diabetes Mellitus", medications=(MedicationDetails(name="Metformin"),)),
            ChronicCondition(name="Hypertension", medications=(MedicationDetails(name="Amlodipine"),)),
        )
        history = sections.add_current_medication(PastHistory(), MedicationDetails(name="Old"))
        history = sections.copy_from_chronic(history, conditions)
        assert [m.name for m in history.current_medications] == ["Metformin", "Amlodipine"]

    def test_overall_compliance(self):
        history = sections.set_overall_compliance(PastHistory(), "Missed")
        assert history.overall_compliance == "Missed"
