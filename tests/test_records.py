import pytest

from preopd.errors import UnknownCategoryError
from preopd.intake.records import ExtractedRecords


def _add(records, category, name, text):
    return records.add(category, name=name, content_type="text/plain", size=len(text), text=text)


def test_combined_text_per_category():
    records = ExtractedRecords()
    _add(records, "lab-reports", "cbc.txt", "CBC normal")
    _add(records, "lab-reports", "lipids.txt", "LDL 130")
    _add(records, "radiology", "cxr.txt", "No acute findings")

    assert records.combined("lab-reports") == "CBC normal\n\nLDL 130"
    assert records.as_map() == {
        "lab-reports": "CBC normal\n\nLDL 130",
        "radiology": "No acute findings",
    }


def test_removing_one_file_keeps_the_others():
    records = ExtractedRecords()
    first = _add(records, "prescriptions", "rx1.txt", "Metformin")
    _add(records, "prescriptions", "rx2.txt", "Amlodipine")

    assert records.remove("prescriptions", first.id) is True
    assert records.combined("prescriptions") == "Amlodipine"
    assert records.remove("prescriptions", first.id) is False


def test_empty_categories_are_left_out():
    records = ExtractedRecords()
    only = _add(records, "other", "note.txt", "misc")
    records.remove("other", only.id)
    assert records.as_map() == {}


def test_unknown_category():
    records = ExtractedRecords()
    with pytest.raises(UnknownCategoryError):
        _add(records, "genomics", "g.txt", "x")
    with pytest.raises(KeyError):
        records.combined("genomics")


def test_listing_and_clear():
    records = ExtractedRecords()
    record = _add(records, "discharge-summaries", "dc.txt", "Discharged stable")
    listing = records.listing()
    assert listing["discharge-summaries"] == [
        {"id": record.id, "name": "dc.txt", "contentType": "text/plain", "size": 17}
    ]
    assert listing["lab-reports"] == []

    records.clear()
    assert records.as_map() == {}


def test_check_category():
    records = ExtractedRecords()
    records.check_category("radiology")
    with pytest.raises(UnknownCategoryError):
        records.check_category("genomics")
