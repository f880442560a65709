from datetime import datetime, timezone

import pytest

from ehr.app.core.errors import RecordValidationError
from ehr.app.models.forms import PatientCreate, PatientFilter, PatientUpdate, form_payload


VALID = {"fullName": "John Smith", "age": "54", "condition": "Chest pain"}


def test_create_applies_defaults():
    data = PatientCreate.parse(VALID).values()

    assert data["full_name"] == "John Smith"
    assert data["age"] == 54
    assert data["department"] == "General Ward"
    assert data["status"] == "Admitted"
    assert data["heart_rate"] == 0
    assert data["blood_pressure"] == "N/A"
    assert data["temperature"] == 36.5
    assert data["room_number"] == "TBA"
    assert data["notes"] is None
    assert "admission_date" not in data


def test_create_trims_name_and_notes():
    data = PatientCreate.parse({**VALID, "fullName": "  Jane Doe ", "notes": "  stable  "}).values()
    assert data["full_name"] == "Jane Doe"
    assert data["notes"] == "stable"


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_create_rejects_blank_name(name):
    with pytest.raises(RecordValidationError) as excinfo:
        PatientCreate.parse({**VALID, "fullName": name})
    assert "fullName" in excinfo.value.fields


@pytest.mark.parametrize("missing", ["fullName", "age", "condition"])
def test_create_rejects_missing_required_field(missing):
    payload = {k: v for k, v in VALID.items() if k != missing}
    with pytest.raises(RecordValidationError) as excinfo:
        PatientCreate.parse(payload)
    assert missing in excinfo.value.fields


def test_create_accepts_fractional_age_and_heart_rate():
    data = PatientCreate.parse({**VALID, "age": "0.5", "heartRate": "128.5"}).values()
    assert (data["age"], data["heart_rate"]) == (0.5, 128.5)


def test_create_rejects_non_numeric_age():
    with pytest.raises(RecordValidationError):
        PatientCreate.parse({**VALID, "age": "forty"})


@pytest.mark.parametrize("field,value", [("department", "Oncology"), ("department", "icu"), ("status", "Deceased")])
def test_create_rejects_values_outside_enums(field, value):
    with pytest.raises(RecordValidationError) as excinfo:
        PatientCreate.parse({**VALID, field: value})
    assert field in excinfo.value.fields


def test_create_admission_date_is_normalised_to_utc():
    data = PatientCreate.parse({**VALID, "admissionDate": "2024-03-01T10:30:00+02:00"}).values()
    assert data["admission_date"] == datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)


def test_update_only_reports_supplied_fields():
    changes = PatientUpdate.parse({"roomNumber": "12A"}).changes()
    assert changes == {"room_number": "12A"}


def test_update_still_validates_supplied_fields():
    with pytest.raises(RecordValidationError):
        PatientUpdate.parse({"fullName": "   "})
    with pytest.raises(RecordValidationError):
        PatientUpdate.parse({"status": "Unknown"})


def test_update_cannot_clear_required_field():
    with pytest.raises(RecordValidationError):
        PatientUpdate.parse({"age": None})


def test_form_payload_drops_blank_optional_fields():
    form = {
        "fullName": "",
        "age": "33",
        "condition": "Flu",
        "roomNumber": "",
        "notes": "   ",
        "department": "ICU",
        "csrf": "ignored",
    }
    assert form_payload(form) == {"fullName": "", "age": "33", "condition": "Flu", "department": "ICU"}


def test_filter_defaults_to_all_departments():
    criteria = PatientFilter(search="", department=None)
    assert criteria.search is None
    assert criteria.department == "All"
    assert criteria.department_filter is None


def test_filter_keeps_unknown_department():
    assert PatientFilter(department="Oncology").department_filter == "Oncology"
