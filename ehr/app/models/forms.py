"""
Request models for the patient routes.

Form posts arrive as flat camelCase fields (``fullName``, ``roomNumber``,
``heartRate`` ...). ``form_payload`` turns them into the dict the models
validate; the models in turn decide what gets written.
"""
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ehr.app.core.errors import RecordValidationError
from ehr.app.models.patient import DEPARTMENTS, STATUSES, DEFAULT_DEPARTMENT, DEFAULT_STATUS

Department = Literal[DEPARTMENTS]
Status = Literal[STATUSES]

ALL_DEPARTMENTS = "All"

FORM_FIELDS = (
    "fullName",
    "age",
    "condition",
    "department",
    "status",
    "heartRate",
    "bloodPressure",
    "temperature",
    "roomNumber",
    "notes",
    "admissionDate",
)
REQUIRED_FIELDS = ("fullName", "age", "condition")


def form_payload(form):
    """
    Keep only the patient fields that were actually supplied.

    A blank optional field counts as not supplied. A blank required field is
    kept so validation can reject it.
    """
    payload = {}
    for name in FORM_FIELDS:
        value = form.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip() and name not in REQUIRED_FIELDS:
            continue
        payload[name] = value
    return payload


def _as_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class _PatientForm(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @classmethod
    def parse(cls, payload):
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            fields = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
            raise RecordValidationError(f"Invalid patient data: {', '.join(fields)}", fields) from exc


class PatientCreate(_PatientForm):
    full_name: str = Field(min_length=1, max_length=200)
    age: float
    condition: str = Field(min_length=1)
    department: Department = DEFAULT_DEPARTMENT
    status: Status = DEFAULT_STATUS
    heart_rate: float = 0
    blood_pressure: str = Field("N/A", max_length=20)
    temperature: float = 36.5
    room_number: str = Field("TBA", max_length=20)
    notes: Optional[str] = None
    admission_date: Optional[datetime] = None

    @field_validator("admission_date")
    @classmethod
    def _utc_admission(cls, value):
        return _as_utc(value)

    def values(self):
        data = self.model_dump()
        if data["admission_date"] is None:
            del data["admission_date"]  # column default stamps creation time
        return data


class PatientUpdate(_PatientForm):
    """Every field optional; only the ones present in the payload are replaced."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    age: Optional[float] = None
    condition: Optional[str] = Field(None, min_length=1)
    department: Optional[Department] = None
    status: Optional[Status] = None
    heart_rate: Optional[float] = None
    blood_pressure: Optional[str] = Field(None, max_length=20)
    temperature: Optional[float] = None
    room_number: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None
    admission_date: Optional[datetime] = None

    @field_validator("full_name", "age", "condition", "department", "status", "admission_date")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        return value

    @field_validator("admission_date")
    @classmethod
    def _utc_admission(cls, value):
        return _as_utc(value)

    def changes(self):
        return self.model_dump(exclude_unset=True)


class PatientFilter(BaseModel):
    search: Optional[str] = None
    department: str = ALL_DEPARTMENTS

    @field_validator("search")
    @classmethod
    def _blank_search(cls, value):
        return value or None

    @field_validator("department", mode="before")
    @classmethod
    def _blank_department(cls, value):
        return value or ALL_DEPARTMENTS

    @property
    def department_filter(self):
        if self.department == ALL_DEPARTMENTS:
            return None
        return self.department
