"""
Error kinds for patient record operations and the result wrapper the
service layer hands back to the route handlers.
"""
from dataclasses import dataclass
from typing import Optional, Any


class PatientRecordError(Exception):
    """Base class for everything the patient service can report."""


class RecordValidationError(PatientRecordError):
    """Required field missing, blank, badly typed or outside its enum."""

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.fields = list(fields or [])


class RecordNotFoundError(PatientRecordError):
    """No patient with the given id."""

    def __init__(self, patient_id):
        super().__init__(f"Patient {patient_id} not found")
        self.patient_id = patient_id


class PersistenceError(PatientRecordError):
    """Database unreachable or the statement failed."""


@dataclass
class ServiceResult:
    patient: Optional[Any] = None
    error: Optional[PatientRecordError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error):
        return cls(error=error)
