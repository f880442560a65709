"""
Patient record operations on top of a SQLAlchemy session.

Route handlers call these and look at the returned ``ServiceResult``;
nothing here raises for validation, lookup or database failures except
``list_patients``, whose caller answers with a server error.
"""
import logging
from dataclasses import dataclass, asdict

from sqlalchemy import select, or_
from sqlalchemy.exc import SQLAlchemyError

from ehr.app.core.errors import (
    PatientRecordError,
    PersistenceError,
    RecordNotFoundError,
    ServiceResult,
)
from ehr.app.models.forms import PatientCreate, PatientUpdate
from ehr.app.models.patient import Patient

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = (Patient.full_name, Patient.condition, Patient.room_number)


@dataclass
class PatientStats:
    total: int = 0
    critical: int = 0
    icu: int = 0
    admitted: int = 0

    def as_dict(self):
        return asdict(self)


def build_patient_filters(criteria):
    """
    WHERE clauses for a ``PatientFilter``. An empty list matches everything.

    The search text is matched as a literal, case-insensitive substring of
    name, condition or room number; LIKE wildcards in it are escaped.
    """
    clauses = []
    if criteria.search:
        clauses.append(or_(*(column.icontains(criteria.search, autoescape=True) for column in SEARCH_COLUMNS)))
    department = criteria.department_filter
    if department is not None:
        clauses.append(Patient.department == department)
    return clauses


def compute_stats(patients):
    # counts over the rows on screen, not the whole table
    return PatientStats(
        total=len(patients),
        critical=sum(1 for p in patients if p.status == "Critical"),
        icu=sum(1 for p in patients if p.department == "ICU"),
        admitted=sum(1 for p in patients if p.status == "Admitted"),
    )


def list_patients(db, criteria):
    stmt = select(Patient).where(*build_patient_filters(criteria)).order_by(Patient.admission_date.desc())
    try:
        return list(db.scalars(stmt))
    except SQLAlchemyError as exc:
        logger.exception("Listing patients failed")
        raise PersistenceError("Could not load patients") from exc


def get_patient(db, patient_id):
    try:
        patient = db.get(Patient, patient_id)
    except SQLAlchemyError as exc:
        logger.exception("Lookup of patient %s failed", patient_id)
        return ServiceResult.failed(PersistenceError(str(exc)))
    if patient is None:
        return ServiceResult.failed(RecordNotFoundError(patient_id))
    return ServiceResult(patient=patient)


def create_patient(db, payload):
    try:
        data = PatientCreate.parse(payload)
    except PatientRecordError as exc:
        logger.warning("Rejected new patient: %s", exc)
        return ServiceResult.failed(exc)

    patient = Patient(**data.values())
    try:
        db.add(patient)
        db.commit()
        db.refresh(patient)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Saving new patient failed")
        return ServiceResult.failed(PersistenceError(str(exc)))

    logger.info("Created patient %s (%s, %s)", patient.id, patient.full_name, patient.department)
    return ServiceResult(patient=patient)


def update_patient(db, patient_id, payload):
    try:
        changes = PatientUpdate.parse(payload).changes()
    except PatientRecordError as exc:
        logger.warning("Rejected update of patient %s: %s", patient_id, exc)
        return ServiceResult.failed(exc)

    result = get_patient(db, patient_id)
    if not result.success:
        return result

    patient = result.patient
    for field, value in changes.items():
        setattr(patient, field, value)
    try:
        db.commit()
        db.refresh(patient)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Updating patient %s failed", patient_id)
        return ServiceResult.failed(PersistenceError(str(exc)))

    logger.info("Updated patient %s: %s", patient_id, ", ".join(sorted(changes)) or "no changes")
    return ServiceResult(patient=patient)


def delete_patient(db, patient_id):
    """Hard delete. A missing id is reported but the caller treats it as done."""
    result = get_patient(db, patient_id)
    if not result.success:
        return result

    try:
        db.delete(result.patient)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Deleting patient %s failed", patient_id)
        return ServiceResult.failed(PersistenceError(str(exc)))

    logger.info("Deleted patient %s", patient_id)
    return result
